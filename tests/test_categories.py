import pytest
from sqlalchemy import func, select

from app.core.exceptions import MissingReference, RecordConflict
from app.models import Category
from app.repositories.categories import CategoryRepository


def test_list_categories_requires_user_id(client):
    response = client.get("/categories")

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "userId"


def test_list_categories_sorted_by_name(client):
    for name in ("Video", "Audio", "Photos"):
        client.post("/categories", json={"userId": "demo-user", "name": name})
    client.post("/categories", json={"userId": "other-user", "name": "Zines"})

    response = client.get("/categories", params={"userId": "demo-user"})

    assert response.status_code == 200
    assert [c["name"] for c in response.json()["data"]] == ["Audio", "Photos", "Video"]


def test_create_category_twice_returns_same_row(client, database):
    first = client.post("/categories", json={"userId": "demo-user", "name": "Photos"})
    second = client.post("/categories", json={"userId": "demo-user", "name": "Photos"})

    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["data"] == second.json()["data"]
    with database.session() as s:
        assert s.scalar(select(func.count(Category.id))) == 1


def test_same_name_for_different_users_is_two_rows(client):
    mine = client.post("/categories", json={"userId": "demo-user", "name": "Photos"}).json()["data"]
    theirs = client.post("/categories", json={"userId": "other-user", "name": "Photos"}).json()["data"]

    assert mine["id"] != theirs["id"]


@pytest.mark.parametrize("name", ["", "x" * 65])
def test_create_category_validates_name_length(client, name):
    response = client.post("/categories", json={"userId": "demo-user", "name": name})

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "name"


def test_create_category_accepts_64_characters(client):
    response = client.post("/categories", json={"userId": "demo-user", "name": "x" * 64})

    assert response.status_code == 201


def test_create_category_for_unknown_user_is_missing_reference(client):
    response = client.post("/categories", json={"userId": "ghost", "name": "Photos"})

    assert response.status_code == 400
    assert response.json()["msg"] == "Referenced record is missing. Seed demo records first."


def test_plain_create_conflicts_on_duplicate(db_session, seeded):
    repo = CategoryRepository(db_session)
    repo.create("demo-user", "Photos")

    with pytest.raises(RecordConflict):
        repo.create("demo-user", "Photos")


def test_ensure_absorbs_concurrent_insert(db_session, seeded, monkeypatch):
    repo = CategoryRepository(db_session)
    winner = repo.create("demo-user", "Photos")

    # 模拟另一个请求在本次查找之后、插入之前写入了同名分类
    real_find = repo.find_by_name
    calls = []

    def racing_find(user_id, name):
        calls.append(name)
        if len(calls) == 1:
            return None
        return real_find(user_id, name)

    monkeypatch.setattr(repo, "find_by_name", racing_find)

    result = repo.ensure("demo-user", "Photos")

    assert result.id == winner.id
    assert len(calls) == 2
    assert db_session.scalar(select(func.count(Category.id))) == 1


def test_ensure_reports_missing_user(db_session, seeded):
    with pytest.raises(MissingReference):
        CategoryRepository(db_session).ensure("ghost", "Photos")
