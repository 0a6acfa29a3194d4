from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from app.core.config import Settings
from app.core.database import Database
from app.core.exceptions import (
    InternalError,
    MissingReference,
    RecordConflict,
    RecordNotFound,
    StorageUnavailable,
    ValidationFailed,
)
from app.main import create_app
from app.repositories.assets import AssetRepository
from app.repositories.base import classify_integrity_error


class PgError(Exception):
    def __init__(self, pgcode, message="error"):
        super().__init__(message)
        self.pgcode = pgcode


class Psycopg3Error(Exception):
    def __init__(self, sqlstate):
        super().__init__("error")
        self.sqlstate = sqlstate


def _integrity(orig):
    return IntegrityError("INSERT ...", {}, orig)


@pytest.mark.parametrize("orig, expected", [
    (PgError("23505"), RecordConflict),
    (PgError("23503"), MissingReference),
    (Psycopg3Error("23505"), RecordConflict),
    (Psycopg3Error("23503"), MissingReference),
    (Exception(1062, "Duplicate entry 'x' for key 'uq'"), RecordConflict),
    (Exception(1452, "Cannot add or update a child row"), MissingReference),
    (Exception("UNIQUE constraint failed: categories.user_id, categories.name"), RecordConflict),
    (Exception("FOREIGN KEY constraint failed"), MissingReference),
    (Exception("NOT NULL constraint failed: assets.title"), InternalError),
])
def test_classify_integrity_error(orig, expected):
    assert isinstance(classify_integrity_error(_integrity(orig)), expected)


def test_error_variants_have_stable_status_codes():
    assert ValidationFailed([]).status_code == 400
    assert StorageUnavailable().status_code == 503
    assert RecordConflict().status_code == 409
    assert MissingReference().status_code == 400
    assert RecordNotFound().status_code == 404
    assert InternalError().status_code == 500


def test_unexpected_error_is_opaque_500(client, monkeypatch):
    def boom(self, *args, **kwargs):
        raise RuntimeError("connection string postgres://secret@db")

    monkeypatch.setattr(AssetRepository, "list", boom)

    response = client.get("/assets", params={"userId": "demo-user"})

    assert response.status_code == 500
    assert response.json() == {"code": 500, "msg": "Unexpected server error", "data": None}
    assert "secret" not in response.text


def test_conflict_maps_to_409(client, monkeypatch):
    def conflict(self, *args, **kwargs):
        raise RecordConflict()

    monkeypatch.setattr(AssetRepository, "archive", conflict)

    response = client.delete("/assets/anything")

    assert response.status_code == 409
    assert response.json()["msg"] == "Record already exists"


def test_request_validation_is_400_not_422(client):
    response = client.patch("/assets/some-id", content=b"[]", headers={"content-type": "application/json"})

    assert response.status_code == 400
    assert response.json()["msg"] == "Validation failed"


def test_unbuildable_database_returns_503(tmp_path):
    settings = Settings(
        _env_file=None,
        DATABASE_URL="nosuchdialect://localhost/db",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        LOG_LEVEL="WARNING",
    )
    database = Database(settings)
    assert not database.available

    with TestClient(create_app(settings, database)) as client:
        response = client.get("/categories", params={"userId": "demo-user"})
        health = client.get("/health")

    assert response.status_code == 503
    assert "DATABASE_URL" in response.json()["msg"]
    assert health.json()["status"] == "degraded"


def test_unreachable_database_returns_503(tmp_path):
    settings = Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path}/missing-dir/catalog.db",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        LOG_LEVEL="WARNING",
    )

    with TestClient(create_app(settings)) as client:
        response = client.get("/assets", params={"userId": "demo-user"})

    assert response.status_code == 503


def test_response_serialization_failure_is_opaque_500(client, monkeypatch):
    def broken_row(self, asset_id):
        return SimpleNamespace(id=asset_id, title=None)

    monkeypatch.setattr(AssetRepository, "archive", broken_row)

    response = client.delete("/assets/anything")

    assert response.status_code == 500
    assert response.json() == {"code": 500, "msg": "Unexpected server error", "data": None}
