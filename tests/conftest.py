import os
import tempfile

# app.main 在导入时会用默认配置构建一次应用，这里先指向临时目录和内存库
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="media-catalog-uploads-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.core.database import Database, build_engine
from app.main import create_app
from app.models import User, Workspace
from scripts.seed_demo import seed_demo


OTHER_USER_ID = "other-user"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        ENVIRONMENT="testing",
        DATABASE_URL="sqlite://",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def database(settings):
    engine = build_engine(settings, poolclass=StaticPool)
    database = Database(settings, engine=engine)
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def seeded(db_session, settings):
    seed_demo(db_session, settings)
    db_session.add(User(id=OTHER_USER_ID, email="other@mediadb.local", display_name="Other"))
    db_session.add(Workspace(id="other-workspace", name="Other Workspace"))
    db_session.commit()
    return settings


@pytest.fixture
def client(settings, database, seeded):
    app = create_app(settings, database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def upload_root(settings):
    return settings.upload_path


@pytest.fixture
def category(client):
    response = client.post("/categories", json={"userId": "demo-user", "name": "Photos"})
    assert response.status_code == 201
    return response.json()["data"]


@pytest.fixture
def asset_payload(category):
    return {
        "userId": "demo-user",
        "workspaceId": "demo-workspace",
        "title": "Cat",
        "categoryId": category["id"],
        "filePath": "a.png",
        "fileType": "image/png",
        "fileSize": 100,
    }


@pytest.fixture
def create_asset(client, asset_payload):
    def _create(**overrides):
        payload = {**asset_payload, **overrides}
        response = client.post("/assets", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]
    return _create
