import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Set the environment BEFORE any app import
os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("ALLOWED_ORIGINS", "*")


@pytest.fixture(autouse=True)
def isolate_database_env(monkeypatch):
    """Keep a developer's real database settings out of the test run."""
    for key in (
        "DATABASE_URL",
        "SUBSCRIBE_DATABASE_URL",
        "PG_USE_SSL",
        "PG_SSL_CA",
        "PG_SSL_CA_CERT",
        "PG_SSL_INSECURE",
        "STATIC_DIR",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'subscribers.db'}"


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    root = tmp_path / "public"
    root.mkdir()
    (root / "index.html").write_text("<h1>Coming soon</h1>", encoding="utf-8")
    (root / "app.js").write_text("console.log('hi');", encoding="utf-8")
    return root


@pytest.fixture
def app_settings(sqlite_url: str, static_dir: Path):
    from subscribe_api.app.core.config import Settings

    return Settings(database_url=sqlite_url, static_dir=static_dir, app_env="dev")


@pytest.fixture
def db(app_settings):
    from subscribe_api.app.core.database import Database

    database = Database(settings=app_settings)
    database.create_schema()
    yield database
    database.dispose()


@pytest.fixture
def client(app_settings) -> TestClient:
    from subscribe_api.main import create_app

    with TestClient(create_app(app_settings)) as test_client:
        yield test_client
