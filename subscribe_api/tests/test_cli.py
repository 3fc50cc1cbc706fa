import pytest
from sqlalchemy.exc import OperationalError
from typer.testing import CliRunner

from subscribe_api import cli
from subscribe_api.app.core.database import Database
from subscribe_api.app.core.logging import setup_logging
from subscribe_api.app.services.subscribers import SubscriberStore

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    # The CLI points the root handler at the runner's temporary stdout
    yield
    setup_logging()


def test_init_db_creates_table(monkeypatch, sqlite_url: str) -> None:
    monkeypatch.setenv("DATABASE_URL", sqlite_url)

    result = runner.invoke(cli.app, ["init-db"])

    assert result.exit_code == 0
    assert "Schema ready" in result.output
    db = Database(sqlite_url)
    try:
        assert SubscriberStore(db=db).count() == 0
    finally:
        db.dispose()


def test_init_db_requires_database_url() -> None:
    result = runner.invoke(cli.app, ["init-db"])

    assert result.exit_code == 2
    assert "DATABASE_URL" in result.output


def test_add_stores_then_reports_conflict(monkeypatch, sqlite_url: str) -> None:
    monkeypatch.setenv("DATABASE_URL", sqlite_url)

    first = runner.invoke(cli.app, ["add", " Reader@Example.com "])
    second = runner.invoke(cli.app, ["add", "reader@example.com"])

    assert first.exit_code == 0
    assert "stored" in first.output
    assert second.exit_code == 1
    assert "already registered" in second.output


def test_add_reports_invalid_format(monkeypatch, sqlite_url: str) -> None:
    monkeypatch.setenv("DATABASE_URL", sqlite_url)

    result = runner.invoke(cli.app, ["add", "not-an-email"])

    assert result.exit_code == 1
    assert "Invalid format" in result.output


def test_serve_runs_uvicorn_with_configured_port(monkeypatch) -> None:
    calls = {}
    monkeypatch.setenv("PORT", "5055")
    monkeypatch.setattr(cli.uvicorn, "run", lambda target, **kwargs: calls.update(target=target, **kwargs))

    result = runner.invoke(cli.app, ["serve", "--host", "127.0.0.1"])

    assert result.exit_code == 0
    assert calls["target"] == "subscribe_api.main:app"
    assert calls["host"] == "127.0.0.1"
    assert calls["port"] == 5055
    assert calls["reload"] is False


def test_add_reports_storage_error(monkeypatch, sqlite_url: str) -> None:
    monkeypatch.setenv("DATABASE_URL", sqlite_url)

    def fail(self, email):
        raise OperationalError("INSERT INTO subscribers", {}, Exception("connection lost"))

    monkeypatch.setattr(SubscriberStore, "subscribe", fail)

    result = runner.invoke(cli.app, ["add", "reader@example.com"])

    assert result.exit_code == 1
    assert "storage error" in result.output
    assert not isinstance(result.exception, OperationalError)
