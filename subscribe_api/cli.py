import logging

import typer
import uvicorn
from sqlalchemy.exc import SQLAlchemyError

from subscribe_api.app.core.config import ConfigurationError, get_settings
from subscribe_api.app.core.database import Database
from subscribe_api.app.core.logging import setup_logging
from subscribe_api.app.core.validation import InvalidSubscriptionError
from subscribe_api.app.services.subscribers import SubscribeOutcome, SubscriberStore

logger = logging.getLogger(__name__)

app = typer.Typer(help="Run and operate the newsletter subscribe API.")


def _open_database() -> Database:
    settings = get_settings()
    setup_logging(settings.log_level)
    try:
        db = Database(settings=settings)
    except ConfigurationError as exc:
        typer.secho(str(exc), err=True, fg=typer.colors.RED)
        raise typer.Exit(code=2)
    return db


@app.command("serve")
def serve(
    host: str = typer.Option(None, "--host", help="Interface to bind (default: HOST or 0.0.0.0)."),
    port: int | None = typer.Option(None, "--port", "-p", min=1, max=65535, help="Port to listen on (default: PORT or 5000)."),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes (development only)."),
) -> None:
    """Start the HTTP server."""
    settings = get_settings()
    uvicorn.run(
        "subscribe_api.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command("init-db")
def init_db() -> None:
    """Create the subscribers table if it does not exist."""
    db = _open_database()
    try:
        db.create_schema()
    finally:
        db.dispose()
    typer.echo("Schema ready")


@app.command("add")
def add(email: str = typer.Argument(..., help="Email address to subscribe.")) -> None:
    """Subscribe an address without going through HTTP."""
    db = _open_database()
    try:
        db.create_schema()
        outcome = SubscriberStore(db=db).subscribe(email)
    except InvalidSubscriptionError as exc:
        typer.secho(exc.message, err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)
    except SQLAlchemyError:
        logger.exception("Database error occurred")
        typer.secho("storage error", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)
    finally:
        db.dispose()

    if outcome is SubscribeOutcome.CONFLICT:
        typer.echo("already registered")
        raise typer.Exit(code=1)
    typer.echo("stored")


if __name__ == "__main__":
    app()
