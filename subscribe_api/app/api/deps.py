from fastapi import HTTPException, Request, status

from ..core.database import Database
from ..core.errors import STORAGE_ERROR
from ..services.subscribers import SubscriberStore


def get_db(request: Request) -> Database:
    """Dependency returning the database created in the app lifespan."""
    db: Database | None = getattr(request.app.state, "db", None)
    if db is None:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=STORAGE_ERROR)
    return db


def get_subscriber_store(request: Request) -> SubscriberStore:
    return SubscriberStore(db=get_db(request))
