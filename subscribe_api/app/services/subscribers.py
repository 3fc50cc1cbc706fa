"""Subscriber storage: validate, normalize and insert-once."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from ..core.database import Database
from ..core.validation import validate_email
from ..db.models import DbSubscriber

logger = logging.getLogger(__name__)

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class SubscribeOutcome(StrEnum):
    STORED = "stored"
    CONFLICT = "conflict"


class SubscriberStore:
    """Database-backed store for newsletter subscribers."""

    def __init__(self, db: Database) -> None:
        self.db = db
        try:
            self._insert = _INSERTS[db.dialect]
        except KeyError:
            raise RuntimeError(f"Unsupported database dialect: {db.dialect}") from None

    def subscribe(self, email: Any) -> SubscribeOutcome:
        """
        Store ``email`` once.

        Raises InvalidSubscriptionError for missing or malformed input. Storage
        failures propagate as SQLAlchemyError.
        """
        normalized = validate_email(email)

        with self.db.session() as session:
            # RETURNING yields nothing when the conflict clause skipped the row
            inserted = (
                session.execute(self.insert_statement(normalized)).scalar_one_or_none()
                is not None
            )

        if inserted:
            logger.info("Subscriber stored")
            return SubscribeOutcome.STORED

        logger.info("Subscriber already registered")
        return SubscribeOutcome.CONFLICT

    def insert_statement(self, normalized_email: str):
        return (
            self._insert(DbSubscriber)
            .values(email=normalized_email)
            .on_conflict_do_nothing(index_elements=[DbSubscriber.email])
            .returning(DbSubscriber.id)
        )

    def count(self, email: str | None = None) -> int:
        stmt = select(func.count()).select_from(DbSubscriber)
        if email is not None:
            stmt = stmt.where(DbSubscriber.email == email)
        with self.db.session() as session:
            return int(session.scalar(stmt) or 0)
