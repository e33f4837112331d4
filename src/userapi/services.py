"""Store layer for the users table."""

import logging
from typing import List, Optional

from prometheus_client import Counter
from sqlalchemy import delete, select, update
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.orm import Session

from .models.user import User


logger = logging.getLogger(__name__)

# Prometheus counters for successful writes
USER_CREATED_COUNTER = Counter("users_created_total", "Total users created")
USER_UPDATED_COUNTER = Counter("users_updated_total", "Total users updated")
USER_DELETED_COUNTER = Counter("users_deleted_total", "Total users deleted")


class StoreError(Exception):
    """Raised when the database rejects a statement.

    ``message`` holds the driver's own error text.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _handle_store_error(session: Session, exc: SQLAlchemyError) -> None:
    """Rollback the session and re-raise as ``StoreError``."""
    session.rollback()
    logger.exception("store layer error", exc_info=exc)
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        message = str(exc.orig)
    else:
        message = str(exc)
    raise StoreError(message) from exc


def list_users(session: Session) -> List[User]:
    """Return every user ordered by id."""

    try:
        return list(session.scalars(select(User).order_by(User.id)))
    except SQLAlchemyError as exc:
        _handle_store_error(session, exc)


def get_user(session: Session, user_id: int) -> Optional[User]:
    """Return the user with ``user_id`` or ``None`` when there is none."""

    try:
        return session.scalars(select(User).where(User.id == user_id)).first()
    except SQLAlchemyError as exc:
        _handle_store_error(session, exc)


def create_user(session: Session, name: Optional[str], email: Optional[str]) -> int:
    """Insert a user and return the id assigned by the database."""

    try:
        user = User(name=name, email=email)
        session.add(user)
        session.commit()
        USER_CREATED_COUNTER.inc()
        logger.info("created user id=%s", user.id)
        return user.id
    except SQLAlchemyError as exc:
        _handle_store_error(session, exc)


def update_user(
    session: Session, user_id: int, name: Optional[str], email: Optional[str]
) -> int:
    """Overwrite name and email of a user.

    Returns the number of rows changed, 0 when no such user exists.
    """

    logger.info("update user id=%s", user_id)
    try:
        result = session.execute(
            update(User).where(User.id == user_id).values(name=name, email=email)
        )
        session.commit()
        if result.rowcount:
            USER_UPDATED_COUNTER.inc()
        return result.rowcount
    except SQLAlchemyError as exc:
        _handle_store_error(session, exc)


def delete_user(session: Session, user_id: int) -> int:
    """Delete a user and return the number of rows removed."""

    logger.info("delete user id=%s", user_id)
    try:
        result = session.execute(delete(User).where(User.id == user_id))
        session.commit()
        if result.rowcount:
            USER_DELETED_COUNTER.inc()
        return result.rowcount
    except SQLAlchemyError as exc:
        _handle_store_error(session, exc)
