"""Database setup for storing users."""

import logging
from typing import Dict, List

from sqlalchemy import create_engine, func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()

SEED_USERS: List[Dict[str, str]] = [
    {"name": "John Doe", "email": "john.doe@example.com"},
    {"name": "Jane Smith", "email": "jane.smith@example.com"},
    {"name": "Sam Johnson", "email": "sam.johnson@example.com"},
]


def make_engine(database_url: str) -> Engine:
    """Create an engine, sharing one connection for in-memory SQLite."""
    kwargs = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, future=True, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, future=True)


def init_db(engine: Engine, reset: bool = True, seed: bool = True) -> None:
    """Prepare the users table in a single transaction.

    With ``reset`` the table is dropped first, so every start begins from the
    seed rows. Without it the table is only created when missing and seed
    rows go into an empty table only.
    """
    from .models.user import User

    with engine.begin() as conn:
        if reset:
            Base.metadata.drop_all(bind=conn)
        Base.metadata.create_all(bind=conn)
        if not seed:
            return
        if not reset and conn.execute(select(func.count()).select_from(User)).scalar_one():
            logger.info("users table already populated, skipping seed")
            return
        conn.execute(insert(User), SEED_USERS)
    logger.info("seeded %d users", len(SEED_USERS))
