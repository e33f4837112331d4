import pytest
from fastapi.testclient import TestClient

from userapi.api import create_app
from userapi.config import Settings
from userapi.database import init_db, make_engine, make_session_factory


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", _env_file=None)


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def engine():
    """Provide an isolated, freshly seeded in-memory database for each test."""
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_local(engine):
    return make_session_factory(engine)
