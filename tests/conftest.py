"""
Pytest configuration and fixtures.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from payment_service.app import gateway, orders
from payment_service.app.config import Settings
from payment_service.app.database import Base, init_db, make_engine, make_session_factory
from payment_service.app.main import create_app


@pytest.fixture
def engine():
    """Fresh in-memory database shared by every connection of one test."""
    engine = make_engine("sqlite://")
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def settings():
    return Settings.for_profile("combined", database_url="sqlite://", log_level="WARNING")


def make_client(engine, settings):
    app = create_app(settings)
    # Point the app at the test database instead of its configured one.
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    return TestClient(app)


@pytest.fixture
def client(engine, settings):
    return make_client(engine, settings)


@pytest.fixture
def lite_client(engine):
    return make_client(engine, Settings.for_profile("lite", database_url="sqlite://", log_level="WARNING"))


@pytest.fixture
def force_outcome(monkeypatch):
    """Make checkout's simulated gateway return the given result."""
    def force(result):
        monkeypatch.setattr(orders, "pick_outcome", lambda: result)
    return force


@pytest.fixture
def force_gateway_outcome(monkeypatch):
    """Make the /authorize simulator return the given result."""
    def force(result):
        monkeypatch.setattr(gateway, "pick_gateway_outcome", lambda: result)
    return force


@pytest.fixture
def client_for(engine):
    """Build a client for custom settings against the test database."""
    return lambda settings: make_client(engine, settings)
