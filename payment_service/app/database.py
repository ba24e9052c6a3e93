from contextlib import contextmanager

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .errors import StorageError
from .logging_config import get_logger

logger = get_logger(__name__)

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")

# Base class for declarative ORM models.
Base = declarative_base()


def make_engine(database_url: str):
    """Create the SQLAlchemy engine for the given connection string."""
    connect_args = {}
    engine_args = {}
    if database_url.startswith("sqlite"):
        # FastAPI serves sync routes from a threadpool.
        connect_args["check_same_thread"] = False
        if database_url in IN_MEMORY_URLS:
            # Every new connection would see its own empty database.
            engine_args["poolclass"] = StaticPool
    return create_engine(database_url, connect_args=connect_args, **engine_args)


def make_session_factory(engine):
    """Create a configured "Session" class for database interactions."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """FastAPI dependency to get a DB session for a single request."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        # Ensure the session is always closed after the request is finished.
        db.close()


def init_db(bind) -> None:
    """Create tables that do not exist yet."""
    # Import models so their tables are registered on Base.metadata.
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=bind)


def ping(db) -> bool:
    """Run a trivial query; raises StorageError when the database is unreachable."""
    with storage_errors(db):
        return db.execute(text("SELECT 1 AS result")).scalar() == 1


@contextmanager
def storage_errors(db):
    """Turn any SQLAlchemy failure into a StorageError carrying the driver message."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("storage_failure", error=str(exc))
        raise StorageError(str(exc)) from exc
