from pathlib import Path

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from protoview.db.models import Base

# Use SQLite for tests -- fast, no PG dependency needed
TEST_DATABASE_URL = "sqlite://"

FIXTURES = Path(__file__).parent / "fixtures"


def _enable_foreign_keys(eng):
    # SQLite needs explicit FK enforcement
    @event.listens_for(eng, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@pytest.fixture(scope="session")
def engine():
    eng = create_engine(TEST_DATABASE_URL)
    _enable_foreign_keys(eng)
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)


@pytest.fixture()
def db(engine) -> Session:
    connection = engine.connect()
    transaction = connection.begin()
    session = sessionmaker(bind=connection)()

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture()
def session_factory():
    """A private in-memory store per test, for code that commits or rolls back."""
    eng = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    _enable_foreign_keys(eng)
    Base.metadata.create_all(eng)
    yield sessionmaker(bind=eng, expire_on_commit=False)
    eng.dispose()


@pytest.fixture()
def store(session_factory) -> Session:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def fixtures_dir() -> Path:
    return FIXTURES
