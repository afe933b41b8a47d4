"""Database engine factory and session management."""

from collections.abc import Generator

from sqlalchemy import create_engine as _create_engine
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from protoview.config import config
from protoview.exceptions import ConfigurationError, StoreUnavailableError

_engine = None
_session_factory = None


def get_engine():
    global _engine
    if _engine is None:
        if not config.database.url:
            raise ConfigurationError(
                "DATABASE_URL is not set; point it at the interaction store"
            )
        _engine = _create_engine(
            config.database.url, echo=config.database.echo or config.debug
        )
    return _engine


def get_session_factory():
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _session_factory


def check_connection(engine=None) -> None:
    """Fail fast before any mutation if the store cannot be reached."""
    engine = engine or get_engine()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except OperationalError as exc:
        raise StoreUnavailableError(f"Cannot reach store: {exc}") from exc


def get_db() -> Generator[Session, None, None]:
    """Yield a database session with automatic cleanup."""
    factory = get_session_factory()
    db = factory()
    try:
        yield db
    finally:
        db.close()
