import os
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base

from core.config import get_settings
from core.errors import PersistenceError
from core.logging import get_logger

logger = get_logger("database")

DATABASE_URL = get_settings().database_url

# Create engine
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all models
Base = declarative_base()


@contextmanager
def get_db_context():
    """
    Context manager for database sessions.
    Automatically closes session when done.

    Usage:
        with get_db_context() as db:
            result = db.query(Model).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_operation(db, action: str):
    """Translate store faults into PersistenceError and roll back the session.

    Usage:
        with store_operation(db, "save patient"):
            db.add(patient)
            db.commit()
    """
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Store operation failed (%s): %s", action, exc)
        raise PersistenceError(f"Could not {action}. Please try again.") from exc


def init_db():
    """Create tables if they don't exist."""
    # Models must be imported so their tables are registered on Base.metadata
    import models  # noqa: F401

    db_path = engine.url.database if engine.url.get_backend_name() == "sqlite" else None
    if db_path and db_path != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    Base.metadata.create_all(bind=engine)
