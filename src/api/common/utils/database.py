import os
from contextlib import contextmanager
from typing import Iterator
from fastapi.logger import logger
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from src.api.common.config import get_settings
from src.api.common.exceptions import PersistenceError


def _get_database_url_from_env_vars():
    DB_SCHEME = os.getenv("DB_SCHEME", "postgresql")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "postgres")
    DB_HOST = os.getenv("DB_HOST", "db")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "contracts")
    return f"{DB_SCHEME}://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"


def get_database_url():
    return os.getenv("DATABASE_URL", _get_database_url_from_env_vars())


DATABASE_URL = get_database_url()

engine = create_engine(
    DATABASE_URL,
    echo=not get_settings().is_production,
)


def get_db():
    with Session(engine) as session:
        yield session


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a unit of work against the session and commit it once.

    Any exception rolls back every write made inside the block. Store
    failures are re-raised as PersistenceError; engine errors propagate
    unchanged.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Store rejected the unit of work: {str(e)}")
        raise PersistenceError(f"Could not persist changes: {str(e)}") from e
    except Exception:
        db.rollback()
        raise
