from contextlib import contextmanager
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import logging

from .config import settings
from .errors import ConflictError, ServerError, TrailMateError

logger = logging.getLogger(__name__)


def engine_options(database_url: str) -> dict:
    """Engine keyword arguments suited to the database backend."""
    if database_url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        # In-memory databases only exist per connection, so share a single one
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return options

    return {
        "pool_pre_ping": True,
        "pool_recycle": 300,  # Recycle connections every 5 minutes
        "pool_size": 10,
        "max_overflow": 20,
    }


@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((Exception,)),
    reraise=True
)
def create_database_engine(database_url: str = None):
    """Create database engine with retry logic."""
    database_url = database_url or settings.DATABASE_URL
    logger.info(f"Attempting to connect to database: {database_url.split('@')[1] if '@' in database_url else 'local'}")

    engine = create_engine(
        database_url,
        echo=settings.DEBUG,
        **engine_options(database_url),
    )

    # Test the connection
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
        logger.info("Database connection successful!")

    return engine


# Create engine with the updated settings
try:
    engine = create_database_engine()
except Exception as e:
    logger.error(f"Failed to create database engine after retries: {e}")
    # Keep the API importable; requests get a 503 until the database is back
    engine = None


def get_db():
    """Get database session."""
    if not engine:
        raise ServerError(
            "Database is temporarily unavailable. Please try again later.",
            status_code=503,
        )

    with Session(engine) as session:
        yield session


@contextmanager
def write_transaction(db: Session, action: str, conflict_message: Optional[str] = None):
    """Commit everything written inside the block, or nothing at all."""
    try:
        yield
        db.commit()
    except TrailMateError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        if conflict_message:
            logger.info(f"Rejected {action}: {conflict_message}")
            raise ConflictError(conflict_message) from e
        logger.exception(f"Failed to {action}")
        raise ServerError() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to {action}")
        raise ServerError() from e
