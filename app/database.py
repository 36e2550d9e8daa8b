import logging
import time

from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from app.config import settings

logger = logging.getLogger(__name__)

_url = settings.sqlalchemy_url
_is_sqlite = _url.startswith("sqlite")

engine = create_engine(
    _url,
    # Pooled connections, checked out per request. pre_ping replaces
    # connections the server dropped while they sat idle in the pool.
    pool_pre_ping=True,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
)

if _is_sqlite:
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autoflush=False, bind=engine)

Base = declarative_base()


def open_session(retries: int = None) -> Session:
    """
    Check a session out of the pool, retrying transient connection loss.
    Raises the last OperationalError once the retries are used up.
    """
    attempts = max(1, retries if retries is not None else settings.db_connect_retries)

    for attempt in range(1, attempts + 1):
        db = SessionLocal()
        try:
            # Force a real connection checkout so a dead server fails here
            db.connection()
            return db
        except OperationalError as e:
            db.close()
            if attempt == attempts:
                logger.error(f"Database unavailable after {attempts} attempt(s): {e}")
                raise
            logger.warning(f"Database connection failed (attempt {attempt}/{attempts}), retrying...")
            time.sleep(0.2 * attempt)
