from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator, Optional
import logging
import time

import redis

from .config import settings
from .exceptions import HospitalError, InternalError

logger = logging.getLogger(__name__)


def _create_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    # Bounded pool; requests beyond the bound wait up to DB_POOL_TIMEOUT
    return create_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=1800,  # Recycle connections after 30 minutes
        pool_pre_ping=True,
    )


engine = _create_engine(settings.get_database_url)

if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Redis setup - in-memory stand-in for testing
if settings.TESTING:
    class RedisMock:
        def __init__(self):
            self.data = {}
            self.expiry = {}

        def _purge(self, key):
            expires_at = self.expiry.get(key)
            if expires_at is not None and expires_at <= time.time():
                self.data.pop(key, None)
                self.expiry.pop(key, None)

        def get(self, key):
            self._purge(key)
            return self.data.get(key)

        def incr(self, key):
            self._purge(key)
            self.data[key] = str(int(self.data.get(key, "0")) + 1)
            return int(self.data[key])

        def expire(self, key, seconds):
            if key in self.data:
                self.expiry[key] = time.time() + seconds
                return True
            return False

        def delete(self, key):
            self.expiry.pop(key, None)
            return 1 if self.data.pop(key, None) is not None else 0

        def flushdb(self):
            self.data.clear()
            self.expiry.clear()
            return True

    redis_client = RedisMock()
else:
    redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)


# Database dependency
def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Redis dependency
def get_redis():
    """Get Redis client."""
    return redis_client


def commit_or_rollback(db: Session, on_integrity_error: Optional[HospitalError] = None):
    """Commit the session, translating store failures into domain errors.

    A constraint violation is reported as ``on_integrity_error`` when given;
    anything else the store raises becomes an ``InternalError``.
    """
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if on_integrity_error is not None:
            raise on_integrity_error from exc
        logger.error(f"Integrity error on commit: {exc.orig}")
        raise InternalError("Database constraint violated") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Database error on commit: {exc}")
        raise InternalError() from exc


def seed_admin(db: Session) -> None:
    """Create the configured admin account if it does not exist yet."""
    from ..models.admin import Admin
    from .security import get_password_hash

    existing = db.query(Admin).filter(Admin.admin_id == settings.ADMIN_ID).first()
    if existing:
        return

    db.add(Admin(
        admin_id=settings.ADMIN_ID,
        password_hash=get_password_hash(settings.ADMIN_PASSWORD),
    ))
    commit_or_rollback(db)
    logger.info(f"Seeded admin account '{settings.ADMIN_ID}'")


# Database initialization
def init_db():
    """Initialize database tables and the admin account."""
    from .. import models  # noqa: F401  (registers every table on Base)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_admin(db)
    finally:
        db.close()
