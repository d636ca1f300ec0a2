"""
SQLAlchemy engine, session, and base. The Database object is created once at
startup, closed once at shutdown, and handed to whoever needs storage.
"""
import logging
from pathlib import Path
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base, Session

from athan_service.core.errors import StorageUnavailable

logger = logging.getLogger(__name__)

Base = declarative_base()


def resolve_db_url(config_data: Optional[dict] = None) -> str:
    """
    Pick the SQLAlchemy URL from config: database.url, else database.path
    as a sqlite file, else ~/.athan_service/athan.db.
    """
    db_config = (config_data or {}).get("database") or {}
    db_url = db_config.get("url")
    if db_url:
        return db_url

    path = db_config.get("path")
    if path:
        path = Path(path).expanduser().resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{path}"

    base = Path.home() / ".athan_service"
    base.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{base / 'athan.db'}"


class Database:
    """Process-scoped connection pool with explicit init/close lifecycle."""

    def __init__(self, db_url: str):
        self.db_url = db_url
        self._engine = None
        self._SessionLocal = None

    @property
    def is_ready(self) -> bool:
        return self._SessionLocal is not None

    def init(self) -> None:
        """Create the engine, register all tables, and check the connection."""
        if self._engine is not None:
            logger.debug("Database already initialized")
            return

        self._engine = create_engine(self.db_url, echo=False, future=True, pool_pre_ping=True)

        # Import all model modules so tables are registered with Base
        from athan_service.core import models as _core_models  # noqa: F401
        from athan_service.plugins.prayer import models as _prayer_models  # noqa: F401
        from athan_service.plugins.hijri_calendar import models as _hijri_models  # noqa: F401

        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            Base.metadata.create_all(self._engine)
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            self._engine.dispose()
            self._engine = None
            raise StorageUnavailable("Database connection failed") from e

        self._SessionLocal = sessionmaker(
            bind=self._engine, autocommit=False, autoflush=False, expire_on_commit=False
        )
        logger.info(f"Database initialized: {self.db_url.split('?')[0]}")

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._SessionLocal = None
        logger.info("Database connection pool closed.")

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Context manager for a single DB session. Commits on success, rolls back on error."""
        if self._SessionLocal is None:
            logger.error("Database pool not initialized.")
            raise StorageUnavailable("Database service not ready.")
        session = self._SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
