"""SQLite storage behind the settings store."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, event, func, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .models import Base, PluginSetting

logger = logging.getLogger(__name__)


def _configure_connection(dbapi_conn, connection_record) -> None:
    # Dispatch reads must not wait on an admin write
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


class DatabaseEngine:
    """Owns the SQLite engine holding plugin settings.

    Settings are written rarely (admin API, CLI) and read on every dispatch,
    so each caller gets a short-lived session from :meth:`session_scope`.
    """

    def __init__(self, db_path: str, busy_timeout: float = 5.0):
        """
        Args:
            db_path: Path to the SQLite database file
            busy_timeout: Seconds a connection waits for a concurrent writer
        """
        self.db_path = db_path
        self.busy_timeout = busy_timeout
        self.engine: Optional[Engine] = None
        self.session_factory: Optional[sessionmaker] = None

    @property
    def is_initialized(self) -> bool:
        return self.session_factory is not None

    def initialize(self) -> None:
        """Open the database, creating the file and the settings table when missing."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(
            f"sqlite:///{self.db_path}",
            connect_args={"check_same_thread": False, "timeout": self.busy_timeout},
        )
        event.listen(self.engine, "connect", _configure_connection)
        Base.metadata.create_all(self.engine)
        self.session_factory = sessionmaker(bind=self.engine)

        logger.info(
            f"Settings database ready at {self.db_path} "
            f"({self.count_settings()} settings stored)"
        )

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Yield a session that commits on success and rolls back on error.

        Raises:
            RuntimeError: If initialize() has not been called
        """
        if self.session_factory is None:
            raise RuntimeError("Settings database not initialized. Call initialize() first.")

        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def count_settings(self, scope: Optional[str] = None) -> int:
        """Count stored settings, optionally only those of one scope."""
        with self.session_scope() as session:
            query = session.query(func.count(PluginSetting.id))
            if scope is not None:
                query = query.filter(PluginSetting.scope == scope)
            return query.scalar() or 0

    def ping(self) -> bool:
        """Return whether the database answers a trivial query."""
        try:
            with self.session_scope() as session:
                session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning(f"Settings database unavailable: {e}")
            return False
        return True

    def close(self) -> None:
        """Dispose of the engine; the instance can be initialized again."""
        if self.engine is None:
            return
        self.engine.dispose()
        self.engine = None
        self.session_factory = None
        logger.info("Settings database closed")


# Process-wide instance used by the server and the health endpoint
_db_engine: Optional[DatabaseEngine] = None


def init_database(db_path: str) -> DatabaseEngine:
    """Create, initialize and register the process-wide settings database."""
    global _db_engine
    _db_engine = DatabaseEngine(db_path)
    _db_engine.initialize()
    return _db_engine


def get_database() -> DatabaseEngine:
    """
    Return the process-wide settings database.

    Raises:
        RuntimeError: If init_database() has not been called
    """
    if _db_engine is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _db_engine


def close_database() -> None:
    """Close and unregister the process-wide settings database."""
    global _db_engine
    if _db_engine is not None:
        _db_engine.close()
        _db_engine = None
