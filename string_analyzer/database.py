import logging
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def _casefold(text: Optional[str]) -> Optional[str]:
    return None if text is None else text.casefold()


def register_sqlite_functions(dbapi_connection, connection_record) -> None:
    """Add Unicode-aware SQL functions; SQLite's own lower() only folds ASCII."""
    dbapi_connection.create_function("casefold", 1, _casefold, deterministic=True)


# ------------------------------------------------------------------------------
# DATABASE ENGINE & SESSION
# ------------------------------------------------------------------------------
class Database:
    """Owns the engine and session factory for the lifetime of the process.

    Call init() once on startup and dispose() on shutdown.
    """

    def __init__(self, url: str):
        self.url = url
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None

    def _engine_options(self) -> dict:
        if self.url.startswith("sqlite"):
            options = {"connect_args": {"check_same_thread": False}}
            # In-memory databases live inside a single connection
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                options["poolclass"] = StaticPool
            return options
        return {
            "pool_pre_ping": True,   # prevents "MySQL server has gone away" issues
            "pool_recycle": 280,     # helps with idle connection timeouts
        }

    def init(self) -> None:
        """Create the engine and the database tables."""
        from string_analyzer.models import string_record  # noqa: F401 ensure models are imported

        try:
            self.engine = create_engine(self.url, **self._engine_options())
            if self.url.startswith("sqlite"):
                event.listen(self.engine, "connect", register_sqlite_functions)
            self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
            Base.metadata.create_all(bind=self.engine)
            logger.info("Database tables created successfully.")
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise

    def session(self) -> Session:
        if self.SessionLocal is None:
            raise RuntimeError("Database is not initialized; call init() first")
        return self.SessionLocal()

    def dispose(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database connections closed.")
        self.engine = None
        self.SessionLocal = None


# ------------------------------------------------------------------------------
# DB DEPENDENCY
# ------------------------------------------------------------------------------
def get_db(request: Request) -> Iterator[Session]:
    """Dependency to provide a DB session."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
