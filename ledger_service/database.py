"""
Database connection and session management.
Uses SQLAlchemy for ORM and connection pooling.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from ledger_service.core.config import settings


def create_db_engine(database_url: str, echo: bool = False, **kwargs) -> Engine:
    """
    Create an engine with pool options suited to the backend.

    SQLite connections are shared across threads by the API and the
    concurrency tests, so same-thread checking is switched off and the
    busy timeout lets writers queue behind each other instead of failing.
    """
    if database_url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        connect_args.setdefault("timeout", 30)
        return create_engine(database_url, echo=echo, connect_args=connect_args, **kwargs)

    kwargs.setdefault("pool_size", settings.DB_POOL_SIZE)
    kwargs.setdefault("max_overflow", settings.DB_MAX_OVERFLOW)
    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,  # Verify connections before using
        **kwargs
    )


engine = create_db_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine
)

# Base class for models
Base = declarative_base()


def get_session_factory() -> sessionmaker:
    """
    Dependency returning the session factory.

    The transfer engine opens a fresh session per attempt, so routes
    receive the factory rather than a single session. Tests override
    this dependency to point at their own database.
    """
    return SessionLocal
