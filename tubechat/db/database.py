"""
Database connection and session management for tubechat.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from tubechat.config import config

# Create base class for SQLAlchemy models
Base = declarative_base()


def make_engine(database_url: str) -> Engine:
    """Create an engine, allowing SQLite connections to be shared across threads."""
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {}
    )


engine = make_engine(config.DATABASE_URL)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Initialize the database by creating all tables."""
    from tubechat.db.models import Transcript  # noqa: F401

    # Create all tables
    Base.metadata.create_all(bind=bind)
