"""
Database connection management for the labor tracker.

Provides database engine, session management, and connection utilities.
"""
import os
from typing import Generator
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from .models import Base

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./labor_tracker.db")


def build_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    SQLite engines share a single connection across threads so that the
    request handlers and the test client see the same database.
    """
    is_sqlite = url.startswith("sqlite")
    return create_engine(
        url,
        echo=echo,
        poolclass=StaticPool if is_sqlite else None,
        connect_args={"check_same_thread": False} if is_sqlite else {}
    )


engine = build_engine(DATABASE_URL, echo=os.getenv("SQL_ECHO", "false").lower() == "true")

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """
    Enable foreign key constraints for SQLite connections.

    The pysqlite driver's own transaction handling is switched off so that
    SAVEPOINTs issued by ``Session.begin_nested`` behave.
    """
    if "sqlite" in type(dbapi_connection).__module__:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@event.listens_for(Engine, "begin")
def begin_sqlite_transaction(conn):
    """Emit an explicit BEGIN for SQLite now that pysqlite no longer does."""
    if conn.dialect.name == "sqlite":
        conn.exec_driver_sql("BEGIN")


def create_tables(bind: Engine = engine):
    """Create all database tables."""
    Base.metadata.create_all(bind=bind)


def drop_tables(bind: Engine = engine):
    """Drop all database tables."""
    Base.metadata.drop_all(bind=bind)


def check_connection() -> bool:
    """Run a trivial statement against the database."""
    with engine.connect() as conn:
        return conn.execute(text("SELECT 1")).scalar() == 1


# PUBLIC_INTERFACE
def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class DatabaseManager:
    """Database management utilities."""

    @staticmethod
    def init_db():
        """Initialize the database with tables."""
        create_tables()
