"""
Database configuration and session management for SQLAlchemy.

Provides the database engine, session factory, and declarative base.
"""
from typing import Any, Dict, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import settings


def build_engine(url: str) -> Engine:
    """
    Create an engine for ``url``.

    SQLite connections are shared across the request thread pool and need
    foreign keys switched on for the cascade rules to apply.
    """
    connect_args: Dict[str, Any] = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    new_engine = create_engine(
        url,
        pool_pre_ping=True,  # Enable connection health checks
        connect_args=connect_args,
        echo=False,  # Set to True for SQL query logging during development
    )

    if new_engine.dialect.name == "sqlite":
        @event.listens_for(new_engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


# Create SQLAlchemy engine
engine = build_engine(settings.DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

# Declarative base for models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI.

    Yields a database session and ensures it's closed after use.

    Usage:
        @app.get("/items")
        def read_items(db: Session = Depends(get_db)):
            return db.query(Item).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def dialect_insert(db: Session, model):
    """
    Return an INSERT construct for ``model`` that supports ``on_conflict_do_*``.

    Both supported backends implement the same upsert API; anything else is a
    deployment error.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise RuntimeError(f"Unsupported database dialect for upserts: {dialect}")
