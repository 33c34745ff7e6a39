from __future__ import annotations

import time
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.exc import OperationalError

from .config import settings

_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

# Create engine
engine = create_engine(
    settings.DATABASE_URL,  # e.g. sqlite:///./billed.db
    pool_pre_ping=True,
    connect_args=_connect_args,
)

# Session factory
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

# Base class for models
class Base(DeclarativeBase):
    pass


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Wait for the database and create tables if needed."""
    # a server DATABASE_URL (e.g. postgres) may come up after the API
    attempts = 0
    while True:
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            break
        except OperationalError:
            attempts += 1
            if attempts >= 20:
                raise
            time.sleep(1)

    # Import models so metadata has tables
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
