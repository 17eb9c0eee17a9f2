"""
src/DB/session.py
======================================
Database Session Configuration Module
======================================

Establishes the SQLAlchemy engine and session factory used by the whole
application.

Usage Example:
-------------
    from src.DB.session import SessionLocal

    with SessionLocal() as db:
        devices = db.query(Device).all()

Session Configuration:
---------------------
- autocommit=False: Repositories commit explicitly, once per operation
- autoflush=False: Changes are flushed on commit only
- bind=engine: Sessions are bound to the configured database engine
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from src.Core.config import settings


# ============================================================
# DATABASE ENGINE CONFIGURATION
# ============================================================
# SQLite connections are shared across the threadpool used by FastAPI
# for sync endpoints.
_connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    _connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args,
    pool_pre_ping=True,
)


# ============================================================
# SESSION FACTORY CONFIGURATION
# ============================================================
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)
