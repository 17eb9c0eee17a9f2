# src/DB/database.py

"""
Database Dependency Injection Module

This module provides the database session generator used throughout
the FastAPI application via dependency injection, plus a few helpers
used at startup and by the health endpoint.

Key Features:
- Automatic session creation and cleanup
- Compatible with FastAPI Depends()
- Exception-safe (cleanup in finally block)
- Each request gets its own session

Usage Examples:
    # 1. FastAPI Endpoint (Primary Usage)
    from fastapi import Depends
    from sqlalchemy.orm import Session
    from src.DB.database import get_db

    @router.get("/devices")
    def list_devices(db: Session = Depends(get_db)):
        return device_repo.get_devices_by_user(db, user_id)

    # 2. Startup Hook
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.AUTO_CREATE_TABLES:
            create_all_tables()
        yield

Tests replace get_db through app.dependency_overrides with a session bound
to an in-memory SQLite engine.
"""

from typing import Generator
from sqlalchemy.orm import Session
from sqlalchemy import text
from src.DB.session import SessionLocal, engine


# ============================================================
# Primary Database Session Generator
# ============================================================

def get_db() -> Generator[Session, None, None]:
    """
    Database session generator for FastAPI dependency injection.

    The session is NOT automatically committed - repository functions
    commit explicitly at the end of each write operation.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ============================================================
# Database Health Check Utilities
# ============================================================

def test_db_connection() -> bool:
    """
    Test database connectivity with a simple query.

    Returns:
        bool: True if database is reachable and responsive, False otherwise

    Notes:
        - Does not raise exceptions (returns False on error)
        - Logs error details to console for debugging
    """
    db = None
    try:
        db = next(get_db())
        result = db.execute(text("SELECT 1"))
        return result.scalar() == 1
    except Exception as e:
        print(f"[DB] ❌ Connection test failed: {e}")
        return False
    finally:
        if db:
            db.close()


# ============================================================
# Development and Testing Utilities
# ============================================================

def create_all_tables():
    """
    Create all database tables defined in models.

    WARNING: Only use in development/testing environments.
    In production, use Alembic migrations instead.

    Idempotent: existing tables are skipped.
    """
    from src.DB.base import Base
    print("[DB] 🔨 Creating all tables...")
    Base.metadata.create_all(bind=engine)
    print("[DB] ✅ Tables created successfully")


__all__ = [
    "get_db",
    "test_db_connection",
    "create_all_tables"
]
