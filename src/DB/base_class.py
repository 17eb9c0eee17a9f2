"""
src/DB/base_class.py
=================================
SQLAlchemy Base Model Definition
=================================

Declarative base class for all database models of the RA backend.

Architecture:
------------
- Extends SQLAlchemy's DeclarativeBase (2.0 style)
- Default table name is the lowercase class name; models in this project
  override it with their plural table names (devices, sensors, ...)

Usage Example:
-------------
    from src.DB.base_class import Base
    from sqlalchemy import Column, Integer, String

    class Gateway(Base):
        # Table name becomes 'gateway'
        id = Column(Integer, primary_key=True)
        name = Column(String(100))
"""

from sqlalchemy.orm import DeclarativeBase, declared_attr


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models in the application.

    All models must inherit from this class to be registered in
    Base.metadata and discovered by Alembic.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        """Lowercase class name, e.g. Measure -> 'measure'."""
        return cls.__name__.lower()
