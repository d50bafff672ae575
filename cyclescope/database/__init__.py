"""Database module: SQLAlchemy async engine construction and ORM models.

Usage:
    from cyclescope.database import create_database, DomainAnalysis
"""

from .connection import (
    Database,
    create_database,
    create_engine_from_url,
    create_session_factory,
    get_async_database_url,
    init_schema,
)
from .orm import Base, DomainAnalysis


__all__ = [
    "Base",
    "Database",
    "DomainAnalysis",
    "create_database",
    "create_engine_from_url",
    "create_session_factory",
    "get_async_database_url",
    "init_schema",
]
