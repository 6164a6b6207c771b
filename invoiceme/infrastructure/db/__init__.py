"""
Database engine, models and unit of work.
"""

from .database import Base, build_engine, build_session_factory, create_all_tables, drop_all_tables
from .unit_of_work import SQLAlchemyUnitOfWork

__all__ = [
    "Base",
    "build_engine",
    "build_session_factory",
    "create_all_tables",
    "drop_all_tables",
    "SQLAlchemyUnitOfWork",
]
