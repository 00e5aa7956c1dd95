"""
Database access for the sql session backend.
"""

from .database import check_database, create_db_engine, get_engine, init_db, session_scope

__all__ = ["check_database", "create_db_engine", "get_engine", "init_db", "session_scope"]
