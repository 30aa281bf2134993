"""
Database module - PostgreSQL engine, sessions and schema setup.
"""
from placement_pipeline.db.postgres import get_db, get_db_session, init_db, test_postgres_connection

__all__ = [
    "get_db",
    "get_db_session",
    "init_db",
    "test_postgres_connection"
]
