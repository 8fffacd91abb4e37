"""
Database module - PostgreSQL connection, unit of work and schema.
"""
from app.db.postgres import get_db_session, run_in_transaction, ping_database
from app.db.schema import init_schema, drop_schema

__all__ = [
    "get_db_session",
    "run_in_transaction",
    "ping_database",
    "init_schema",
    "drop_schema",
]
