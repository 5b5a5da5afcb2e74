"""Database layer for shopledger application."""

from shopledger.database.base import Database
from shopledger.database.cache import QueryCache
from shopledger.database.factories import create_sqlite_database

__all__ = ["Database", "QueryCache", "create_sqlite_database"]
