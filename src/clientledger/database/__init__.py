"""Database layer for clientledger application."""

from clientledger.database.base import Database
from clientledger.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
