"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from clientledger.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(
    database_path: Optional[str] = None, lock_timeout: Optional[float] = None
) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks CLIENTLEDGER_DB_PATH
            environment variable, then defaults to ~/.clientledger/clientledger.db
        lock_timeout: Seconds to wait for the database lock. If None, checks
            CLIENTLEDGER_LOCK_TIMEOUT, then defaults to 15

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("CLIENTLEDGER_DB_PATH")

    if database_path is None:
        # Default to ~/.clientledger/clientledger.db
        home = Path.home()
        db_dir = home / ".clientledger"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "clientledger.db")

    if lock_timeout is None:
        lock_timeout = float(os.environ.get("CLIENTLEDGER_LOCK_TIMEOUT", "15"))

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url, lock_timeout=lock_timeout)
