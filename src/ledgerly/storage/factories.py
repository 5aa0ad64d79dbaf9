"""Store factory functions."""

import os
from pathlib import Path
from typing import Optional

from ledgerly.storage.sqlalchemy_store import SQLAlchemyStore

DB_PATH_ENV = "LEDGERLY_DB_PATH"
DEFAULT_DB_DIR = ".ledgerly"
DEFAULT_DB_NAME = "ledgerly.db"


def default_database_path() -> Path:
    """Return ~/.ledgerly/ledgerly.db, creating the directory if needed."""
    db_dir = Path.home() / DEFAULT_DB_DIR
    db_dir.mkdir(parents=True, exist_ok=True)
    return db_dir / DEFAULT_DB_NAME


def create_sqlite_store(database_path: Optional[str] = None) -> SQLAlchemyStore:
    """Create a SQLite-backed store.

    Args:
        database_path: SQLite file path, or ":memory:". If None, the
            LEDGERLY_DB_PATH environment variable is used, then the default path.

    Returns:
        SQLAlchemyStore for the resolved file
    """
    database_path = database_path or os.environ.get(DB_PATH_ENV)
    if not database_path:
        database_path = str(default_database_path())
    elif database_path != ":memory:":
        Path(database_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
        database_path = str(Path(database_path).expanduser())

    return SQLAlchemyStore(f"sqlite:///{database_path}")
