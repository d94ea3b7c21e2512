"""Local SQLite caching utility for serialized dashboard payloads."""

import sqlite3
from pathlib import Path
from typing import Optional

from meridian.core.logger import logger


class SQLiteCache:
    """A minimal SQLite-backed key-value store for string blobs.

    The cache knows nothing about what it stores; callers serialize and
    deserialize their own payloads.
    """

    def __init__(self, db_path: str = "output/.cache.db") -> None:
        """
        Initialize the SQLite cache.

        Args:
            db_path (str): Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a connection to the SQLite database."""
        return sqlite3.connect(self.db_path, check_same_thread=False)

    def _init_db(self) -> None:
        """Create the cache table if it doesn't exist."""
        with self._get_connection() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS blob_cache (
                    cache_key TEXT PRIMARY KEY,
                    blob TEXT,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
                """
            )

    def get(self, key: str) -> Optional[str]:
        """
        Retrieve a cached blob.

        Args:
            key (str): The cache key.

        Returns:
            Optional[str]: The stored string if found, else None.
        """
        try:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    "SELECT blob FROM blob_cache WHERE cache_key = ?",
                    (key,)
                )
                row = cursor.fetchone()
                if row is not None:
                    logger.info(f"Cache hit for key: {key}")
                    return row[0]
        except sqlite3.Error as e:
            logger.error(f"SQLite error retrieving cache for key {key}: {e}")

        logger.info(f"Cache miss for key: {key}")
        return None

    def set(self, key: str, value: str) -> None:
        """
        Store a string blob under ``key``, replacing any previous value.

        Args:
            key (str): The cache key.
            value (str): The serialized payload to store.
        """
        try:
            with self._get_connection() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO blob_cache (cache_key, blob, updated_at)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                    """,
                    (key, value)
                )
        except sqlite3.Error as e:
            logger.error(f"Error saving to cache for key {key}: {e}")
