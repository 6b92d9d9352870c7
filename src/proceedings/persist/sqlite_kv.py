import logging
import sqlite3
from pathlib import Path

from proceedings.persist import StorageBackend, StorageError

logger = logging.getLogger(__name__)


class SqliteStorage(StorageBackend):
    def __init__(self, db_path: str, store_name: str = "proceedings"):
        self.db_path = db_path
        self.store_name = store_name
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.init_schema()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS key_value (
                    store_name TEXT NOT NULL,
                    item_key TEXT NOT NULL,
                    item_value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (store_name, item_key)
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def get_item(self, name: str) -> str | None:
        try:
            conn = self._get_conn()
            try:
                row = conn.execute(
                    "SELECT item_value FROM key_value WHERE store_name = ? AND item_key = ?",
                    (self.store_name, name),
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StorageError(f"failed to read {name} from {self.db_path}: {exc}") from exc
        return row["item_value"] if row else None

    def set_item(self, name: str, value: str) -> None:
        try:
            conn = self._get_conn()
            try:
                conn.execute(
                    """
                    INSERT INTO key_value (store_name, item_key, item_value)
                    VALUES (?, ?, ?)
                    ON CONFLICT(store_name, item_key) DO UPDATE SET
                        item_value = excluded.item_value,
                        updated_at = CURRENT_TIMESTAMP
                    """,
                    (self.store_name, name, value),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StorageError(f"failed to write {name} to {self.db_path}: {exc}") from exc
        logger.debug("stored %s in %s", name, self.db_path)

    def remove_item(self, name: str) -> None:
        try:
            conn = self._get_conn()
            try:
                conn.execute(
                    "DELETE FROM key_value WHERE store_name = ? AND item_key = ?",
                    (self.store_name, name),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StorageError(f"failed to remove {name} from {self.db_path}: {exc}") from exc
