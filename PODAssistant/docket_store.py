"""
docket_store.py

SQLite-backed persistence for docket records.

The workflow only needs keyed reads and a keyed status update, so the
store exposes exactly that.  A single connection is shared behind a
lock; each update is one ``UPDATE ... WHERE id = ?`` statement, which
keeps writes atomic per docket id.
"""

import logging
import sqlite3
import threading
from typing import Optional

from pydantic import ValidationError

from PODAssistant import config
from PODAssistant.state import Docket, DocketStatus

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the underlying database cannot be read or written."""

    pass


_SCHEMA = """
CREATE TABLE IF NOT EXISTS dockets (
    id TEXT PRIMARY KEY,
    customer_name TEXT,
    delivery_address TEXT,
    status TEXT DEFAULT 'Pending',
    pod_verified BOOLEAN DEFAULT 0,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
)
"""


class DocketStore:
    """Key-value access to dockets, keyed by docket id."""

    def __init__(self, db_path: Optional[str] = None, seed: bool = True):
        self.db_path = db_path or config.DB_PATH
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            with self._conn:
                self._conn.execute(_SCHEMA)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open docket database {self.db_path}: {e}") from e

        if seed:
            self.seed()

    def seed(self) -> int:
        """Insert the sample dockets if the table is empty.

        Returns the number of rows inserted.
        """
        with self._lock:
            try:
                count = self._conn.execute("SELECT count(*) FROM dockets").fetchone()[0]
                if count:
                    return 0
                with self._conn:
                    self._conn.executemany(
                        "INSERT INTO dockets (id, customer_name, delivery_address) "
                        "VALUES (?, ?, ?)",
                        config.SAMPLE_DOCKETS,
                    )
            except sqlite3.Error as e:
                raise StoreError(f"Failed to seed dockets: {e}") from e

        logger.info("Seeded %d sample dockets into %s", len(config.SAMPLE_DOCKETS), self.db_path)
        return len(config.SAMPLE_DOCKETS)

    def get(self, docket_id: str) -> Optional[Docket]:
        """Return the docket with ``docket_id`` or ``None`` if unknown."""
        with self._lock:
            try:
                row = self._conn.execute(
                    "SELECT * FROM dockets WHERE id = ?", (docket_id,)
                ).fetchone()
            except sqlite3.Error as e:
                raise StoreError(f"Failed to read docket {docket_id}: {e}") from e

        if row is None:
            return None
        return _row_to_docket(row)

    def update(self, docket_id: str, status: DocketStatus, verified: bool) -> bool:
        """Set status and POD verification flag for one docket.

        Returns ``True`` when the docket exists and was updated, ``False``
        when no docket has that id.

        Raises
        ------
        StoreError
            If the database write fails.
        """
        status_value = DocketStatus(status).value
        with self._lock:
            try:
                with self._conn:
                    cursor = self._conn.execute(
                        "UPDATE dockets SET status = ?, pod_verified = ?, "
                        "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                        (status_value, 1 if verified else 0, docket_id),
                    )
            except sqlite3.Error as e:
                raise StoreError(f"Failed to update docket {docket_id}: {e}") from e

        updated = cursor.rowcount > 0
        logger.info(
            "Docket %s update status=%s verified=%s -> %s",
            docket_id, status_value, verified, "ok" if updated else "not found",
        )
        return updated

    def close(self) -> None:
        with self._lock:
            self._conn.close()


def _row_to_docket(row: sqlite3.Row) -> Docket:
    try:
        return Docket(
            id=row["id"],
            customer_name=row["customer_name"] or "",
            delivery_address=row["delivery_address"] or "",
            status=row["status"] or DocketStatus.PENDING.value,
            pod_verified=bool(row["pod_verified"]),
            updated_at=row["updated_at"],
        )
    except ValidationError as e:
        raise StoreError(f"Malformed docket row {row['id']!r}: {e}") from e
