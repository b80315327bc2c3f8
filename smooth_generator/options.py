"""
Options Store — durable keyed storage for small pieces of state.

Plays the part of the host platform's options table: the current job record
and the scheduler's registration set each live under one key. Every row
carries a version counter so writers can do compare-and-swap instead of
blind overwrites.

Two backends:
    InMemoryOptions — process-local dict, used by tests and one-off CLI runs
    DuckDBOptions   — an `options` table in a DuckDB file

Both serialize access with a lock, which makes add / compare_and_swap
atomic for every caller sharing the instance. DuckDB allows one writing
process per file, so the lock also covers the cross-process case.
"""
import json
import logging
import threading
from typing import Any, Dict, NamedTuple, Optional

import duckdb

logger = logging.getLogger(__name__)


class StoredOption(NamedTuple):
    value: Any
    version: int


class OptionsStore:
    """Interface shared by the backends."""

    def __init__(self):
        # Held by job stores across multi-step read-then-write sequences
        self.job_lock = threading.Lock()

    def get(self, key: str) -> Optional[StoredOption]:
        raise NotImplementedError

    def add(self, key: str, value: Any) -> bool:
        """Insert only if the key is absent. Returns False if it already exists."""
        raise NotImplementedError

    def compare_and_swap(self, key: str, expected_version: int, value: Any) -> bool:
        """Replace the value only if the stored version still matches."""
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        """Unconditional upsert."""
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError


class InMemoryOptions(OptionsStore):
    def __init__(self):
        super().__init__()
        self._rows: Dict[str, StoredOption] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[StoredOption]:
        with self._lock:
            row = self._rows.get(key)
            if row is None:
                return None
            # Hand out copies so callers can't mutate stored state in place
            return StoredOption(_roundtrip(row.value), row.version)

    def add(self, key: str, value: Any) -> bool:
        with self._lock:
            if key in self._rows:
                return False
            self._rows[key] = StoredOption(_roundtrip(value), 1)
            return True

    def compare_and_swap(self, key: str, expected_version: int, value: Any) -> bool:
        with self._lock:
            row = self._rows.get(key)
            if row is None or row.version != expected_version:
                return False
            self._rows[key] = StoredOption(_roundtrip(value), row.version + 1)
            return True

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            row = self._rows.get(key)
            version = row.version + 1 if row else 1
            self._rows[key] = StoredOption(_roundtrip(value), version)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._rows.pop(key, None) is not None


class DuckDBOptions(OptionsStore):
    """Options persisted in a DuckDB table. Pass ':memory:' for a throwaway database."""

    def __init__(self, db_path: str = ":memory:", connection: Optional[duckdb.DuckDBPyConnection] = None):
        super().__init__()
        self.db_path = db_path
        self._con = connection or duckdb.connect(db_path)
        self._lock = threading.Lock()
        self._con.execute("""
            CREATE TABLE IF NOT EXISTS options (
                option_key VARCHAR PRIMARY KEY,
                option_value VARCHAR NOT NULL,
                version BIGINT NOT NULL,
                updated_at TIMESTAMP DEFAULT current_timestamp
            )
        """)
        logger.info(f"[Options] Using options table in {db_path}")

    def _fetch(self, key: str) -> Optional[StoredOption]:
        row = self._con.execute(
            "SELECT option_value, version FROM options WHERE option_key = ?", [key]
        ).fetchone()
        if row is None:
            return None
        return StoredOption(json.loads(row[0]), int(row[1]))

    def get(self, key: str) -> Optional[StoredOption]:
        with self._lock:
            return self._fetch(key)

    def add(self, key: str, value: Any) -> bool:
        with self._lock:
            if self._fetch(key) is not None:
                return False
            self._con.execute(
                "INSERT INTO options (option_key, option_value, version) VALUES (?, ?, 1)",
                [key, json.dumps(value)],
            )
            return True

    def compare_and_swap(self, key: str, expected_version: int, value: Any) -> bool:
        with self._lock:
            current = self._fetch(key)
            if current is None or current.version != expected_version:
                return False
            self._con.execute(
                """
                UPDATE options
                SET option_value = ?, version = ?, updated_at = current_timestamp
                WHERE option_key = ?
                """,
                [json.dumps(value), expected_version + 1, key],
            )
            return True

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            current = self._fetch(key)
            if current is None:
                self._con.execute(
                    "INSERT INTO options (option_key, option_value, version) VALUES (?, ?, 1)",
                    [key, json.dumps(value)],
                )
            else:
                self._con.execute(
                    """
                    UPDATE options
                    SET option_value = ?, version = ?, updated_at = current_timestamp
                    WHERE option_key = ?
                    """,
                    [json.dumps(value), current.version + 1, key],
                )

    def delete(self, key: str) -> bool:
        with self._lock:
            if self._fetch(key) is None:
                return False
            self._con.execute("DELETE FROM options WHERE option_key = ?", [key])
            return True

    def close(self) -> None:
        with self._lock:
            self._con.close()


def _roundtrip(value: Any) -> Any:
    """Store what a JSON column would store, so both backends behave alike."""
    return json.loads(json.dumps(value))
