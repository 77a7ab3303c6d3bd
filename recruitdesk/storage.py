from __future__ import annotations

import json
import logging
import sqlite3
import time
from collections.abc import Iterator, Mapping, MutableMapping, Sequence
from dataclasses import replace
from pathlib import Path
from typing import Any, Protocol, cast

from nicegui import app

from .records import CandidateRecord, SessionProgress
from .utils import DB_PATH, RECORDS_KEY, SESSION_KEY

logger = logging.getLogger(__name__)


class MalformedSession(ValueError):
    """The persisted session progress cannot be read back as a session."""


class RecordStore(Protocol):
    def load_all(self) -> list[CandidateRecord]: ...
    def save_all(self, records: Sequence[CandidateRecord]) -> None: ...
    def load_session(self) -> SessionProgress | None: ...
    def save_session(self, progress: SessionProgress) -> None: ...
    def clear_session(self) -> None: ...

# ===================================================================
# 1. KEY-VALUE RECORD STORE
# ===================================================================

class KeyValueRecordStore:
    """
    Keeps the record collection and the session pointer under two keys of a
    JSON-friendly mapping. By default that mapping is NiceGUI's per-browser
    `app.storage.user`, so each operator's browser has its own case list.

    Stored records that cannot be read are left out of `load_all()` but are
    never dropped from storage by a later save.
    """

    def __init__(self, storage: MutableMapping[str, Any] | None = None) -> None:
        self._storage = storage

    @property
    def storage(self) -> MutableMapping[str, Any]:
        # app.storage.user only exists inside a page request, so look it up lazily.
        if self._storage is None:
            return cast(MutableMapping[str, Any], app.storage.user)
        return self._storage

    def _stored_rows(self) -> list[Any]:
        try:
            raw_records = self.storage.get(RECORDS_KEY) or []
        except ValueError as e:
            logger.error(f"Stored '{RECORDS_KEY}' cannot be decoded: {e}")
            return []
        if not isinstance(raw_records, list):
            logger.error(f"Stored '{RECORDS_KEY}' is a {type(raw_records).__name__}, not a list. Ignoring it.")
            return []
        return raw_records

    def _split_rows(self) -> tuple[list[CandidateRecord], list[tuple[int, Any, Exception]]]:
        """Readable records, and (position, raw row, error) for every row that is not."""
        records: list[CandidateRecord] = []
        unreadable: list[tuple[int, Any, Exception]] = []
        for position, raw in enumerate(self._stored_rows()):
            try:
                records.append(CandidateRecord.from_dict(raw))
            except (TypeError, ValueError) as e:
                unreadable.append((position, raw, e))
        return records, unreadable

    def load_all(self) -> list[CandidateRecord]:
        records, unreadable = self._split_rows()
        for position, _, e in unreadable:
            logger.error(f"Skipping unreadable candidate record #{position}: {e}")
        return records

    def save_all(self, records: Sequence[CandidateRecord]) -> None:
        saved_ids = {record.id for record in records if record.id is not None}
        _, unreadable = self._split_rows()
        # Unreadable rows stay as they are unless a saved record now owns their id.
        kept = [raw for _, raw, _ in unreadable if _raw_id(raw) not in saved_ids]
        self.storage[RECORDS_KEY] = [*kept, *(record.to_dict() for record in records)]
        logger.info(f"Saved {len(records)} candidate record(s), kept {len(kept)} unreadable row(s).")

    def load_session(self) -> SessionProgress | None:
        try:
            raw = self.storage.get(SESSION_KEY)
            if raw is None:
                return None
            return SessionProgress.from_dict(raw)
        except (TypeError, ValueError) as e:
            raise MalformedSession(f"Stored session progress is unreadable: {e}") from e

    def save_session(self, progress: SessionProgress) -> None:
        self.storage[SESSION_KEY] = progress.to_dict()

    def clear_session(self) -> None:
        # Deleting never decodes the value, so a corrupt session can still be cleared.
        try:
            del self.storage[SESSION_KEY]
        except KeyError:
            pass


def _raw_id(raw: Any) -> Any:
    return raw.get('id') if isinstance(raw, Mapping) else None


# ===================================================================
# 2. SQLITE-BACKED MAPPING (durable single-machine storage)
# ===================================================================

class SqliteStorage(MutableMapping[str, Any]):
    """
    A dict-like view of a two-column SQLite table. Values are stored as JSON
    text, so it can stand in wherever a browser key-value store would.
    """

    def __init__(self, db_path: Path = DB_PATH) -> None:
        self.db_path = Path(db_path)
        self.setup_database()

    def get_db_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def setup_database(self) -> None:
        logger.info(f"Setting up database at: {self.db_path}")
        try:
            if not self.db_path.parent.exists():
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with self.get_db_connection() as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    );
                """)
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Database setup failed: {e}"); raise

    def __getitem__(self, key: str) -> Any:
        with self.get_db_connection() as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        if row is None:
            raise KeyError(key)
        return json.loads(row['value'])

    def __setitem__(self, key: str, value: Any) -> None:
        with self.get_db_connection() as conn:
            conn.execute(
                "INSERT INTO kv_store (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, json.dumps(value)),
            )
            conn.commit()

    def __contains__(self, key: object) -> bool:
        with self.get_db_connection() as conn:
            return conn.execute("SELECT 1 FROM kv_store WHERE key = ?", (key,)).fetchone() is not None

    def __delitem__(self, key: str) -> None:
        with self.get_db_connection() as conn:
            cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()
        if cursor.rowcount == 0:
            raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        with self.get_db_connection() as conn:
            keys = [row['key'] for row in conn.execute("SELECT key FROM kv_store ORDER BY key")]
        return iter(keys)

    def __len__(self) -> int:
        with self.get_db_connection() as conn:
            return int(conn.execute("SELECT COUNT(*) FROM kv_store").fetchone()[0])

# ===================================================================
# 3. SAVING ONE RECORD
# ===================================================================

def new_record_id(existing_ids: set[int]) -> int:
    """Epoch milliseconds, bumped past any id already in use."""
    candidate = int(time.time() * 1000)
    while candidate in existing_ids:
        candidate += 1
    return candidate

def upsert_record(store: RecordStore, record: CandidateRecord) -> CandidateRecord:
    """
    Writes one record into the collection, replacing any record with the same
    id. A record without an id gets one here, on its first save, and keeps it.
    Returns the record as saved.
    """
    records = store.load_all()
    if record.id is None:
        record = replace(record, id=new_record_id({r.id for r in records if r.id is not None}))
        logger.info(f"Assigned id {record.id} to new candidate '{record.full_name}'.")
    remaining = [r for r in records if r.id != record.id]
    store.save_all([*remaining, record])
    return record
