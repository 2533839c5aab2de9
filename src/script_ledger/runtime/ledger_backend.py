"""Storage backends for the script version ledger.

Provides database-backed (SQLite) and in-memory storage for version rows.
Backends are dumb row stores: ordering, deletion and pruning queries only.
Deduplication and per-identity serialisation live in the layers above.
"""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Protocol

from script_ledger.exceptions import StoreUnavailable
from script_ledger.schemas import ArtifactIdentity, VersionOrigin, VersionRecord


class LedgerBackend(Protocol):
    """Abstract interface for version row storage."""

    def insert(
        self,
        identity: ArtifactIdentity,
        content: str,
        timestamp: int,
        origin: VersionOrigin,
        note: Optional[str] = None,
    ) -> int:
        """Append a row and return its store-assigned id.

        Raises:
            StoreUnavailable: If the row cannot be written
        """
        ...

    def get(self, record_id: int) -> Optional[VersionRecord]:
        """Get a row by id, or None if absent."""
        ...

    def list_desc(
        self,
        identity: ArtifactIdentity,
        origin: Optional[VersionOrigin] = None,
        limit: Optional[int] = None,
    ) -> List[VersionRecord]:
        """Rows for an identity ordered by (timestamp, id) descending.

        Args:
            identity: Partition to read
            origin: Restrict to one origin (None = all)
            limit: Maximum rows to return (None = all)
        """
        ...

    def update_timestamp(self, record_id: int, timestamp: int) -> bool:
        """Rewrite the timestamp of one row. Returns False if not found."""
        ...

    def delete(self, record_id: int) -> bool:
        """Delete one row. Returns False if not found."""
        ...

    def delete_for_identity(
        self,
        identity: ArtifactIdentity,
        exclude_origin: Optional[VersionOrigin] = None,
    ) -> int:
        """Delete an identity's rows, optionally sparing one origin.

        Returns:
            Number of rows deleted
        """
        ...

    def count(self, identity: ArtifactIdentity, origin: Optional[VersionOrigin] = None) -> int:
        """Count an identity's rows, optionally for one origin."""
        ...

    def prune(self, identity: ArtifactIdentity, origin: VersionOrigin, keep: int) -> int:
        """Delete all but the `keep` newest rows of one origin.

        Returns:
            Number of rows deleted
        """
        ...


class SQLiteLedgerBackend:
    """SQLite database-backed version storage.

    Provides:
    - Persistent storage with one transaction per operation
    - Monotonic row ids via AUTOINCREMENT
    - Index on (owner_ref, artifact_name, timestamp)

    Every sqlite3 failure surfaces as StoreUnavailable.
    """

    def __init__(self, db_path: str, busy_timeout: float = 5.0):
        """Initialize SQLite backend.

        Args:
            db_path: Path to SQLite database (created if doesn't exist)
            busy_timeout: Seconds to wait on a locked database file

        Raises:
            StoreUnavailable: If the database cannot be created or opened
        """
        self.db_path = Path(db_path)
        self.busy_timeout = busy_timeout
        self._lock = threading.Lock()

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreUnavailable("init", str(exc)) from exc

        self._init_database()

    @contextmanager
    def _connection(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Open a connection, commit on success and roll back on error."""
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.busy_timeout)
        except sqlite3.Error as exc:
            raise StoreUnavailable(operation, str(exc)) from exc
        try:
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise StoreUnavailable(operation, str(exc)) from exc
        finally:
            conn.close()

    def _init_database(self) -> None:
        """Initialize database schema if needed."""
        with self._lock:
            with self._connection("init") as conn:
                conn.execute('''
                    CREATE TABLE IF NOT EXISTS script_versions (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        owner_ref TEXT NOT NULL,
                        artifact_name TEXT NOT NULL,
                        content TEXT NOT NULL,
                        timestamp INTEGER NOT NULL,
                        origin TEXT NOT NULL,
                        note TEXT
                    )
                ''')
                conn.execute('''
                    CREATE INDEX IF NOT EXISTS idx_script_versions_identity
                    ON script_versions(owner_ref, artifact_name, timestamp)
                ''')

    def _deserialize_row(self, row: tuple) -> VersionRecord:
        """Deserialize database row to VersionRecord."""
        (record_id, owner_ref, artifact_name, content, timestamp, origin, note) = row

        return VersionRecord(
            id=record_id,
            identity=ArtifactIdentity(owner_ref=owner_ref, artifact_name=artifact_name),
            content=content,
            timestamp=timestamp,
            origin=VersionOrigin(origin),
            note=note,
        )

    def insert(
        self,
        identity: ArtifactIdentity,
        content: str,
        timestamp: int,
        origin: VersionOrigin,
        note: Optional[str] = None,
    ) -> int:
        with self._lock:
            with self._connection("insert") as conn:
                cursor = conn.execute('''
                    INSERT INTO script_versions
                    (owner_ref, artifact_name, content, timestamp, origin, note)
                    VALUES (?, ?, ?, ?, ?, ?)
                ''', (
                    identity.owner_ref,
                    identity.artifact_name,
                    content,
                    timestamp,
                    origin.value,
                    note,
                ))
                return cursor.lastrowid

    def get(self, record_id: int) -> Optional[VersionRecord]:
        with self._lock:
            with self._connection("get") as conn:
                row = conn.execute(
                    "SELECT * FROM script_versions WHERE id = ?",
                    (record_id,)
                ).fetchone()

                if row:
                    return self._deserialize_row(row)
                return None

    def list_desc(
        self,
        identity: ArtifactIdentity,
        origin: Optional[VersionOrigin] = None,
        limit: Optional[int] = None,
    ) -> List[VersionRecord]:
        query = "SELECT * FROM script_versions WHERE owner_ref = ? AND artifact_name = ?"
        params: list = [identity.owner_ref, identity.artifact_name]
        if origin is not None:
            query += " AND origin = ?"
            params.append(origin.value)
        query += " ORDER BY timestamp DESC, id DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        with self._lock:
            with self._connection("list") as conn:
                rows = conn.execute(query, params).fetchall()
                return [self._deserialize_row(row) for row in rows]

    def update_timestamp(self, record_id: int, timestamp: int) -> bool:
        with self._lock:
            with self._connection("update_timestamp") as conn:
                cursor = conn.execute(
                    "UPDATE script_versions SET timestamp = ? WHERE id = ?",
                    (timestamp, record_id)
                )
                return cursor.rowcount > 0

    def delete(self, record_id: int) -> bool:
        with self._lock:
            with self._connection("delete") as conn:
                cursor = conn.execute(
                    "DELETE FROM script_versions WHERE id = ?",
                    (record_id,)
                )
                return cursor.rowcount > 0

    def delete_for_identity(
        self,
        identity: ArtifactIdentity,
        exclude_origin: Optional[VersionOrigin] = None,
    ) -> int:
        query = "DELETE FROM script_versions WHERE owner_ref = ? AND artifact_name = ?"
        params: list = [identity.owner_ref, identity.artifact_name]
        if exclude_origin is not None:
            query += " AND origin != ?"
            params.append(exclude_origin.value)

        with self._lock:
            with self._connection("delete_for_identity") as conn:
                cursor = conn.execute(query, params)
                return cursor.rowcount

    def count(self, identity: ArtifactIdentity, origin: Optional[VersionOrigin] = None) -> int:
        query = "SELECT COUNT(*) FROM script_versions WHERE owner_ref = ? AND artifact_name = ?"
        params: list = [identity.owner_ref, identity.artifact_name]
        if origin is not None:
            query += " AND origin = ?"
            params.append(origin.value)

        with self._lock:
            with self._connection("count") as conn:
                result = conn.execute(query, params).fetchone()
                return result[0] if result else 0

    def prune(self, identity: ArtifactIdentity, origin: VersionOrigin, keep: int) -> int:
        with self._lock:
            with self._connection("prune") as conn:
                cursor = conn.execute('''
                    DELETE FROM script_versions
                    WHERE owner_ref = ? AND artifact_name = ? AND origin = ?
                    AND id NOT IN (
                        SELECT id FROM script_versions
                        WHERE owner_ref = ? AND artifact_name = ? AND origin = ?
                        ORDER BY timestamp DESC, id DESC
                        LIMIT ?
                    )
                ''', (
                    identity.owner_ref, identity.artifact_name, origin.value,
                    identity.owner_ref, identity.artifact_name, origin.value,
                    keep,
                ))
                return cursor.rowcount


class InMemoryLedgerBackend:
    """Dict-backed version storage for tests and ephemeral sessions."""

    def __init__(self):
        # record_id -> VersionRecord
        self._records: Dict[int, VersionRecord] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def _rows_for(
        self,
        identity: ArtifactIdentity,
        origin: Optional[VersionOrigin] = None,
    ) -> List[VersionRecord]:
        rows = [
            record for record in self._records.values()
            if record.identity == identity and (origin is None or record.origin == origin)
        ]
        rows.sort(key=lambda r: r.sort_key(), reverse=True)
        return rows

    def insert(
        self,
        identity: ArtifactIdentity,
        content: str,
        timestamp: int,
        origin: VersionOrigin,
        note: Optional[str] = None,
    ) -> int:
        with self._lock:
            record_id = self._next_id
            self._next_id += 1
            self._records[record_id] = VersionRecord(
                id=record_id,
                identity=identity,
                content=content,
                timestamp=timestamp,
                origin=origin,
                note=note,
            )
            return record_id

    def get(self, record_id: int) -> Optional[VersionRecord]:
        with self._lock:
            return self._records.get(record_id)

    def list_desc(
        self,
        identity: ArtifactIdentity,
        origin: Optional[VersionOrigin] = None,
        limit: Optional[int] = None,
    ) -> List[VersionRecord]:
        with self._lock:
            rows = self._rows_for(identity, origin)
            return rows if limit is None else rows[:limit]

    def update_timestamp(self, record_id: int, timestamp: int) -> bool:
        with self._lock:
            record = self._records.get(record_id)
            if record is None:
                return False
            self._records[record_id] = record.model_copy(update={"timestamp": timestamp})
            return True

    def delete(self, record_id: int) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None

    def delete_for_identity(
        self,
        identity: ArtifactIdentity,
        exclude_origin: Optional[VersionOrigin] = None,
    ) -> int:
        with self._lock:
            doomed = [
                record.id for record in self._rows_for(identity)
                if exclude_origin is None or record.origin != exclude_origin
            ]
            for record_id in doomed:
                del self._records[record_id]
            return len(doomed)

    def count(self, identity: ArtifactIdentity, origin: Optional[VersionOrigin] = None) -> int:
        with self._lock:
            return len(self._rows_for(identity, origin))

    def prune(self, identity: ArtifactIdentity, origin: VersionOrigin, keep: int) -> int:
        with self._lock:
            doomed = self._rows_for(identity, origin)[keep:]
            for record in doomed:
                del self._records[record.id]
            return len(doomed)


def create_backend(backend_type: str = "in_memory", db_path: Optional[str] = None) -> LedgerBackend:
    """Build a backend by name.

    Args:
        backend_type: "sqlite" or "in_memory"
        db_path: Path for SQLite backend

    Raises:
        ValueError: If backend type invalid or required path missing
    """
    if backend_type == "sqlite":
        if not db_path:
            raise ValueError("db_path required for sqlite backend")
        return SQLiteLedgerBackend(db_path)
    if backend_type == "in_memory":
        return InMemoryLedgerBackend()
    raise ValueError(f"Unknown backend type: {backend_type}")
