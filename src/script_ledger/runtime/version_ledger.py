"""Version ledger: durable, append-mostly store of script snapshots."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from script_ledger.runtime.keyed_lock import KeyedLock
from script_ledger.runtime.ledger_backend import LedgerBackend, create_backend
from script_ledger.schemas import ArtifactIdentity, VersionOrigin, VersionRecord

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def current_millis() -> int:
    """Wall-clock time as integer epoch milliseconds."""
    return time.time_ns() // 1_000_000


class VersionLedger:
    """Snapshot rows keyed by artifact identity.

    Every insert creates a new row, even for duplicate content; callers
    that want deduplication go through DedupGate. Mutations for one identity
    are serialised through `identity_lock`; different identities proceed in
    parallel. Backend failures surface as StoreUnavailable.
    """

    def __init__(self, backend: LedgerBackend, clock: Optional[Clock] = None):
        """Initialize ledger over a storage backend.

        Args:
            backend: Row storage (SQLite or in-memory)
            clock: Returns epoch millis; defaults to the wall clock
        """
        self.backend = backend
        self.clock = clock or current_millis
        self._locks = KeyedLock()

    @classmethod
    def create(
        cls,
        backend_type: str = "in_memory",
        db_path: Optional[str] = None,
        clock: Optional[Clock] = None,
    ) -> "VersionLedger":
        """Build a ledger with a named backend ('sqlite' or 'in_memory')."""
        return cls(create_backend(backend_type, db_path), clock=clock)

    @contextmanager
    def identity_lock(self, identity: ArtifactIdentity) -> Iterator[None]:
        """Hold the mutation lock for one identity (re-entrant)."""
        with self._locks.hold(identity):
            yield

    def now(self) -> int:
        return self.clock()

    # ----- writes -----

    def insert(
        self,
        identity: ArtifactIdentity,
        content: str,
        origin: VersionOrigin,
        note: Optional[str] = None,
    ) -> int:
        """Append a snapshot row stamped with the current time.

        Returns:
            The new row's id
        """
        origin = VersionOrigin(origin)
        with self.identity_lock(identity):
            record_id = self.backend.insert(identity, content, self.clock(), origin, note)
        logger.debug("Inserted %s version %s for %s", origin.value, record_id, identity)
        return record_id

    def bump_timestamp(self, record_id: int, new_timestamp: int) -> bool:
        """Rewrite only the timestamp of an existing row.

        Returns:
            False if the row does not exist
        """
        record = self.backend.get(record_id)
        if record is None:
            return False
        with self.identity_lock(record.identity):
            updated = self.backend.update_timestamp(record_id, new_timestamp)
        if updated:
            logger.debug("Bumped version %s of %s to %s", record_id, record.identity, new_timestamp)
        return updated

    def delete_one(self, record_id: int) -> bool:
        record = self.backend.get(record_id)
        if record is None:
            return False
        with self.identity_lock(record.identity):
            deleted = self.backend.delete(record_id)
        if deleted:
            logger.debug("Deleted version %s of %s", record_id, record.identity)
        return deleted

    def delete_all_except_remote_sync(self, identity: ArtifactIdentity) -> int:
        """Delete manual and autosave rows, keeping the remote-sync lineage."""
        with self.identity_lock(identity):
            deleted = self.backend.delete_for_identity(identity, exclude_origin=VersionOrigin.REMOTE_SYNC)
        logger.debug("Deleted %d non-remote-sync versions for %s", deleted, identity)
        return deleted

    def delete_all(self, identity: ArtifactIdentity) -> int:
        with self.identity_lock(identity):
            deleted = self.backend.delete_for_identity(identity)
        logger.debug("Deleted all %d versions for %s", deleted, identity)
        return deleted

    def prune_autosaves(self, identity: ArtifactIdentity, keep: int) -> int:
        """Delete the oldest autosave rows beyond the `keep` most recent.

        Manual and remote-sync rows are never touched.

        Returns:
            Number of rows deleted
        """
        if keep < 0:
            raise ValueError(f"keep must be >= 0, got {keep}")
        with self.identity_lock(identity):
            return self.backend.prune(identity, VersionOrigin.AUTOSAVE, keep)

    # ----- reads -----

    def get(self, record_id: int) -> Optional[VersionRecord]:
        return self.backend.get(record_id)

    def list_desc(self, identity: ArtifactIdentity) -> List[VersionRecord]:
        """All rows for an identity, newest first by (timestamp, id)."""
        return self.backend.list_desc(identity)

    def latest(self, identity: ArtifactIdentity) -> Optional[VersionRecord]:
        rows = self.backend.list_desc(identity, limit=1)
        return rows[0] if rows else None

    def latest_remote_sync(self, identity: ArtifactIdentity) -> Optional[VersionRecord]:
        rows = self.backend.list_desc(identity, origin=VersionOrigin.REMOTE_SYNC, limit=1)
        return rows[0] if rows else None

    def remote_sync_records(self, identity: ArtifactIdentity) -> List[VersionRecord]:
        return self.backend.list_desc(identity, origin=VersionOrigin.REMOTE_SYNC)

    def count(self, identity: ArtifactIdentity) -> int:
        return self.backend.count(identity)

    def count_autosaves(self, identity: ArtifactIdentity) -> int:
        return self.backend.count(identity, origin=VersionOrigin.AUTOSAVE)
