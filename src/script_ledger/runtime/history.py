"""History queries and explicit deletions for the editing UI."""

from __future__ import annotations

import logging
from typing import List, Optional

from script_ledger.runtime.version_ledger import VersionLedger
from script_ledger.schemas import ArtifactIdentity, VersionOrigin, VersionRecord

logger = logging.getLogger(__name__)


class HistoryService:
    """Read and prune a script's timeline on explicit user action."""

    def __init__(self, ledger: VersionLedger):
        self.ledger = ledger

    def history(self, identity: ArtifactIdentity) -> List[VersionRecord]:
        """All versions, newest first by (timestamp, id)."""
        return self.ledger.list_desc(identity)

    def last_checkpoint(self, identity: ArtifactIdentity) -> Optional[VersionRecord]:
        """Most recent manual or remote-sync version.

        Restoring it only replaces the editor buffer; nothing is written
        until the user saves.
        """
        for record in self.ledger.list_desc(identity):
            if record.is_checkpoint:
                return record
        return None

    def version_count(self, identity: ArtifactIdentity) -> int:
        return self.ledger.count(identity)

    def delete_record(self, record_id: int) -> bool:
        return self.ledger.delete_one(record_id)

    def reset_history(self, identity: ArtifactIdentity) -> int:
        """Delete every manual and autosave version, keeping remote-sync lineage."""
        deleted = self.ledger.delete_all_except_remote_sync(identity)
        logger.info("Cleared %d local versions of %s", deleted, identity)
        return deleted

    def delete_remote_sync_record(self, record_id: int) -> bool:
        """Delete one remote-sync version.

        Raises:
            ValueError: If the record exists but is not a remote-sync version
        """
        record = self.ledger.get(record_id)
        if record is None:
            return False
        if record.origin != VersionOrigin.REMOTE_SYNC:
            raise ValueError(f"Version {record_id} is {record.origin.value}, not remote_sync")
        return self.ledger.delete_one(record_id)
