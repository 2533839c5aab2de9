"""Deduplication of remote-origin snapshots."""

from __future__ import annotations

import logging

from script_ledger.runtime.version_ledger import VersionLedger
from script_ledger.schemas import (
    REMOTE_SYNC_NOTE,
    ArtifactIdentity,
    DedupAction,
    DedupDecision,
    VersionOrigin,
)

logger = logging.getLogger(__name__)


class DedupGate:
    """Registers fetched remote content without duplicating remote-sync rows.

    Every remote-sync row of the identity is compared with the fetched
    content byte for byte. A match has its timestamp bumped to now so it
    reappears at the top of the timeline; otherwise a new remote-sync row is
    inserted. Manual and autosave rows are never consulted.
    """

    def __init__(self, ledger: VersionLedger):
        self.ledger = ledger

    def register(self, identity: ArtifactIdentity, content: str) -> DedupDecision:
        # Read-check-act must not interleave with other writers of this identity.
        with self.ledger.identity_lock(identity):
            for record in self.ledger.remote_sync_records(identity):
                if record.content == content:
                    now = self.ledger.now()
                    self.ledger.bump_timestamp(record.id, now)
                    logger.debug("Remote content for %s matches version %s; bumped", identity, record.id)
                    return DedupDecision(action=DedupAction.BUMPED, record_id=record.id, timestamp=now)

            record_id = self.ledger.insert(
                identity,
                content,
                VersionOrigin.REMOTE_SYNC,
                note=REMOTE_SYNC_NOTE,
            )
            logger.debug("Saved new remote-sync version %s for %s", record_id, identity)
            return DedupDecision(action=DedupAction.INSERTED, record_id=record_id)
