"""Retention window over autosave rows."""

from __future__ import annotations

import logging

from script_ledger.runtime.version_ledger import VersionLedger
from script_ledger.schemas import ArtifactIdentity

logger = logging.getLogger(__name__)

DEFAULT_AUTOSAVE_RETENTION = 50


class RetentionManager:
    """Keeps at most `keep` autosave rows per identity.

    Manual and remote-sync rows are exempt and only go away by explicit
    deletion.
    """

    def __init__(self, ledger: VersionLedger, keep: int = DEFAULT_AUTOSAVE_RETENTION):
        if keep < 0:
            raise ValueError(f"Autosave retention must be >= 0, got {keep}")
        self.ledger = ledger
        self.keep = keep

    def enforce(self, identity: ArtifactIdentity) -> int:
        """Prune autosaves beyond the window.

        Returns:
            Number of autosave rows deleted
        """
        deleted = self.ledger.prune_autosaves(identity, self.keep)
        if deleted:
            logger.debug("Pruned %d autosave versions for %s (keep=%d)", deleted, identity, self.keep)
        return deleted

    def overflow(self, identity: ArtifactIdentity) -> int:
        """How many autosave rows the next prune would delete."""
        return max(0, self.ledger.count_autosaves(identity) - self.keep)
