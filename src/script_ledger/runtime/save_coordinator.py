"""Manual and autosave snapshot recording."""

from __future__ import annotations

import logging
from typing import Optional, Union

from script_ledger.exceptions import StoreUnavailable
from script_ledger.runtime.retention import RetentionManager
from script_ledger.runtime.version_ledger import VersionLedger
from script_ledger.schemas import ArtifactIdentity, VersionOrigin

logger = logging.getLogger(__name__)


class SaveCoordinator:
    """Records every save as its own row; saves are never deduplicated.

    Autosaves are followed by a retention prune and are best effort: a store
    failure is logged and dropped. Manual save failures propagate.
    """

    def __init__(self, ledger: VersionLedger, retention: RetentionManager):
        self.ledger = ledger
        self.retention = retention

    def save(
        self,
        identity: ArtifactIdentity,
        content: str,
        origin: Union[VersionOrigin, str] = VersionOrigin.MANUAL,
        note: Optional[str] = None,
    ) -> Optional[int]:
        """Insert a snapshot.

        Args:
            identity: Script being edited
            content: Full editor buffer
            origin: MANUAL or AUTOSAVE
            note: Optional user description

        Returns:
            New row id, or None when an autosave was dropped

        Raises:
            ValueError: If origin is REMOTE_SYNC
            StoreUnavailable: If a manual save cannot be written
        """
        origin = VersionOrigin(origin)
        if origin == VersionOrigin.REMOTE_SYNC:
            raise ValueError("Remote-sync versions are only recorded by loads")

        try:
            with self.ledger.identity_lock(identity):
                record_id = self.ledger.insert(identity, content, origin, note=note)
                if origin == VersionOrigin.AUTOSAVE:
                    self.retention.enforce(identity)
        except StoreUnavailable as exc:
            if origin == VersionOrigin.AUTOSAVE:
                logger.warning("Autosave of %s dropped: %s", identity, exc)
                return None
            logger.error("Manual save of %s failed: %s", identity, exc)
            raise

        logger.debug("Saved %s version %s for %s", origin.value, record_id, identity)
        return record_id
