"""ScriptLedger façade: the operations exposed to the script editor."""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from script_ledger.config_loader import LedgerConfig, load_ledger_config
from script_ledger.runtime.dedup_gate import DedupGate
from script_ledger.runtime.history import HistoryService
from script_ledger.runtime.load_reconciler import LoadReconciler
from script_ledger.runtime.remote_client import CloudflareScriptClient, RemoteScriptService
from script_ledger.runtime.retention import DEFAULT_AUTOSAVE_RETENTION, RetentionManager
from script_ledger.runtime.save_coordinator import SaveCoordinator
from script_ledger.runtime.upload_pipeline import DEFAULT_COMPATIBILITY_DATE, UploadPipeline
from script_ledger.runtime.version_ledger import Clock, VersionLedger
from script_ledger.schemas import (
    ArtifactIdentity,
    LoadOutcome,
    UploadResult,
    VersionOrigin,
    VersionRecord,
)

logger = logging.getLogger(__name__)


class ScriptLedger:
    """Version history and remote reconciliation for hosted scripts.

    Holds no process-wide state: every collaborator is injected or built
    from a LedgerConfig, so several ledgers can coexist in one process.
    """

    def __init__(
        self,
        ledger: VersionLedger,
        remote: RemoteScriptService,
        retention_limit: int = DEFAULT_AUTOSAVE_RETENTION,
        compatibility_date: str = DEFAULT_COMPATIBILITY_DATE,
    ):
        self.ledger = ledger
        self.remote = remote
        self.retention = RetentionManager(ledger, retention_limit)
        self.dedup_gate = DedupGate(ledger)
        self.reconciler = LoadReconciler(remote, ledger, self.dedup_gate)
        self.saver = SaveCoordinator(ledger, self.retention)
        self.uploader = UploadPipeline(remote, compatibility_date)
        self.history_service = HistoryService(ledger)

    @classmethod
    def from_config(
        cls,
        config: Union[LedgerConfig, str, None] = None,
        remote: Optional[RemoteScriptService] = None,
        clock: Optional[Clock] = None,
    ) -> "ScriptLedger":
        """Build a ledger from a LedgerConfig or a ledger.yaml path.

        Args:
            config: Parsed config, path to ledger.yaml, or None for ./ledger.yaml
            remote: Remote service override (default: CloudflareScriptClient)
            clock: Epoch-millis clock override
        """
        if not isinstance(config, LedgerConfig):
            config = load_ledger_config(config)

        ledger = VersionLedger.create(config.backend, config.db_path, clock=clock)
        if remote is None:
            remote = CloudflareScriptClient(
                accounts=config.accounts,
                base_url=config.remote.base_url,
                timeout=config.remote.timeout,
            )
        logger.debug("Script ledger initialised (backend=%s, retention=%d)", config.backend, config.autosave_retention)
        return cls(
            ledger,
            remote,
            retention_limit=config.autosave_retention,
            compatibility_date=config.remote.compatibility_date,
        )

    def load(self, identity: ArtifactIdentity) -> LoadOutcome:
        return self.reconciler.load(identity)

    def save(
        self,
        identity: ArtifactIdentity,
        content: str,
        origin: Union[VersionOrigin, str] = VersionOrigin.MANUAL,
        note: Optional[str] = None,
    ) -> Optional[int]:
        return self.saver.save(identity, content, origin, note)

    def upload(self, identity: ArtifactIdentity, content: str) -> UploadResult:
        return self.uploader.upload(identity, content)

    def history(self, identity: ArtifactIdentity) -> List[VersionRecord]:
        return self.history_service.history(identity)

    def last_checkpoint(self, identity: ArtifactIdentity) -> Optional[VersionRecord]:
        return self.history_service.last_checkpoint(identity)

    def version_count(self, identity: ArtifactIdentity) -> int:
        return self.history_service.version_count(identity)

    def delete_record(self, record_id: int) -> bool:
        return self.history_service.delete_record(record_id)

    def reset_history(self, identity: ArtifactIdentity) -> int:
        return self.history_service.reset_history(identity)

    def delete_remote_sync_record(self, record_id: int) -> bool:
        return self.history_service.delete_remote_sync_record(record_id)
