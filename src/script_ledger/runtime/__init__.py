"""Runtime exports."""

from script_ledger.runtime.keyed_lock import KeyedLock
from script_ledger.runtime.ledger_backend import (
    InMemoryLedgerBackend,
    LedgerBackend,
    SQLiteLedgerBackend,
    create_backend,
)
from script_ledger.runtime.version_ledger import VersionLedger, current_millis
from script_ledger.runtime.dedup_gate import DedupGate
from script_ledger.runtime.retention import DEFAULT_AUTOSAVE_RETENTION, RetentionManager
from script_ledger.runtime.remote_client import CloudflareScriptClient, RemoteScriptService
from script_ledger.runtime.load_reconciler import LoadReconciler
from script_ledger.runtime.save_coordinator import SaveCoordinator
from script_ledger.runtime.upload_pipeline import DEFAULT_COMPATIBILITY_DATE, UploadPipeline
from script_ledger.runtime.history import HistoryService

__all__ = [
    "KeyedLock",
    "InMemoryLedgerBackend",
    "LedgerBackend",
    "SQLiteLedgerBackend",
    "create_backend",
    "VersionLedger",
    "current_millis",
    "DedupGate",
    "DEFAULT_AUTOSAVE_RETENTION",
    "RetentionManager",
    "CloudflareScriptClient",
    "RemoteScriptService",
    "LoadReconciler",
    "SaveCoordinator",
    "DEFAULT_COMPATIBILITY_DATE",
    "UploadPipeline",
    "HistoryService",
]
