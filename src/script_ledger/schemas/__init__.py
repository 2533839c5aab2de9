"""Schema exports."""

from .base import SchemaBase
from .version import REMOTE_SYNC_NOTE, ArtifactIdentity, VersionOrigin, VersionRecord
from .remote import SECRET_BINDING_TYPES, Binding, ScriptConfiguration
from .outcome import (
    DedupAction,
    DedupDecision,
    LoadOutcome,
    LoadStatus,
    UploadResult,
    UploadStatus,
)

__all__ = [
    "SchemaBase",
    "REMOTE_SYNC_NOTE",
    "ArtifactIdentity",
    "VersionOrigin",
    "VersionRecord",
    "SECRET_BINDING_TYPES",
    "Binding",
    "ScriptConfiguration",
    "DedupAction",
    "DedupDecision",
    "LoadOutcome",
    "LoadStatus",
    "UploadResult",
    "UploadStatus",
]
