"""Version ledger schemas: artifact identity, origins and snapshot records."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import ConfigDict, Field

from .base import SchemaBase

REMOTE_SYNC_NOTE = "remote-sync"


class VersionOrigin(str, Enum):
    """Why a version row was created."""
    MANUAL = "manual"
    AUTOSAVE = "autosave"
    REMOTE_SYNC = "remote_sync"


class ArtifactIdentity(SchemaBase):
    """Names one logical editable script: (account, script name)."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, frozen=True)

    owner_ref: str = Field(min_length=1)
    artifact_name: str = Field(min_length=1)

    def __str__(self) -> str:
        return f"{self.owner_ref}/{self.artifact_name}"


class VersionRecord(SchemaBase):
    """One full-content snapshot in the ledger.

    Content is kept byte-for-byte, so whitespace stripping is disabled here.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=False, frozen=True)

    id: int
    identity: ArtifactIdentity
    content: str
    timestamp: int  # epoch millis
    origin: VersionOrigin
    note: Optional[str] = Field(default=None)

    @property
    def is_checkpoint(self) -> bool:
        """Manual and remote-sync rows are checkpoints; autosaves are not."""
        return self.origin != VersionOrigin.AUTOSAVE

    def sort_key(self) -> Tuple[int, int]:
        return (self.timestamp, self.id)
