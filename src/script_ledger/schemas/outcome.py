"""Result types returned by load, dedup and upload operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LoadStatus(str, Enum):
    """Terminal state of a load request."""
    FRESH = "fresh"
    DEGRADED = "degraded"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class LoadOutcome:
    """Content handed to the editor, plus where it came from."""
    status: LoadStatus
    content: Optional[str] = None
    error: Optional[Exception] = None  # fetch error for degraded/unavailable
    record_id: Optional[int] = None  # ledger row backing the content

    @classmethod
    def fresh(cls, content: str, record_id: Optional[int] = None) -> "LoadOutcome":
        return cls(status=LoadStatus.FRESH, content=content, record_id=record_id)

    @classmethod
    def degraded(cls, content: str, error: Exception, record_id: Optional[int] = None) -> "LoadOutcome":
        return cls(status=LoadStatus.DEGRADED, content=content, error=error, record_id=record_id)

    @classmethod
    def unavailable(cls, error: Exception) -> "LoadOutcome":
        return cls(status=LoadStatus.UNAVAILABLE, error=error)

    @property
    def has_content(self) -> bool:
        return self.status != LoadStatus.UNAVAILABLE


class DedupAction(str, Enum):
    INSERTED = "inserted"
    BUMPED = "bumped"


@dataclass(frozen=True)
class DedupDecision:
    """What the dedup gate did with a fetched remote snapshot."""
    action: DedupAction
    record_id: int
    timestamp: Optional[int] = None  # set for bumps


class UploadStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class UploadResult:
    """Outcome of publishing content to the remote service."""
    status: UploadStatus
    reason: Optional[str] = None
    error: Optional[Exception] = None
    bindings_preserved: int = 0

    @classmethod
    def success(cls, bindings_preserved: int = 0) -> "UploadResult":
        return cls(status=UploadStatus.SUCCESS, bindings_preserved=bindings_preserved)

    @classmethod
    def failed(cls, reason: str, error: Optional[Exception] = None) -> "UploadResult":
        return cls(status=UploadStatus.FAILED, reason=reason, error=error)

    @property
    def ok(self) -> bool:
        return self.status == UploadStatus.SUCCESS
