"""Remote-then-local reconciliation of a script's current content."""

from __future__ import annotations

import logging
from typing import Optional

from script_ledger.exceptions import (
    NoDataAvailable,
    RemoteAuthFailure,
    RemoteError,
    RemoteRejected,
    RemoteUnavailable,
)
from script_ledger.runtime.dedup_gate import DedupGate
from script_ledger.runtime.keyed_lock import KeyedLock
from script_ledger.runtime.remote_client import RemoteScriptService
from script_ledger.runtime.version_ledger import VersionLedger
from script_ledger.schemas import ArtifactIdentity, LoadOutcome

logger = logging.getLogger(__name__)


class LoadReconciler:
    """Answers "what is the current content?" for one identity.

    FetchingRemote -> RemoteOk -> Fresh
                   -> RemoteFailed -> LocalFallbackOk -> Degraded
                                   -> NoDataAvailable -> Unavailable

    Loads of the same identity are serialised end to end (fetch, dedup,
    insert or bump) so concurrent loads cannot race each other into
    duplicate remote-sync rows. The remote fetch is never retried here.
    """

    def __init__(
        self,
        remote: RemoteScriptService,
        ledger: VersionLedger,
        dedup_gate: Optional[DedupGate] = None,
    ):
        self.remote = remote
        self.ledger = ledger
        self.dedup_gate = dedup_gate or DedupGate(ledger)
        self._load_locks = KeyedLock()

    def load(self, identity: ArtifactIdentity) -> LoadOutcome:
        with self._load_locks.hold(identity):
            try:
                content = self.remote.fetch_content(identity)
            except (RemoteAuthFailure, RemoteRejected) as exc:
                # Local cache cannot fix credentials or a refused request.
                logger.error("Remote refused load of %s: %s", identity, exc)
                return LoadOutcome.unavailable(exc)
            except RemoteError as exc:
                return self._fall_back(identity, exc)
            except Exception as exc:
                return self._fall_back(identity, RemoteUnavailable(f"Failed to fetch script: {exc}"))

            decision = self.dedup_gate.register(identity, content)
            logger.debug("Loaded %s from remote (%s)", identity, decision.action.value)
            return LoadOutcome.fresh(content, record_id=decision.record_id)

    def _fall_back(self, identity: ArtifactIdentity, error: RemoteError) -> LoadOutcome:
        """Serve the newest local snapshot of any origin, never tagging it remote-sync."""
        latest = self.ledger.latest(identity)
        if latest is None:
            logger.error("Failed to load %s: %s (no local versions)", identity, error)
            return LoadOutcome.unavailable(NoDataAvailable(identity.artifact_name, error))

        logger.warning("Remote load of %s failed, serving local version %s: %s", identity, latest.id, error)
        return LoadOutcome.degraded(latest.content, error, record_id=latest.id)
