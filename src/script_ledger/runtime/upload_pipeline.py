"""Publishing edited content while preserving the script's bindings."""

from __future__ import annotations

import logging

from script_ledger.exceptions import ConfigFetchFailed, RemoteError, RemoteUnavailable
from script_ledger.runtime.remote_client import RemoteScriptService
from script_ledger.schemas import ArtifactIdentity, ScriptConfiguration, UploadResult
from script_ledger.utils.worker_format import (
    convert_service_worker_to_es_module,
    needs_module_conversion,
)

logger = logging.getLogger(__name__)

DEFAULT_COMPATIBILITY_DATE = "2024-12-01"


class UploadPipeline:
    """Pushes content back to the remote service.

    The current configuration is fetched first and carried forward minus
    secret-valued bindings; if it cannot be fetched nothing is pushed.
    Uploads never write to the version ledger.
    """

    def __init__(self, remote: RemoteScriptService, compatibility_date: str = DEFAULT_COMPATIBILITY_DATE):
        self.remote = remote
        self.compatibility_date = compatibility_date

    def upload(self, identity: ArtifactIdentity, new_content: str) -> UploadResult:
        try:
            configuration = self.remote.fetch_configuration(identity)
        except Exception as exc:
            error = ConfigFetchFailed(identity.artifact_name, exc)
            logger.error("Upload of %s aborted: %s", identity, error)
            return UploadResult.failed(str(error), error)

        preserved = self.prepare_configuration(configuration)
        content = self.prepare_content(new_content, preserved)

        try:
            self.remote.push_content_and_configuration(identity, content, preserved)
        except RemoteError as exc:
            logger.error("Failed to upload %s: %s", identity, exc)
            return UploadResult.failed(str(exc), exc)
        except Exception as exc:
            error = RemoteUnavailable(f"Upload failed: {exc}")
            logger.error("Failed to upload %s: %s", identity, error)
            return UploadResult.failed(str(error), error)

        logger.debug("Uploaded %s with %d preserved bindings", identity, len(preserved.bindings))
        return UploadResult.success(bindings_preserved=len(preserved.bindings))

    def prepare_configuration(self, configuration: ScriptConfiguration) -> ScriptConfiguration:
        """Drop secret bindings and fill in a compatibility date if missing."""
        preserved = configuration.without_secrets()
        if not preserved.compatibility_date:
            preserved = preserved.model_copy(update={"compatibility_date": self.compatibility_date})
        return preserved

    def prepare_content(self, content: str, configuration: ScriptConfiguration) -> str:
        if needs_module_conversion(content, bool(configuration.bindings)):
            logger.debug("Converting Service Worker script to ES module (has bindings)")
            return convert_service_worker_to_es_module(content)
        return content
