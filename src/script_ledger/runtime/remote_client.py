"""Remote script service abstraction with a Cloudflare Workers backend."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Callable, Dict, Mapping, Optional, Protocol
from urllib.parse import quote

from script_ledger.exceptions import (
    RemoteAuthFailure,
    RemoteRejected,
    RemoteUnavailable,
)
from script_ledger.schemas import ArtifactIdentity, ScriptConfiguration

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.cloudflare.com/client/v4"
DEFAULT_TOKEN_ENV = "CLOUDFLARE_API_TOKEN"
SCRIPT_CONTENT_TYPE = "application/javascript+module"

Transport = Callable[..., Any]


class RemoteScriptService(Protocol):
    """Protocol for the authoritative script host.

    Implementations raise RemoteError subclasses on failure.
    """

    def fetch_content(self, identity: ArtifactIdentity) -> str:
        ...

    def fetch_configuration(self, identity: ArtifactIdentity) -> ScriptConfiguration:
        ...

    def push_content_and_configuration(
        self,
        identity: ArtifactIdentity,
        content: str,
        configuration: ScriptConfiguration,
    ) -> Any:
        ...


class AccountCredentials(Protocol):
    account_id: str
    token_env: str


def main_module_name(script_name: str) -> str:
    return f"{script_name}.js"


class CloudflareScriptClient:
    """Cloudflare Workers script API client.

    `owner_ref` of an identity selects an entry in `accounts`, which names the
    Cloudflare account id and the environment variable holding its API token.
    """

    def __init__(
        self,
        accounts: Mapping[str, AccountCredentials],
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 30,
        transport: Transport | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.accounts = dict(accounts)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.environ = environ if environ is not None else os.environ
        self.transport = transport or self._requests_transport

    def fetch_content(self, identity: ArtifactIdentity) -> str:
        response = self._request("GET", identity, "")
        self._check_status(response, "fetch script")
        return response.text

    def fetch_configuration(self, identity: ArtifactIdentity) -> ScriptConfiguration:
        response = self._request("GET", identity, "/settings")
        self._check_status(response, "fetch settings")
        result = _parse_envelope(response, "fetch settings")
        if result is None:
            raise RemoteRejected("No settings returned")
        return ScriptConfiguration.model_validate(result)

    def push_content_and_configuration(
        self,
        identity: ArtifactIdentity,
        content: str,
        configuration: ScriptConfiguration,
    ) -> Any:
        main_module = main_module_name(identity.artifact_name)
        metadata: Dict[str, Any] = {
            "main_module": main_module,
            "bindings": [binding.to_payload() for binding in configuration.bindings],
        }
        if configuration.compatibility_date:
            metadata["compatibility_date"] = configuration.compatibility_date
        if configuration.compatibility_flags:
            metadata["compatibility_flags"] = configuration.compatibility_flags
        if configuration.usage_model:
            metadata["usage_model"] = configuration.usage_model

        files = {
            "metadata": (None, json.dumps(metadata), "application/json"),
            main_module: (main_module, content.encode("utf-8"), SCRIPT_CONTENT_TYPE),
        }
        logger.debug("Uploading %s with %d bindings", identity, len(configuration.bindings))
        response = self._request("PUT", identity, "", files=files)
        self._check_status(response, "upload script")
        return _parse_envelope(response, "upload script")

    def _request(self, method: str, identity: ArtifactIdentity, suffix: str, files: Optional[Dict[str, Any]] = None) -> Any:
        account = self.accounts.get(identity.owner_ref)
        if account is None:
            raise RemoteAuthFailure(f"No account configured for {identity.owner_ref}")
        token = self.environ.get(account.token_env)
        if not token:
            raise RemoteAuthFailure(f"API token not set (env var {account.token_env})")

        url = (
            f"{self.base_url}/accounts/{quote(account.account_id, safe='')}"
            f"/workers/scripts/{quote(identity.artifact_name, safe='')}{suffix}"
        )
        headers = {"authorization": f"Bearer {token}"}
        return self.transport(method, url, headers, files=files)

    def _check_status(self, response: Any, action: str) -> None:
        status = response.status_code
        if status < 400:
            return
        message = _error_message(response) or f"Failed to {action}"
        if status in (401, 403):
            raise RemoteAuthFailure(message, status_code=status)
        if status == 429 or status >= 500:
            raise RemoteUnavailable(message, status_code=status)
        raise RemoteRejected(message, status_code=status)

    def _requests_transport(self, method: str, url: str, headers: Dict[str, str], files: Optional[Dict[str, Any]] = None) -> Any:
        import requests

        try:
            return requests.request(method, url, headers=headers, files=files, timeout=self.timeout)
        except requests.Timeout as exc:
            raise RemoteUnavailable(f"Network timeout: {exc}") from exc
        except requests.RequestException as exc:
            raise RemoteUnavailable(f"Network error: {exc}") from exc


def _error_message(response: Any) -> Optional[str]:
    """First API error message from a Cloudflare envelope, if any."""
    try:
        data = response.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    errors = data.get("errors") or []
    if errors and isinstance(errors[0], dict):
        return errors[0].get("message")
    return None


def _parse_envelope(response: Any, action: str) -> Any:
    """Return `result` of a `{success, errors, result}` envelope."""
    try:
        data = response.json()
    except ValueError as exc:
        raise RemoteRejected(f"Failed to {action}: invalid JSON response") from exc
    if not isinstance(data, dict):
        raise RemoteRejected(f"Failed to {action}: unexpected response")
    if not data.get("success", False):
        raise RemoteRejected(_error_message(response) or f"Failed to {action}")
    return data.get("result")
