import json

import pytest

from script_ledger.config_loader import AccountConfig
from script_ledger.exceptions import RemoteAuthFailure, RemoteRejected, RemoteUnavailable
from script_ledger.runtime.remote_client import CloudflareScriptClient
from script_ledger.schemas import ArtifactIdentity, Binding, ScriptConfiguration

IDENTITY = ArtifactIdentity(owner_ref="acct-1", artifact_name="edge-router")
ACCOUNTS = {"acct-1": AccountConfig(account_id="abc123", token_env="CF_TOKEN")}
ENVIRON = {"CF_TOKEN": "secret-token"}


class DummyResponse:
    def __init__(self, status_code=200, text="", payload=None):
        self.status_code = status_code
        self.text = text
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def make_client(response, captured=None, **kwargs):
    def transport(method, url, headers, files=None):
        if captured is not None:
            captured.update(method=method, url=url, headers=headers, files=files)
        return response

    kwargs.setdefault("accounts", ACCOUNTS)
    kwargs.setdefault("environ", ENVIRON)
    return CloudflareScriptClient(base_url="https://cf.test/client/v4/", transport=transport, **kwargs)


def test_fetch_content_builds_url_and_auth_header():
    captured = {}
    client = make_client(DummyResponse(text="const x=1"), captured)

    assert client.fetch_content(IDENTITY) == "const x=1"
    assert captured["method"] == "GET"
    assert captured["url"] == "https://cf.test/client/v4/accounts/abc123/workers/scripts/edge-router"
    assert captured["headers"]["authorization"] == "Bearer secret-token"


def test_fetch_configuration_parses_envelope():
    captured = {}
    payload = {
        "success": True,
        "errors": [],
        "result": {
            "bindings": [
                {"type": "kv_namespace", "name": "CACHE", "namespace_id": "ns1"},
                {"type": "secret_text", "name": "API_KEY"},
            ],
            "compatibility_date": "2024-01-01",
            "logpush": False,
        },
    }
    client = make_client(DummyResponse(payload=payload), captured)

    configuration = client.fetch_configuration(IDENTITY)

    assert captured["url"].endswith("/workers/scripts/edge-router/settings")
    assert [b.name for b in configuration.bindings] == ["CACHE", "API_KEY"]
    assert configuration.bindings[0].to_payload()["namespace_id"] == "ns1"
    assert configuration.compatibility_date == "2024-01-01"


def test_fetch_configuration_unsuccessful_envelope_rejected():
    payload = {"success": False, "errors": [{"code": 10007, "message": "script not found"}], "result": None}
    client = make_client(DummyResponse(payload=payload))
    with pytest.raises(RemoteRejected, match="script not found"):
        client.fetch_configuration(IDENTITY)


def test_push_sends_multipart_metadata_and_module():
    captured = {}
    client = make_client(DummyResponse(payload={"success": True, "errors": [], "result": {"id": "edge-router"}}), captured)
    configuration = ScriptConfiguration(
        bindings=[Binding(type="plain_text", name="GREETING", text="hello")],
        compatibility_date="2024-12-01",
        compatibility_flags=["nodejs_compat"],
    )

    result = client.push_content_and_configuration(IDENTITY, "export default {}", configuration)

    assert result == {"id": "edge-router"}
    assert captured["method"] == "PUT"
    files = captured["files"]
    metadata = json.loads(files["metadata"][1])
    assert metadata["main_module"] == "edge-router.js"
    assert metadata["bindings"] == [{"type": "plain_text", "name": "GREETING", "text": "hello"}]
    assert metadata["compatibility_date"] == "2024-12-01"
    assert metadata["compatibility_flags"] == ["nodejs_compat"]
    assert "usage_model" not in metadata
    name, body, content_type = files["edge-router.js"]
    assert name == "edge-router.js"
    assert body == b"export default {}"
    assert content_type == "application/javascript+module"


@pytest.mark.parametrize(
    "status, error_type",
    [
        (401, RemoteAuthFailure),
        (403, RemoteAuthFailure),
        (404, RemoteRejected),
        (400, RemoteRejected),
        (429, RemoteUnavailable),
        (500, RemoteUnavailable),
        (503, RemoteUnavailable),
    ],
)
def test_status_codes_map_to_error_types(status, error_type):
    client = make_client(DummyResponse(status_code=status, payload={"success": False, "errors": [{"message": "nope"}]}))
    with pytest.raises(error_type) as info:
        client.fetch_content(IDENTITY)
    assert info.value.status_code == status
    assert info.value.message == "nope"


def test_error_without_json_body_uses_generic_message():
    client = make_client(DummyResponse(status_code=502, text="<html>bad gateway</html>"))
    with pytest.raises(RemoteUnavailable, match="Failed to fetch script"):
        client.fetch_content(IDENTITY)


def test_unknown_owner_is_auth_failure():
    client = make_client(DummyResponse(text="x"))
    with pytest.raises(RemoteAuthFailure):
        client.fetch_content(ArtifactIdentity(owner_ref="someone-else", artifact_name="edge-router"))


def test_missing_token_is_auth_failure():
    client = make_client(DummyResponse(text="x"), environ={})
    with pytest.raises(RemoteAuthFailure, match="CF_TOKEN"):
        client.fetch_content(IDENTITY)


def test_script_name_is_url_quoted():
    captured = {}
    client = make_client(DummyResponse(text="x"), captured)
    client.fetch_content(ArtifactIdentity(owner_ref="acct-1", artifact_name="a b/c"))
    assert captured["url"].endswith("/workers/scripts/a%20b%2Fc")
