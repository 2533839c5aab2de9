"""End-to-end behaviour of the ScriptLedger façade."""

import pytest

from script_ledger import ScriptLedger
from script_ledger.config_loader import LedgerConfig, parse_ledger_config
from script_ledger.exceptions import NoDataAvailable, RemoteUnavailable
from script_ledger.runtime.remote_client import CloudflareScriptClient
from script_ledger.schemas import (
    Binding,
    LoadStatus,
    ScriptConfiguration,
    UploadStatus,
    VersionOrigin,
)
from tests.helpers.fake_remote import FakeClock, FakeRemote


@pytest.fixture
def facade(remote, clock):
    config = parse_ledger_config({"backend": "in_memory", "autosave_retention": 3})
    return ScriptLedger.from_config(config, remote=remote, clock=clock)


class TestFromConfig:

    def test_builds_cloudflare_client_by_default(self):
        config = parse_ledger_config({
            "backend": "in_memory",
            "remote": {"base_url": "https://cf.test", "timeout": 7},
            "accounts": {"acct-1": {"account_id": "abc"}},
        })
        ledger = ScriptLedger.from_config(config)

        assert isinstance(ledger.remote, CloudflareScriptClient)
        assert ledger.remote.base_url == "https://cf.test"
        assert ledger.remote.timeout == 7
        assert ledger.retention.keep == config.autosave_retention

    def test_loads_yaml_path(self, temp_dir, remote, identity):
        path = temp_dir / "ledger.yaml"
        path.write_text("backend: sqlite\ndb_path: state/versions.db\n")

        ledger = ScriptLedger.from_config(str(path), remote=remote)
        ledger.save(identity, "draft")

        assert (temp_dir / "state" / "versions.db").exists()
        reopened = ScriptLedger.from_config(str(path), remote=remote)
        assert [r.content for r in reopened.history(identity)] == ["draft"]

    def test_instances_are_independent(self, identity):
        config = LedgerConfig(backend="in_memory")
        first = ScriptLedger.from_config(config, remote=FakeRemote("a"))
        second = ScriptLedger.from_config(config, remote=FakeRemote("b"))

        first.save(identity, "only in first")

        assert second.version_count(identity) == 0


class TestEditingSession:

    def test_reopen_without_remote_change_keeps_one_remote_sync_row(self, facade, identity):
        for _ in range(3):
            assert facade.load(identity).status == LoadStatus.FRESH

        rows = facade.history(identity)
        assert len(rows) == 1
        assert rows[0].origin == VersionOrigin.REMOTE_SYNC

    def test_remote_change_adds_new_remote_sync_row(self, facade, remote, identity):
        facade.load(identity)
        remote.content = "const x=2"
        facade.load(identity)

        assert [r.content for r in facade.history(identity)] == ["const x=2", "const x=1"]

    def test_offline_load_serves_latest_local_edit(self, facade, remote, identity):
        facade.load(identity)
        facade.save(identity, "const x=1 // edited", VersionOrigin.AUTOSAVE)
        remote.fetch_error = RemoteUnavailable("timeout")

        outcome = facade.load(identity)

        assert outcome.status == LoadStatus.DEGRADED
        assert outcome.content == "const x=1 // edited"
        assert facade.version_count(identity) == 2

    def test_offline_first_open_is_unavailable(self, facade, remote, identity):
        remote.fetch_error = RemoteUnavailable("timeout")

        outcome = facade.load(identity)

        assert outcome.status == LoadStatus.UNAVAILABLE
        assert isinstance(outcome.error, NoDataAvailable)

    def test_autosave_window(self, facade, identity):
        facade.save(identity, "checkpoint", VersionOrigin.MANUAL)
        for i in range(8):
            facade.save(identity, f"auto {i}", VersionOrigin.AUTOSAVE)

        rows = facade.history(identity)
        assert [r.content for r in rows if r.origin == VersionOrigin.AUTOSAVE] == ["auto 7", "auto 6", "auto 5"]
        assert facade.last_checkpoint(identity).content == "checkpoint"

    def test_upload_preserves_bindings_and_leaves_history_alone(self, facade, remote, identity):
        remote.configuration = ScriptConfiguration(bindings=[
            Binding(type="kv_namespace", name="CACHE", namespace_id="ns1"),
            Binding(type="secret_text", name="TOKEN"),
        ])
        facade.load(identity)

        result = facade.upload(identity, "export default {}")

        assert result.status == UploadStatus.SUCCESS
        assert [b.name for b in remote.pushes[0][2].bindings] == ["CACHE"]
        assert facade.version_count(identity) == 1

    def test_reset_then_delete_remote_sync(self, facade, identity):
        facade.load(identity)
        facade.save(identity, "manual")
        facade.save(identity, "auto", VersionOrigin.AUTOSAVE)

        assert facade.reset_history(identity) == 2
        [remote_row] = facade.history(identity)
        assert facade.delete_remote_sync_record(remote_row.id)
        assert facade.version_count(identity) == 0

    def test_delete_record(self, facade, identity):
        record_id = facade.save(identity, "manual")
        assert facade.delete_record(record_id)
        assert not facade.delete_record(record_id)


def test_shared_store_across_ledgers_dedups_by_content(temp_dir, identity):
    config = LedgerConfig(backend="sqlite", db_path=str(temp_dir / "v.db"))
    clock = FakeClock()
    remote = FakeRemote("const x=1")

    ScriptLedger.from_config(config, remote=remote, clock=clock).load(identity)
    ScriptLedger.from_config(config, remote=remote, clock=clock).load(identity)

    rows = ScriptLedger.from_config(config, remote=remote).history(identity)
    assert len(rows) == 1
