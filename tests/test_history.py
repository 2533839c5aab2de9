"""Tests for history queries, deletions and undo-to-checkpoint."""

import pytest

from script_ledger.runtime.history import HistoryService
from script_ledger.schemas import VersionOrigin


class TestLastCheckpoint:

    def test_skips_autosaves(self, ledger, identity):
        manual = ledger.insert(identity, "manual", VersionOrigin.MANUAL)
        ledger.insert(identity, "auto 1", VersionOrigin.AUTOSAVE)
        ledger.insert(identity, "auto 2", VersionOrigin.AUTOSAVE)
        assert HistoryService(ledger).last_checkpoint(identity).id == manual

    def test_remote_sync_counts_as_checkpoint(self, ledger, identity):
        ledger.insert(identity, "manual", VersionOrigin.MANUAL)
        remote = ledger.insert(identity, "remote", VersionOrigin.REMOTE_SYNC)
        ledger.insert(identity, "auto", VersionOrigin.AUTOSAVE)
        assert HistoryService(ledger).last_checkpoint(identity).id == remote

    def test_only_autosaves(self, ledger, identity):
        ledger.insert(identity, "auto", VersionOrigin.AUTOSAVE)
        assert HistoryService(ledger).last_checkpoint(identity) is None

    def test_does_not_write(self, ledger, identity):
        ledger.insert(identity, "manual", VersionOrigin.MANUAL)
        HistoryService(ledger).last_checkpoint(identity)
        assert ledger.count(identity) == 1


class TestHistoryManagement:

    def test_history_newest_first(self, ledger, identity):
        ids = [ledger.insert(identity, str(i), VersionOrigin.MANUAL) for i in range(3)]
        service = HistoryService(ledger)
        assert [r.id for r in service.history(identity)] == list(reversed(ids))
        assert service.version_count(identity) == 3

    def test_reset_history_keeps_remote_sync(self, ledger, identity):
        remote = ledger.insert(identity, "remote", VersionOrigin.REMOTE_SYNC)
        ledger.insert(identity, "manual", VersionOrigin.MANUAL)
        ledger.insert(identity, "auto", VersionOrigin.AUTOSAVE)

        assert HistoryService(ledger).reset_history(identity) == 2
        assert [r.id for r in ledger.list_desc(identity)] == [remote]

    def test_delete_record(self, ledger, identity):
        record_id = ledger.insert(identity, "manual", VersionOrigin.MANUAL)
        assert HistoryService(ledger).delete_record(record_id)
        assert ledger.count(identity) == 0

    def test_delete_remote_sync_record(self, ledger, identity):
        record_id = ledger.insert(identity, "remote", VersionOrigin.REMOTE_SYNC)
        assert HistoryService(ledger).delete_remote_sync_record(record_id)
        assert ledger.get(record_id) is None

    def test_delete_remote_sync_record_refuses_other_origins(self, ledger, identity):
        record_id = ledger.insert(identity, "manual", VersionOrigin.MANUAL)
        with pytest.raises(ValueError):
            HistoryService(ledger).delete_remote_sync_record(record_id)
        assert ledger.get(record_id) is not None

    def test_delete_remote_sync_record_missing(self, ledger):
        assert HistoryService(ledger).delete_remote_sync_record(404) is False
