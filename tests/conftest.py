"""Shared fixtures for the script ledger test suite."""

import tempfile
from pathlib import Path

import pytest

from script_ledger.runtime.ledger_backend import InMemoryLedgerBackend, SQLiteLedgerBackend
from script_ledger.runtime.version_ledger import VersionLedger
from script_ledger.schemas import ArtifactIdentity
from tests.helpers.fake_remote import FakeClock, FakeRemote


@pytest.fixture
def temp_dir():
    """Provide a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(params=["in_memory", "sqlite"])
def ledger(request, temp_dir, clock):
    """A VersionLedger over each backend."""
    if request.param == "sqlite":
        backend = SQLiteLedgerBackend(str(temp_dir / "versions.db"))
    else:
        backend = InMemoryLedgerBackend()
    return VersionLedger(backend, clock=clock)


@pytest.fixture
def identity():
    return ArtifactIdentity(owner_ref="acct-1", artifact_name="edge-router")


@pytest.fixture
def other_identity():
    return ArtifactIdentity(owner_ref="acct-1", artifact_name="image-resizer")


@pytest.fixture
def remote():
    return FakeRemote(content="const x=1")
