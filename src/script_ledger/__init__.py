"""Script ledger package root.

The public API surface is the ScriptLedger façade, the schema types in
``script_ledger.schemas`` and the exception hierarchy. Editor integrations
should import from this package rather than from ``script_ledger.runtime``.
"""

__version__ = "0.0.1"

from script_ledger.engine import ScriptLedger  # noqa: F401
from script_ledger.config_loader import LedgerConfig, load_ledger_config  # noqa: F401
from script_ledger.exceptions import (  # noqa: F401
    ConfigFetchFailed,
    ConfigLoadError,
    NoDataAvailable,
    RemoteAuthFailure,
    RemoteError,
    RemoteRejected,
    RemoteUnavailable,
    ScriptLedgerError,
    StoreUnavailable,
)
from script_ledger.schemas import *  # noqa: F401,F403
from script_ledger.schemas import __all__ as SCHEMA_EXPORTS

__all__ = [
    "__version__",
    "ScriptLedger",
    "LedgerConfig",
    "load_ledger_config",
    "ConfigFetchFailed",
    "ConfigLoadError",
    "NoDataAvailable",
    "RemoteAuthFailure",
    "RemoteError",
    "RemoteRejected",
    "RemoteUnavailable",
    "ScriptLedgerError",
    "StoreUnavailable",
] + SCHEMA_EXPORTS
