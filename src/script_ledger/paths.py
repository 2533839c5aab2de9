"""Centralized path utilities for script ledger state."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

STATE_ENV_VAR = "SCRIPT_LEDGER_STATE_DIR"
DEFAULT_DB_NAME = "script_versions.db"


def resolve_state_root(config_dir: Optional[str] = None) -> Path:
    """Return the directory used for ledger state.

    Priority:
        1. SCRIPT_LEDGER_STATE_DIR environment variable (absolute or relative).
        2. `<config_dir>/.script_ledger` if config_dir provided.
        3. Current working directory `.script_ledger`.
    """
    env_path = os.getenv(STATE_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser().resolve()

    base = Path(config_dir).resolve() if config_dir else Path.cwd().resolve()
    return base / ".script_ledger"


def default_db_path(config_dir: Optional[str] = None) -> Path:
    return resolve_state_root(config_dir) / DEFAULT_DB_NAME
