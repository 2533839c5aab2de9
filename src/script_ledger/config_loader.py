"""Configuration loader for the script ledger (ledger.yaml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from script_ledger.exceptions import ConfigLoadError
from script_ledger.paths import default_db_path
from script_ledger.runtime.remote_client import DEFAULT_BASE_URL, DEFAULT_TOKEN_ENV
from script_ledger.runtime.retention import DEFAULT_AUTOSAVE_RETENTION
from script_ledger.runtime.upload_pipeline import DEFAULT_COMPATIBILITY_DATE

CONFIG_FILE_NAME = "ledger.yaml"
BACKEND_TYPES = ("sqlite", "in_memory")


@dataclass(frozen=True)
class AccountConfig:
    account_id: str
    token_env: str = DEFAULT_TOKEN_ENV


@dataclass(frozen=True)
class RemoteConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout: int = 30
    compatibility_date: str = DEFAULT_COMPATIBILITY_DATE


@dataclass(frozen=True)
class LedgerConfig:
    backend: str = "sqlite"
    db_path: Optional[str] = None
    autosave_retention: int = DEFAULT_AUTOSAVE_RETENTION
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    accounts: Dict[str, AccountConfig] = field(default_factory=dict)


def load_config_file(path: str) -> Optional[Dict]:
    """Load a ledger.yaml file (optional).

    Args:
        path: Path to the YAML file

    Returns:
        Parsed YAML dict or None if file doesn't exist

    Raises:
        ConfigLoadError: If file exists but is invalid YAML
    """
    if not os.path.exists(path):
        return None

    try:
        with open(path, 'r', encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(os.path.basename(path), f"Invalid YAML: {e}")
    except OSError as e:
        raise ConfigLoadError(os.path.basename(path), str(e))


def parse_ledger_config(data: Optional[Dict], config_dir: Optional[str] = None) -> LedgerConfig:
    """Parse raw configuration data into a LedgerConfig.

    Args:
        data: Raw YAML data (or None for all defaults)
        config_dir: Directory of the config file, used for the default db path

    Raises:
        ConfigLoadError: If a section has the wrong shape or an invalid value
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigLoadError(CONFIG_FILE_NAME, "Root must be a dict")

    backend = str(data.get("backend", "sqlite"))
    if backend not in BACKEND_TYPES:
        raise ConfigLoadError(CONFIG_FILE_NAME, f"Unknown backend: {backend} (expected one of {', '.join(BACKEND_TYPES)})")

    db_path = data.get("db_path")
    if db_path is None and backend == "sqlite":
        db_path = str(default_db_path(config_dir))
    elif db_path is not None:
        db_path = os.path.expanduser(str(db_path))
        if config_dir and not os.path.isabs(db_path):
            db_path = os.path.join(config_dir, db_path)

    retention = _as_int(data.get("autosave_retention", DEFAULT_AUTOSAVE_RETENTION), "autosave_retention")
    if retention < 0:
        raise ConfigLoadError(CONFIG_FILE_NAME, "autosave_retention must be >= 0")

    return LedgerConfig(
        backend=backend,
        db_path=db_path,
        autosave_retention=retention,
        remote=_parse_remote(data.get("remote")),
        accounts=_parse_accounts(data.get("accounts")),
    )


def load_ledger_config(path: Optional[str] = None) -> LedgerConfig:
    """Load ledger.yaml, falling back to defaults when it is absent.

    Args:
        path: Config file path (default: ./ledger.yaml)
    """
    path = path or CONFIG_FILE_NAME
    config_dir = os.path.dirname(os.path.abspath(path))
    return parse_ledger_config(load_config_file(path), config_dir=config_dir)


def _parse_remote(data: Any) -> RemoteConfig:
    if data is None:
        return RemoteConfig()
    if not isinstance(data, dict):
        raise ConfigLoadError(CONFIG_FILE_NAME, "remote must be a dict")

    timeout = _as_int(data.get("timeout", 30), "remote.timeout")
    if timeout <= 0:
        raise ConfigLoadError(CONFIG_FILE_NAME, "remote.timeout must be > 0")

    return RemoteConfig(
        base_url=str(data.get("base_url", DEFAULT_BASE_URL)),
        timeout=timeout,
        compatibility_date=str(data.get("compatibility_date", DEFAULT_COMPATIBILITY_DATE)),
    )


def _parse_accounts(data: Any) -> Dict[str, AccountConfig]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(CONFIG_FILE_NAME, "accounts must be a mapping of owner_ref -> account")

    accounts: Dict[str, AccountConfig] = {}
    for owner_ref, entry in data.items():
        if entry is None:
            entry = {}
        if not isinstance(entry, dict):
            raise ConfigLoadError(CONFIG_FILE_NAME, f"Invalid account entry for {owner_ref}")
        accounts[str(owner_ref)] = AccountConfig(
            account_id=str(entry.get("account_id", owner_ref)),
            token_env=str(entry.get("token_env", DEFAULT_TOKEN_ENV)),
        )
    return accounts


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigLoadError(CONFIG_FILE_NAME, f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigLoadError(CONFIG_FILE_NAME, f"{name} must be an integer")
