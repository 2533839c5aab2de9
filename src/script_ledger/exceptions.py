"""
Custom exception classes for the script ledger.

This module defines structured exception types for ledger storage,
remote service calls, uploads and configuration loading.
"""

from typing import Optional


class ScriptLedgerError(Exception):
    """Base exception for all script ledger errors."""
    pass


class StoreUnavailable(ScriptLedgerError):
    """The version ledger's backing store could not complete an operation."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"Version store unavailable during {operation}: {message}")


class RemoteError(ScriptLedgerError):
    """Base class for failures reported by the remote script service."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        if status_code is not None:
            super().__init__(f"{message} (HTTP {status_code})")
        else:
            super().__init__(message)


class RemoteUnavailable(RemoteError):
    """Timeout, network failure or server-side (5xx) error."""
    pass


class RemoteAuthFailure(RemoteError):
    """Credentials missing or refused by the remote service."""
    pass


class RemoteRejected(RemoteError):
    """The remote service understood the request and refused it."""
    pass


class ConfigFetchFailed(ScriptLedgerError):
    """Current remote configuration could not be fetched before an upload."""

    def __init__(self, script_name: str, cause: Exception):
        self.script_name = script_name
        self.cause = cause
        super().__init__(f"Could not fetch configuration for {script_name}: {cause}")


class NoDataAvailable(ScriptLedgerError):
    """Neither the remote service nor the local ledger has content to show."""

    def __init__(self, script_name: str, cause: Exception):
        self.script_name = script_name
        self.cause = cause
        super().__init__(f"No content available for {script_name}: {cause}")


class ConfigLoadError(ScriptLedgerError):
    """Error loading the ledger configuration file."""

    def __init__(self, file_name: str, message: str):
        self.file_name = file_name
        self.message = message
        super().__init__(f"Error loading {file_name}: {message}")
