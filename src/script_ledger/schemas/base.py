"""Common schema utilities and base classes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SchemaBase(BaseModel):
    """Base model with common config for script ledger schemas."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)
