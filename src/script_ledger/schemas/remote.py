"""Remote script configuration schemas (bindings and upload settings)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from .base import SchemaBase

# Bindings of these types are write-only on the remote side; their values
# are never returned by a settings fetch.
SECRET_BINDING_TYPES = frozenset({"secret_text", "secret_key"})


class Binding(SchemaBase):
    """A named resource or variable bound to a script.

    Type-specific fields (namespace_id, bucket_name, database_id, text, ...)
    are carried through untouched as extra fields.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=False, extra="allow")

    type: str
    name: str

    @property
    def is_secret(self) -> bool:
        return self.type in SECRET_BINDING_TYPES

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ScriptConfiguration(SchemaBase):
    """Binding/metadata set of a remote script."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    bindings: List[Binding] = Field(default_factory=list)
    compatibility_date: Optional[str] = Field(default=None)
    compatibility_flags: List[str] = Field(default_factory=list)
    usage_model: Optional[str] = Field(default=None)

    def without_secrets(self) -> "ScriptConfiguration":
        """Return a copy with secret-valued bindings removed."""
        kept = [binding for binding in self.bindings if not binding.is_secret]
        return self.model_copy(update={"bindings": kept})
