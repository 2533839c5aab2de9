"""Utility modules for the script ledger."""

from .worker_format import (
    convert_service_worker_to_es_module,
    is_es_module,
    is_service_worker,
    needs_module_conversion,
)

__all__ = [
    "convert_service_worker_to_es_module",
    "is_es_module",
    "is_service_worker",
    "needs_module_conversion",
]
