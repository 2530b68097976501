"""Namespace call extraction and dependency file resolution."""

from .calls import direct_external_calls, external_calls
from .resolver import resolve_internal_deps

__all__ = ["direct_external_calls", "external_calls", "resolve_internal_deps"]
