"""Namespace call graph for template dependency resolution."""

from .call_graph import CallGraph

__all__ = ["CallGraph"]
