"""Soy template parsing and per-session AST memoization."""

from .ast_cache import AstCache
from .parser import (
    SoyCall,
    SoyFile,
    SoyParser,
    SoyTemplate,
    SoyVisitor,
    iter_calls,
    parse_soy,
    visit,
)

__all__ = [
    "AstCache",
    "SoyCall",
    "SoyFile",
    "SoyParser",
    "SoyTemplate",
    "SoyVisitor",
    "iter_calls",
    "parse_soy",
    "visit",
]
