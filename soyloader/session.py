"""Caches that live for one build session."""

from dataclasses import dataclass, field
from typing import Optional, Set, FrozenSet

from soyloader.cache import ContentCache
from soyloader.config import LoaderOptions
from soyloader.dag import CallGraph
from soyloader.resolve import GlobResolver
from soyloader.resolve.globs import Scanner
from soyloader.soy import AstCache, SoyParser


@dataclass
class BuildSession:
    """
    Owns the glob, AST and content caches of one build.

    A session is created once and shared by every loader invocation of that
    build; dropping it discards everything except the durable cache directory.
    """

    globs: GlobResolver
    asts: AstCache
    cache: ContentCache
    graph: CallGraph = field(default_factory=CallGraph)
    reported_cycles: Set[FrozenSet[str]] = field(default_factory=set)

    @classmethod
    def from_options(
        cls,
        options: LoaderOptions,
        parser: Optional[SoyParser] = None,
        scanner: Optional[Scanner] = None,
    ) -> "BuildSession":
        return cls(
            globs=GlobResolver(options.root, scanner=scanner),
            asts=AstCache(parser),
            cache=ContentCache(
                options.cache_dir,
                options.source_root,
                compiled_suffix=options.compiled_suffix,
            ),
        )
