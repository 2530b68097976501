"""Glob resolution memoized per pattern for the lifetime of a build session."""

import glob
import logging
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

Scanner = Callable[..., List[str]]


class GlobResolver:
    """
    Resolves file patterns into sorted, absolute path lists.

    The first resolution of a pattern scans the filesystem; every later call
    with the same pattern returns the very same list without re-scanning.
    Filesystem errors propagate to the caller.

    Usage:
        resolver = GlobResolver(root=Path("/project"))
        paths = resolver.resolve("src/**/*.soy")
    """

    def __init__(
        self,
        root: Optional[Union[str, Path]] = None,
        scanner: Optional[Scanner] = None,
    ):
        """
        Args:
            root: Directory relative patterns are matched against (default: cwd)
            scanner: Callable with the ``glob.glob`` signature, mainly for tests
        """
        self.root = Path(os.path.abspath(root)) if root is not None else Path.cwd()
        self._scan = scanner or glob.glob
        self._cache: Dict[str, List[Path]] = {}

    def resolve(self, pattern: str) -> List[Path]:
        if pattern not in self._cache:
            matches = self._scan(pattern, root_dir=str(self.root), recursive=True)
            paths = sorted(
                Path(os.path.abspath(os.path.join(self.root, match)))
                for match in matches
            )
            logger.debug(f"Resolved glob '{pattern}' to {len(paths)} file(s)")
            self._cache[pattern] = paths
        return self._cache[pattern]

    def resolve_all(self, patterns: List[str]) -> List[Path]:
        """Resolve several patterns, concatenated in pattern order."""
        paths: List[Path] = []
        for pattern in patterns:
            paths.extend(self.resolve(pattern))
        return paths

    def __contains__(self, pattern: str) -> bool:
        return pattern in self._cache

    def __len__(self) -> int:
        return len(self._cache)
