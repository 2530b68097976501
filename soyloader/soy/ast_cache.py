"""
Memoized access to parsed templates.

Entries are keyed by path and never invalidated: once a file has been
parsed in a session, later requests return the stored AST even if the file
changed on disk in the meantime.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

from .parser import SoyFile, SoyParser, parse_soy

logger = logging.getLogger(__name__)


class AstCache:
    """
    Path -> parsed template cache for one build session.

    Usage:
        asts = AstCache()
        ast = asts.get(Path("/project/src/foo.soy"))
        bar = asts.get_by_namespace("bar", candidate_paths)
    """

    def __init__(self, parser: Optional[SoyParser] = None, encoding: str = "utf-8"):
        self._parse = parser or parse_soy
        self.encoding = encoding
        self._asts: Dict[Path, SoyFile] = {}

    @staticmethod
    def _key(path: Union[str, Path]) -> Path:
        return Path(os.path.abspath(path))

    def get(self, path: Union[str, Path]) -> SoyFile:
        """
        Return the parsed template at ``path``, reading and parsing it on first use.

        Raises:
            OSError: If the file cannot be read
            SoyParseError: If the file is malformed
        """
        key = self._key(path)
        ast = self._asts.get(key)
        if ast is None:
            with open(key, "r", encoding=self.encoding) as f:
                text = f.read()
            ast = self._parse(text, key)
            logger.debug(f"Parsed {key} (namespace {ast.namespace})")
            self._asts[key] = ast
        return ast

    def get_by_namespace(
        self, namespace: str, candidates: Iterable[Union[str, Path]]
    ) -> Optional[SoyFile]:
        """
        Find the template declaring ``namespace`` among ``candidates``.

        Every candidate is scanned; when several declare the namespace, the
        last one scanned wins.

        Returns:
            The matching SoyFile, or None if no candidate declares it
        """
        found: Optional[SoyFile] = None
        for path in candidates:
            ast = self.get(path)
            if ast.namespace == namespace:
                found = ast
        return found

    def __contains__(self, path: Union[str, Path]) -> bool:
        return self._key(path) in self._asts

    def __len__(self) -> int:
        return len(self._asts)
