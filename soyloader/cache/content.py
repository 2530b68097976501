"""
Content-addressed cache of compiled template output.

Storage structure:
    {cache_dir}/                    # mirrors {source_root}
        foo.soy.js                  # compiled output
        foo.soy.js.hash             # content hash the output was built from
        components/
            bar.soy.js
            bar.soy.js.hash

An entry is reused only while the hash of the supplied source equals the
hash it was compiled from. The in-memory hash map is updated on every
lookup; the ``.hash`` sidecar lets a new session validate entries written
by an earlier one.
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import xxhash
from filelock import FileLock

from soyloader.constants import COMPILED_SUFFIX, HASH_SUFFIX, LOCK_SUFFIX

logger = logging.getLogger(__name__)


def content_hash(contents: Union[str, bytes]) -> str:
    """Fast non-cryptographic digest of the exact bytes of ``contents``."""
    if isinstance(contents, str):
        contents = contents.encode("utf-8")
    return xxhash.xxh3_64_hexdigest(contents)


def _atomic_write(path: Path, text: str) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def _read_text(path: Path) -> str:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


class ContentCache:
    """
    Maps entry template paths to their last compiled output.

    Usage:
        cache = ContentCache(cache_dir=Path(".soycache"), source_root=Path("src"))
        output = cache.lookup(entry, content_hash(contents))
        if output is None:
            output = compile(...)
            cache.store(entry, output)
    """

    def __init__(
        self,
        cache_dir: Union[str, Path],
        source_root: Union[str, Path],
        compiled_suffix: str = COMPILED_SUFFIX,
    ):
        self.cache_dir = Path(os.path.abspath(cache_dir))
        self.source_root = Path(os.path.abspath(source_root))
        self.compiled_suffix = compiled_suffix
        self._hashes: Dict[Path, str] = {}

    @staticmethod
    def _key(entry: Union[str, Path]) -> Path:
        return Path(os.path.abspath(entry))

    def output_path(self, entry: Union[str, Path]) -> Path:
        """
        Location of the compiled output for ``entry``.

        The path relative to the source root is mirrored under the cache root.
        Parent-directory segments become ``__`` so entries outside the source
        root stay inside the cache root.
        """
        relative = os.path.relpath(self._key(entry), self.source_root)
        parts = ["__" if part == os.pardir else part for part in Path(relative).parts]
        return self.cache_dir.joinpath(*parts[:-1], parts[-1] + self.compiled_suffix)

    def _hash_path(self, output: Path) -> Path:
        return output.with_name(output.name + HASH_SUFFIX)

    def _lock(self, output: Path) -> FileLock:
        return FileLock(str(output.with_name(output.name + LOCK_SUFFIX)))

    def stored_hash(self, entry: Union[str, Path]) -> Optional[str]:
        """The hash remembered for ``entry``: in memory first, then on disk."""
        key = self._key(entry)
        if key in self._hashes:
            return self._hashes[key]
        try:
            return _read_text(self._hash_path(self.output_path(key))).strip() or None
        except (OSError, UnicodeDecodeError):
            return None

    def _read_entry(self, key: Path) -> Tuple[str, str]:
        output_path = self.output_path(key)
        if not output_path.parent.is_dir():
            raise FileNotFoundError(str(output_path))
        with self._lock(output_path):
            stored = _read_text(self._hash_path(output_path)).strip()
            output = _read_text(output_path)
        return stored, output

    def lookup(self, entry: Union[str, Path], current_hash: str) -> Optional[str]:
        """
        Return the cached output for ``entry`` if it was built from ``current_hash``.

        The remembered hash for ``entry`` is set to ``current_hash`` whatever
        the outcome. Unreadable or missing cache files are misses.

        Args:
            entry: Path of the entry template
            current_hash: Hash of the entry's current contents

        Returns:
            The cached compiled output, or None on a miss
        """
        key = self._key(entry)
        previous = self.stored_hash(key)
        self._hashes[key] = current_hash

        if previous is None:
            logger.debug(f"Cache miss for {key}: not compiled before")
            return None
        if previous != current_hash:
            logger.debug(f"Cache miss for {key}: content changed")
            return None

        try:
            stored, output = self._read_entry(key)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Cache miss for {key}: {e}")
            return None

        if stored != current_hash:
            logger.debug(f"Cache miss for {key}: cached output is stale")
            return None

        logger.debug(f"Cache hit for {key}")
        return output

    def store(
        self,
        entry: Union[str, Path],
        output: str,
        current_hash: Optional[str] = None,
    ) -> Path:
        """
        Persist ``output`` for ``entry``, overwriting any previous entry.

        Args:
            entry: Path of the entry template
            output: Compiled output text
            current_hash: Hash the output was compiled from; defaults to the
                hash seen by the last lookup

        Returns:
            Path of the written output file
        """
        key = self._key(entry)
        digest = current_hash if current_hash is not None else self._hashes.get(key)
        output_path = self.output_path(key)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with self._lock(output_path):
            _atomic_write(output_path, output)
            hash_path = self._hash_path(output_path)
            if digest is not None:
                _atomic_write(hash_path, digest)
            elif hash_path.exists():
                hash_path.unlink()

        if digest is not None:
            self._hashes[key] = digest
        logger.debug(f"Cached {key} at {output_path}")
        return output_path

    def clear(self) -> bool:
        """
        Remove the cache root and forget all remembered hashes.

        Returns:
            True if a cache directory was removed
        """
        self._hashes.clear()
        if not self.cache_dir.exists():
            return False
        shutil.rmtree(self.cache_dir)
        logger.info(f"Removed cache directory {self.cache_dir}")
        return True
