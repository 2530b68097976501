"""
Compilation orchestrator.

Per invocation:
1. Hash the supplied contents and consult the content cache; a hit
   returns immediately.
2. Resolve the source glob and the external dependency globs.
3. Parse the entry template and collect its namespace calls transitively.
4. Select the source files declaring those namespaces and append them to
   the external dependency files.
5. Run the external compiler; on success persist and return the output,
   on failure raise without touching the cache.
"""

import asyncio
import logging
import os
import weakref
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from soyloader.cache import content_hash
from soyloader.compiler import CommandSoyCompiler, SoyCompiler
from soyloader.config import LoaderOptions
from soyloader.deps import external_calls, resolve_internal_deps
from soyloader.exceptions import ConfigurationError, SoyCompileError
from soyloader.session import BuildSession
from soyloader.utils import strip_module_suffix

logger = logging.getLogger(__name__)

LoaderCallback = Callable[[Optional[BaseException], Optional[str]], None]


class SoyLoader:
    """
    Compiles template files on demand for a bundler.

    Usage:
        loader = SoyLoader(LoaderOptions(compiler=["soyc", "{src}", "{deps}"]))
        output = await loader.load(contents, "/project/src/foo.soy")
    """

    def __init__(
        self,
        options: Optional[LoaderOptions] = None,
        session: Optional[BuildSession] = None,
        compiler: Optional[SoyCompiler] = None,
    ):
        """
        Args:
            options: Loader options (defaults apply when omitted)
            session: Session caches; a fresh session is created when omitted
            compiler: External compiler; built from ``options.compiler`` when
                omitted and a command is configured
        """
        self.options = options or LoaderOptions()
        self.session = session or BuildSession.from_options(self.options)
        if compiler is None and self.options.compiler:
            compiler = CommandSoyCompiler(self.options.compiler)
        self.compiler = compiler
        self._locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, Dict[Path, asyncio.Lock]]" = (
            weakref.WeakKeyDictionary()
        )

    def entry_path(self, resource_path: Union[str, Path]) -> Path:
        path = strip_module_suffix(resource_path, self.options.module_suffix)
        return Path(os.path.abspath(path))

    def _lock_for(self, entry: Path) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        locks = self._locks.setdefault(loop, {})
        if entry not in locks:
            locks[entry] = asyncio.Lock()
        return locks[entry]

    def _report_cycle(self, namespace: str) -> None:
        cycle = self.session.graph.find_cycle(namespace)
        if not cycle:
            return
        members = frozenset(cycle)
        if members not in self.session.reported_cycles:
            self.session.reported_cycles.add(members)
            logger.warning(f"Cyclic template calls: {' -> '.join(cycle)}")

    def _dependencies(self, entry: Path) -> List[Path]:
        session = self.session
        src_paths = session.globs.resolve(self.options.src)
        external_deps = session.globs.resolve_all(self.options.soy_deps)

        ast = session.asts.get(entry)
        calls = external_calls(ast, src_paths, session.asts, session.graph)
        self._report_cycle(ast.namespace)

        internal_deps = [
            path
            for path in resolve_internal_deps(src_paths, calls, session.asts)
            if path != entry
        ]
        return external_deps + internal_deps

    def dependencies(self, resource_path: Union[str, Path]) -> List[Path]:
        """
        Dependency files the compiler receives for ``resource_path``.

        External dependency files come first, then the internal sources the
        entry calls into, in glob order. The entry itself is never included.

        Raises:
            SoyParseError: If the entry or a scanned source is malformed
            OSError: If a file or directory cannot be read
        """
        return self._dependencies(self.entry_path(resource_path))

    async def load(self, contents: Union[str, bytes], resource_path: Union[str, Path]) -> str:
        """
        Return compiled output for a template, from cache when possible.

        Args:
            contents: Current template contents as supplied by the bundler
            resource_path: Template path, optionally with the module suffix

        Returns:
            Compiled output text

        Raises:
            SoyParseError: If a template is malformed
            SoyCompileError: If the external compiler fails
            ConfigurationError: If compilation is needed but no compiler is set
        """
        entry = self.entry_path(resource_path)
        async with self._lock_for(entry):
            current_hash = content_hash(contents)
            cached = self.session.cache.lookup(entry, current_hash)
            if cached is not None:
                return cached

            if self.compiler is None:
                raise ConfigurationError(f"No compiler configured to compile {entry}")

            soy_deps = self._dependencies(entry)
            logger.info(f"Compiling {entry} ({len(soy_deps)} dependencies)")
            try:
                output = await self.compiler.compile(entry, soy_deps)
            except SoyCompileError as e:
                logger.error(f"{e}")
                raise

            self.session.cache.store(entry, output, current_hash)
            logger.info(f"Compiled {entry}")
            return output


def run_loader(
    loader: SoyLoader,
    contents: Union[str, bytes],
    resource_path: Union[str, Path],
    callback: LoaderCallback,
) -> "asyncio.Task[str]":
    """
    Schedule ``loader.load`` and report its outcome through ``callback``.

    ``callback(error, result)`` is called exactly once: with ``(None, output)``
    on success (cache hits included) or with ``(error, None)`` on failure.
    Must be called with a running event loop.

    Returns:
        The scheduled task
    """
    task = asyncio.get_running_loop().create_task(loader.load(contents, resource_path))

    def _done(finished: "asyncio.Task[str]") -> None:
        if finished.cancelled():
            callback(asyncio.CancelledError(), None)
            return
        error = finished.exception()
        if error is not None:
            callback(error, None)
        else:
            callback(None, finished.result())

    task.add_done_callback(_done)
    return task


def load_sync(
    loader: SoyLoader, contents: Union[str, bytes], resource_path: Union[str, Path]
) -> str:
    """Blocking wrapper around ``loader.load`` for scripts and the CLI."""
    return asyncio.run(loader.load(contents, resource_path))
