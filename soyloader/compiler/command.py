"""External compiler driven through a subprocess."""

import asyncio
import logging
import os
import shlex
import tempfile
from pathlib import Path
from typing import List, Sequence, Union

from soyloader.constants import DEPS_PLACEHOLDER, OUTPUT_PLACEHOLDER, SRC_PLACEHOLDER
from soyloader.exceptions import ConfigurationError, SoyCompileError

from .base import SoyCompiler

logger = logging.getLogger(__name__)


class CommandSoyCompiler(SoyCompiler):
    """
    Runs a command line compiler for each template.

    Arguments may contain ``{src}`` (entry file), ``{deps}`` (comma separated
    dependency files) and ``{output}`` (temporary output file). When
    ``{output}`` is present the compiled text is read from that file,
    otherwise it is taken from the process' stdout.

    Usage:
        compiler = CommandSoyCompiler(
            "java -jar SoyToIncrementalDomSrcCompiler.jar"
            " --srcs {src} --deps {deps} --outputPathFormat {output}"
        )
        output = await compiler.compile(Path("src/foo.soy"), [Path("src/bar.soy")])
    """

    def __init__(self, command: Union[str, Sequence[str]], encoding: str = "utf-8"):
        if isinstance(command, str):
            command = shlex.split(command)
        self.command: List[str] = list(command)
        if not self.command:
            raise ConfigurationError("No compiler command configured")
        self.encoding = encoding

    @property
    def writes_output_file(self) -> bool:
        return any(OUTPUT_PLACEHOLDER in arg for arg in self.command)

    def build_command(
        self, source: Path, soy_deps: Sequence[Path], output: Union[str, Path] = ""
    ) -> List[str]:
        deps = ",".join(str(dep) for dep in soy_deps)
        return [
            arg.replace(SRC_PLACEHOLDER, str(source))
            .replace(DEPS_PLACEHOLDER, deps)
            .replace(OUTPUT_PLACEHOLDER, str(output))
            for arg in self.command
        ]

    async def _run(self, command: List[str], source: Path) -> str:
        logger.debug(f"Running {' '.join(shlex.quote(arg) for arg in command)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SoyCompileError(source, f"could not start compiler: {e}") from e

        stdout, stderr = await process.communicate()
        stderr_text = stderr.decode(self.encoding, errors="replace")
        if process.returncode != 0:
            raise SoyCompileError(
                source,
                f"compiler exited with code {process.returncode}",
                returncode=process.returncode,
                stderr=stderr_text,
            )
        return self._decode(stdout, source)

    def _decode(self, data: bytes, source: Path) -> str:
        try:
            return data.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise SoyCompileError(source, f"compiler output is not valid {self.encoding}: {e}") from e

    async def compile(self, source: Path, soy_deps: Sequence[Path]) -> str:
        if not self.writes_output_file:
            return await self._run(self.build_command(source, soy_deps), source)

        with tempfile.TemporaryDirectory(prefix="soyloader-") as tmp_dir:
            output = Path(tmp_dir) / (source.name + ".js")
            await self._run(self.build_command(source, soy_deps, output), source)
            if not os.path.exists(output):
                raise SoyCompileError(source, f"compiler did not write {output}")
            with open(output, "rb") as f:
                return self._decode(f.read(), source)
