from abc import ABCMeta, abstractmethod
from pathlib import Path
from typing import Sequence


class SoyCompiler(metaclass=ABCMeta):
    """Interface for the external template compiler."""

    @abstractmethod
    async def compile(self, source: Path, soy_deps: Sequence[Path]) -> str:
        """
        Compiles a template file.

        Args:
            source (Path): entry template file
            soy_deps (Sequence[Path]): template files the entry may call into

        Returns:
        - Compiled output text.

        Raises:
            SoyCompileError: if compilation fails. Exactly one of a return
                value or this error is produced per call.
        """
        raise NotImplementedError("Method not implemented yet")
