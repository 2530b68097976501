"""
Exception classes for soyloader.
"""

from pathlib import Path
from typing import Optional, Union


class SoyLoaderError(Exception):
    """Base exception for all soyloader errors."""

    pass


class ConfigurationError(SoyLoaderError):
    """Raised when loader options are invalid."""

    pass


class SoyParseError(SoyLoaderError):
    """Raised when a template cannot be parsed."""

    def __init__(
        self,
        path: Optional[Union[str, Path]],
        message: str,
        line: Optional[int] = None,
    ):
        self.path = Path(path) if path is not None else None
        self.message = message
        self.line = line
        location = str(self.path) if self.path is not None else "<string>"
        if line is not None:
            location = f"{location}:{line}"
        super().__init__(f"{location}: {message}")


class SoyCompileError(SoyLoaderError):
    """Raised when the external compiler fails for a template."""

    def __init__(
        self,
        source: Union[str, Path],
        message: str,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.source = Path(source)
        self.message = message
        self.returncode = returncode
        self.stderr = stderr
        text = f"Failed to compile {self.source}: {message}"
        if stderr:
            text = f"{text}\n{stderr.rstrip()}"
        super().__init__(text)
