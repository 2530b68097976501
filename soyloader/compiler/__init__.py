from .base import SoyCompiler
from .command import CommandSoyCompiler

__all__ = ["CommandSoyCompiler", "SoyCompiler"]
