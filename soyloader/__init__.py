"""metal-soy-loader: compile Soy templates with dependency resolution and caching."""

__version__ = "0.1.0"

from soyloader.config import LoaderOptions  # noqa: E402
from soyloader.exceptions import (  # noqa: E402
    ConfigurationError,
    SoyCompileError,
    SoyLoaderError,
    SoyParseError,
)
from soyloader.loader import SoyLoader, load_sync, run_loader  # noqa: E402
from soyloader.session import BuildSession  # noqa: E402

__all__ = [
    "__version__",
    "BuildSession",
    "ConfigurationError",
    "LoaderOptions",
    "SoyCompileError",
    "SoyLoader",
    "SoyLoaderError",
    "SoyParseError",
    "load_sync",
    "run_loader",
]
