"""Loader options: defaults, validation and loading from YAML or bundler option mappings."""

import logging
import os
import shlex
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

import yaml
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from soyloader.constants import (
    CACHE_DIR_NAME,
    COMPILED_SUFFIX,
    CONFIG_FILE_NAMES,
    DEFAULT_DEPS_GLOB,
    DEFAULT_SRC_GLOB,
    MODULE_SUFFIX,
    SOURCE_DIR_NAME,
)
from soyloader.exceptions import ConfigurationError
from soyloader.utils import as_list

logger = logging.getLogger(__name__)


class LoaderOptions(BaseModel):
    """
    Options recognized by the loader.

    Relative ``cache_dir`` and ``source_root`` values are resolved against
    ``root`` once, when the options are validated.

    Usage:
        options = LoaderOptions(src="src/**/*.soy", soyDeps="lib/**/*.soy")
        options = LoaderOptions.from_yaml(Path("soyloader.yaml"))
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    src: str = Field(DEFAULT_SRC_GLOB, description="Glob of internal template sources")
    soy_deps: List[str] = Field(
        default_factory=lambda: [DEFAULT_DEPS_GLOB],
        validation_alias=AliasChoices("soy_deps", "soyDeps", "deps"),
        description="Globs of external dependency templates",
    )
    root: Path = Field(default_factory=Path.cwd, description="Project root directory")
    cache_dir: Optional[Path] = Field(None, description="Compiled output cache root")
    source_root: Optional[Path] = Field(
        None, description="Source root mirrored by the cache layout"
    )
    compiled_suffix: str = COMPILED_SUFFIX
    module_suffix: str = MODULE_SUFFIX
    compiler: List[str] = Field(
        default_factory=list, description="External compiler command line"
    )

    @field_validator("src")
    @classmethod
    def validate_src(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("src must be a non-empty glob pattern")
        return v.strip()

    @field_validator("soy_deps", mode="before")
    @classmethod
    def normalize_soy_deps(cls, v: Any) -> List[str]:
        patterns = as_list(v)
        for pattern in patterns:
            if not isinstance(pattern, str):
                raise ValueError("soyDeps entries must be strings")
        return [pattern.strip() for pattern in patterns if pattern.strip()]

    @field_validator("compiler", mode="before")
    @classmethod
    def normalize_compiler(cls, v: Any) -> List[str]:
        if isinstance(v, str):
            return shlex.split(v)
        return as_list(v)

    @field_validator("compiled_suffix")
    @classmethod
    def validate_compiled_suffix(cls, v: str) -> str:
        if not v.startswith("."):
            raise ValueError("compiled_suffix must start with '.'")
        return v

    @model_validator(mode="after")
    def resolve_directories(self) -> "LoaderOptions":
        self.root = Path(os.path.abspath(self.root.expanduser()))
        if self.cache_dir is None:
            self.cache_dir = self.root / CACHE_DIR_NAME
        elif not self.cache_dir.is_absolute():
            self.cache_dir = self.root / self.cache_dir.expanduser()
        if self.source_root is None:
            self.source_root = self.root / SOURCE_DIR_NAME
        elif not self.source_root.is_absolute():
            self.source_root = self.root / self.source_root.expanduser()
        return self

    @classmethod
    def from_mapping(
        cls, options: Optional[Mapping[str, Any]] = None, **overrides: Any
    ) -> "LoaderOptions":
        """
        Build options from a bundler-style option object.

        Missing keys take their defaults; ``None`` values are ignored the same
        way an unset option is.

        Args:
            options: Mapping of option names (``src``, ``soyDeps``, ...)
            **overrides: Values that take precedence over ``options``

        Returns:
            Validated LoaderOptions

        Raises:
            ConfigurationError: If an option is unknown or invalid
        """
        data = {k: v for k, v in dict(options or {}).items() if v is not None}
        data.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid loader options: {e}") from e

    @classmethod
    def from_yaml(cls, path: Union[str, Path], **overrides: Any) -> "LoaderOptions":
        """
        Load options from a YAML file.

        A relative ``root`` in the file is taken relative to the file itself.
        """
        path = Path(path)
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Could not parse {path}: {e}") from e

        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Configuration file '{path}' must contain a mapping")

        data = dict(data)
        root = Path(data.get("root", "."))
        if not root.is_absolute():
            data["root"] = Path(os.path.abspath(path.parent)) / root
        logger.debug(f"Loaded loader options from {path}")
        return cls.from_mapping(data, **overrides)


def find_config_file(root: Union[str, Path]) -> Optional[Path]:
    """
    Look for a soyloader configuration file in ``root``.

    Returns:
        Path to the first existing candidate, or None
    """
    for name in CONFIG_FILE_NAMES:
        candidate = Path(root) / name
        if candidate.is_file():
            return candidate
    return None
