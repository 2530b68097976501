"""Build LoaderOptions from CLI flags and configuration files."""

from pathlib import Path
from typing import Optional, Sequence

import click

from soyloader.config import LoaderOptions, find_config_file
from soyloader.exceptions import ConfigurationError


def config_options(f):
    """Decorator adding the options shared by commands that need LoaderOptions."""
    decorators = [
        click.option(
            "--config",
            "-c",
            "config_path",
            type=click.Path(exists=True, dir_okay=False),
            help="Path to a soyloader YAML configuration file.",
            envvar="SOYLOADER_CONFIG",
        ),
        click.option("--src", type=str, default=None, help="Glob of internal template sources."),
        click.option(
            "--deps",
            "soy_deps",
            type=str,
            multiple=True,
            help="Glob of external dependency templates (repeatable).",
        ),
        click.option(
            "--compiler",
            type=str,
            default=None,
            help="External compiler command line, e.g. 'soyc {src} --deps {deps}'.",
            envvar="SOYLOADER_COMPILER",
        ),
        click.option(
            "--root",
            type=click.Path(exists=True, file_okay=False),
            default=None,
            help="Project root. Defaults to the current directory.",
        ),
    ]
    for decorator in reversed(decorators):
        f = decorator(f)
    return f


def build_options(
    config_path: Optional[str],
    src: Optional[str],
    soy_deps: Sequence[str],
    compiler: Optional[str],
    root: Optional[str],
) -> LoaderOptions:
    """
    Merge CLI flags over the configuration file (explicit or discovered).

    Raises:
        click.ClickException: If the resulting options are invalid
    """
    overrides = dict(
        src=src,
        soy_deps=list(soy_deps) or None,
        compiler=compiler,
        root=Path(root) if root else None,
    )
    try:
        if config_path is None:
            found = find_config_file(Path(root) if root else Path.cwd())
            config_path = str(found) if found else None
        if config_path is not None:
            return LoaderOptions.from_yaml(Path(config_path), **overrides)
        return LoaderOptions.from_mapping(None, **overrides)
    except ConfigurationError as e:
        raise click.ClickException(str(e))
