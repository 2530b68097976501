"""CLI commands for compiling templates and inspecting their dependencies"""

import os
import sys

import click

from soyloader.cli.utils.logging import logger
from soyloader.cli.utils.options import build_options, config_options
from soyloader.exceptions import ConfigurationError, SoyCompileError, SoyParseError
from soyloader.loader import SoyLoader, load_sync


@click.command("compile")
@click.argument("template", type=click.Path(exists=True, dir_okay=False))
@config_options
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write compiled output to this file instead of stdout.",
)
def compile_template(template, config_path, src, soy_deps, compiler, root, output):
    """Compile a template, reusing cached output when its content is unchanged.

    Example:

      soyloader compile src/foo.soy --compiler "soyc {src} --deps {deps}"
    """
    options = build_options(config_path, src, soy_deps, compiler, root)
    loader = SoyLoader(options)
    path = os.path.abspath(template)

    try:
        with open(path, "rb") as f:
            contents = f.read()
        result = load_sync(loader, contents, path)
    except (
        ConfigurationError,
        SoyParseError,
        SoyCompileError,
        OSError,
        UnicodeDecodeError,
    ) as e:
        logger.error(f"{e}")
        sys.exit(1)

    if output:
        with open(output, "w", encoding="utf-8", newline="") as f:
            f.write(result)
        logger.info(f"Wrote {output}")
    else:
        click.echo(result, nl=False)


@click.command("deps")
@click.argument("template", type=click.Path(exists=True, dir_okay=False))
@config_options
def list_deps(template, config_path, src, soy_deps, compiler, root):
    """List the dependency files a template is compiled with."""
    options = build_options(config_path, src, soy_deps, compiler, root)
    loader = SoyLoader(options)

    try:
        paths = loader.dependencies(os.path.abspath(template))
    except (SoyParseError, OSError, UnicodeDecodeError) as e:
        logger.error(f"{e}")
        sys.exit(1)

    for path in paths:
        click.echo(str(path))
