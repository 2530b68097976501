"""soyloader CLI"""

import click

from soyloader import __version__
from soyloader.cli.cache import cache
from soyloader.cli.compile import compile_template, list_deps

from .debug import add_debug_option


@click.group()
@click.version_option(__version__, prog_name="soyloader")
@click.pass_context
def cli(ctx):
    """
    Compile Soy templates with dependency resolution and output caching.
    """
    ctx.ensure_object(dict)


cli.add_command(add_debug_option(compile_template))
cli.add_command(add_debug_option(list_deps))
cli.add_command(add_debug_option(cache))

add_debug_option(cli)
