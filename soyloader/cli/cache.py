"""CLI commands for compiled output cache management"""

import click

from soyloader.cache import ContentCache
from soyloader.cli.utils.logging import logger
from soyloader.cli.utils.options import build_options, config_options


def _content_cache(config_path, src, soy_deps, compiler, root) -> ContentCache:
    options = build_options(config_path, src, soy_deps, compiler, root)
    return ContentCache(options.cache_dir, options.source_root, options.compiled_suffix)


@click.group(name="cache")
def cache():
    """Manage the compiled output cache."""
    pass


@cache.command("path")
@config_options
def cache_path(config_path, src, soy_deps, compiler, root):
    """Print the cache directory."""
    click.echo(str(_content_cache(config_path, src, soy_deps, compiler, root).cache_dir))


@cache.command("clear")
@config_options
def cache_clear(config_path, src, soy_deps, compiler, root):
    """Remove all cached compiled output."""
    content_cache = _content_cache(config_path, src, soy_deps, compiler, root)
    if not content_cache.clear():
        logger.info(f"Nothing to clear at {content_cache.cache_dir}")
