import click

from .utils.logging import configure_logging


def _set_debug(ctx, param, value: bool):
    """Record the debug flag on the root context and configure logging."""
    root_ctx = ctx.find_root()
    root_ctx.ensure_object(dict)

    # A subcommand may switch debug on, never off again
    debug = bool(value) or root_ctx.obj.get("DEBUG", False)
    root_ctx.obj["DEBUG"] = debug
    configure_logging(debug)
    return debug


def add_debug_option(cmd: click.Command) -> click.Command:
    """Add a ``--debug/--no-debug`` option to a command or group."""
    if not any(param.name == "debug" for param in cmd.params):
        cmd.params.insert(
            0,
            click.Option(
                ["--debug/--no-debug"],
                is_eager=True,
                expose_value=False,
                callback=_set_debug,
                help="Enable debug mode",
            ),
        )
    return cmd
