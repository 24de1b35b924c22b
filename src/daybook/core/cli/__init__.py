"""Daybook CLI — entry point for login, list, new, delete and logout."""

import click

from daybook import __version__

from .common import DEFAULT_CONFIG_PATH, load_config


@click.group()
@click.version_option(version=__version__, package_name="daybook")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=str(DEFAULT_CONFIG_PATH),
    show_default=True,
    help="YAML or JSON config file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool) -> None:
    """Daybook — a private journal, one dated entry at a time."""
    from daybook.core.utils.logging import setup_logging_from_config

    config = load_config(config_path)
    setup_logging_from_config(config, verbose=verbose)
    ctx.obj = config


# Register subcommands
from .entries_cmd import delete, list_entries, new
from .session_cmd import login, logout

main.add_command(login)
main.add_command(logout)
main.add_command(list_entries)
main.add_command(new)
main.add_command(delete)
