"""Factorio Profiles CLI - manage isolated Factorio profiles."""

import logging

import click

from .commands.activate import switch
from .commands.activate import sync
from .commands.config import config
from .commands.profile import profile_list
from .commands.profile import profile_new
from .commands.profile import profile_open
from .commands.profile import profile_remove
from .commands.profile import profile_set
from .logging_setup import init_json_logging
from .paths import get_log_path

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(package_name="factorio-profiles")
@click.option("--verbose", "-v", is_flag=True, help="Write debug details to the log file")
def cli(verbose: bool):
    """Factorio Profiles - isolated game profiles that share what you choose.

    Each profile is a folder that can link its config, mods, saves, scenarios
    and blueprints to a global profile. `switch` points the game's data
    folder at a profile.
    """
    init_json_logging(get_log_path(), "DEBUG" if verbose else None)
    logger.debug("CLI started")


cli.add_command(profile_new)
cli.add_command(profile_list)
cli.add_command(profile_set)
cli.add_command(profile_remove)
cli.add_command(profile_open)
cli.add_command(switch)
cli.add_command(sync)
cli.add_command(config)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
