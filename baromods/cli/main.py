"""
Main CLI entry point for BaroMods.

This module defines the Click command group and registers all subcommands.
"""

from pathlib import Path
from typing import Optional

import click

from baromods.cli.commands import (
    CliContext,
    enabled_mods,
    enrich,
    hash_mod,
    list_mods,
    list_profiles,
    set_game_home,
    show_profile,
)
from baromods.models.settings import Settings
from baromods.utils.app_info import AppInfo
from baromods.utils.log_setup import setup_logging


@click.group()
@click.version_option(version=AppInfo().app_version, prog_name="BaroMods")
@click.option(
    "--game-home",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="BAROMODS_GAME_HOME",
    help="Barotrauma game home, holding LocalMods and ModLists. Defaults to settings.json.",
)
@click.option("--debug", is_flag=True, help="Write debug messages to the log file.")
@click.pass_context
def cli(ctx: click.Context, game_home: Optional[Path], debug: bool) -> None:
    """BaroMods - Barotrauma mod metadata tools

    Headless tools to list installed mods, fetch their Steam Workshop
    metadata, hash mod folders and inspect saved mod lists.
    """
    setup_logging(debug=debug)
    settings = Settings()
    settings.load()
    ctx.obj = CliContext(settings=settings, game_home=game_home)


# Register subcommands
cli.add_command(list_mods)
cli.add_command(enrich)
cli.add_command(hash_mod)
cli.add_command(list_profiles)
cli.add_command(enabled_mods)
cli.add_command(show_profile)
cli.add_command(set_game_home)


if __name__ == "__main__":
    cli()
