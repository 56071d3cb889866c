"""
Subcommands of the baromods CLI.

Every command works on the game home given with --game-home, or the one saved
in settings.json when the option is omitted.
"""

import sys
from dataclasses import dataclass
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

import click
import msgspec
from loguru import logger

from baromods.models.metadata.metadata_factory import read_mod_list
from baromods.models.metadata.metadata_mediator import ModManager
from baromods.models.metadata.metadata_structure import ModDescriptor
from baromods.models.settings import Settings
from baromods.utils.exception import BaroModsError, GameHomeNotSetError
from baromods.utils.generic import format_file_size, format_time_display
from baromods.utils.steam.webapi.wrapper import WorkshopClient

F = TypeVar("F", bound=Callable[..., Any])


@dataclass
class CliContext:
    settings: Settings
    game_home: Optional[Path] = None

    def resolve_game_home(self) -> Path:
        if self.game_home is not None:
            return self.game_home
        if self.settings.game_home:
            return Path(self.settings.game_home)
        raise GameHomeNotSetError(
            "No game home configured. Pass --game-home or run 'baromods set-game-home PATH'."
        )

    def manager(self) -> ModManager:
        client = WorkshopClient(
            endpoint=self.settings.workshop_endpoint,
            retry_config=self.settings.retry,
        )
        return ModManager(self.resolve_game_home(), client=client)


pass_cli_context = click.make_pass_decorator(CliContext)


def handle_errors(func: F) -> F:
    """Report pipeline errors in red on stderr and exit with status 1."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except BaroModsError as e:
            logger.error(f"{func.__name__} failed: {e}")
            click.secho(f"Error: {e}", fg="red", err=True)
            sys.exit(1)

    return wrapper  # type: ignore


def echo_mods_json(mods: list[ModDescriptor]) -> None:
    click.echo(msgspec.json.format(msgspec.json.encode(mods), indent=2).decode("utf-8"))


@click.command("list-mods")
@click.option("--json", "as_json", is_flag=True, help="Print the mods as JSON.")
@pass_cli_context
@handle_errors
def list_mods(ctx: CliContext, as_json: bool) -> None:
    """List the mods installed under LocalMods, sorted by workshop id."""
    manager = ctx.manager()
    mods = manager.list_mods()
    if as_json:
        echo_mods_json(mods)
        return
    if not mods:
        click.echo(f"No mods found in {manager.game_home.mod_dir}")
        return
    for mod in mods:
        click.echo(f"{mod.steam_workshop_id:>12}  {mod.name} ({mod.mod_version})")


@click.command("enrich")
@click.option(
    "--batch-size",
    type=click.IntRange(min=0),
    default=None,
    help="Workshop ids per request, 0 for a single request. Defaults to settings.json.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the mods as JSON.")
@pass_cli_context
@handle_errors
def enrich(ctx: CliContext, batch_size: Optional[int], as_json: bool) -> None:
    """Fetch Steam Workshop metadata for the installed mods."""
    if batch_size is None:
        batch_size = ctx.settings.batch_size
    mods = ctx.manager().enrich(batch_size)
    if as_json:
        echo_mods_json(mods)
        return
    for mod in mods:
        if mod.last_modified is None:
            click.echo(f"{mod.steam_workshop_id:>12}  {mod.name}  (no Workshop data)")
            continue
        click.echo(
            f"{mod.steam_workshop_id:>12}  {mod.name}  "
            f"{format_file_size(mod.size or 0)}  "
            f"{mod.subscribers} subscribers  "
            f"updated {format_time_display(mod.last_modified)}"
        )


@click.command("hash-mod")
@click.argument("name")
@pass_cli_context
@handle_errors
def hash_mod(ctx: CliContext, name: str) -> None:
    """Print the content hash of the installed mod NAME."""
    click.echo(ctx.manager().hash_mod(name))


@click.command("list-profiles")
@pass_cli_context
@handle_errors
def list_profiles(ctx: CliContext) -> None:
    """List the load order profiles saved under ModLists."""
    profiles = ctx.manager().list_profiles()
    if not profiles:
        click.echo("No saved mod lists")
        return
    for profile in profiles:
        click.echo(
            f"{profile.profile_name} ({profile.base_package}, {len(profile.mods)} mods)"
        )


@click.command("enabled-mods")
@pass_cli_context
@handle_errors
def enabled_mods(ctx: CliContext) -> None:
    """List the LocalMods packages enabled in config_player.xml, in load order."""
    manager = ctx.manager()
    names = {
        mod.home_path.name: mod.name for mod in manager.list_mods() if mod.home_path
    }
    for entry in manager.list_enabled_mods():
        name = names.get(str(entry.id), "<not installed>")
        click.echo(f"{entry.id:>12}  {name}")


@click.command("show-profile")
@click.argument(
    "path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@handle_errors
def show_profile(path: Path) -> None:
    """Print the load order stored in the mod list file PATH."""
    profile = read_mod_list(path)
    click.echo(f"Profile: {profile.profile_name}")
    click.echo(f"Base package: {profile.base_package}")
    for index, name in enumerate(profile.mods, start=1):
        click.echo(f"{index:>4}. {name}")


@click.command("set-game-home")
@click.argument(
    "path", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
@pass_cli_context
def set_game_home(ctx: CliContext, path: Path) -> None:
    """Save PATH as the default game home."""
    ctx.settings.game_home = str(path.resolve())
    ctx.settings.save()
    click.secho(f"Game home set to {ctx.settings.game_home}", fg="green")
