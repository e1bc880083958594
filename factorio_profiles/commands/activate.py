"""Commands that touch the game's active data folder: switch and sync."""

from __future__ import annotations

import click

from ..console import console
from ..errors import ProfileError
from ..errors import ProfileStateError
from ..paths import create_blueprint_sync
from ..paths import create_controller
from ..paths import create_record_store
from ..paths import create_switcher
from ..paths import ensure_global_profile
from ..paths import get_active_link_path
from ..prompts import ConsoleChooser
from ..switcher import SwitchOutcome
from ..utils.error_format import escape_markup
from ..utils.error_format import exit_with_error
from .common import complete_profile_names
from .common import confirm_game_not_running
from .common import print_cancelled


@click.command(name="switch")
@click.argument("name", shell_complete=complete_profile_names)
def switch(name: str):
    """Make NAME the profile the game launches with.

    Run `sync` after playing if the profile shares blueprints.
    """
    chooser = ConsoleChooser()
    try:
        store = create_record_store()
        profile = create_controller(store).get(name)
        if not confirm_game_not_running(chooser):
            print_cancelled()
            return
        ensure_global_profile()
        outcome = create_switcher(chooser, store).switch(profile)
    except ProfileError as exc:
        exit_with_error(exc)

    if outcome is SwitchOutcome.CANCELLED:
        print_cancelled()
        return

    console.print(f"[green]✓ Switched to profile '{escape_markup(profile.name)}'[/green]")
    console.print(f"  {escape_markup(get_active_link_path())} → {escape_markup(profile.path)}")


@click.command(name="sync")
@click.argument("name", required=False, shell_complete=complete_profile_names)
def sync(name: str | None):
    """Copy blueprints from a profile back to the global profile.

    Defaults to the active profile. The game cannot keep the blueprint file
    linked, so run this after you quit the game.
    """
    chooser = ConsoleChooser()
    try:
        store = create_record_store()
        if name is None:
            name = store.get_active_profile_name()
            if name is None:
                raise ProfileStateError("No profile is active; switch to a profile first")
            profile = store.get_profile(name)
            if profile is None:
                raise ProfileStateError(f"The currently active profile on record is '{name}' but it does not exist")
        else:
            profile = create_controller(store).get(name)

        if not confirm_game_not_running(chooser):
            print_cancelled()
            return
        synced = create_blueprint_sync().sync(profile)
    except ProfileError as exc:
        exit_with_error(exc)

    if synced:
        console.print(f"[green]✓ Synced blueprints from '{escape_markup(profile.name)}'[/green]")
    elif profile.settings.share_blueprints:
        console.print("[dim]Blueprints are already in sync.[/dim]")
    else:
        console.print(f"[dim]Profile '{escape_markup(profile.name)}' does not share blueprints; nothing to sync.[/dim]")


__all__ = ["switch", "sync"]
