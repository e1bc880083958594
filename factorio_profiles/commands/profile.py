"""Profile management commands: new, list, set, remove and open."""

from __future__ import annotations

import click
from rich.table import Table

from ..console import console
from ..errors import ProfileError
from ..errors import ProfileStateError
from ..paths import create_controller
from ..paths import create_record_store
from ..paths import create_switcher
from ..paths import ensure_global_profile
from ..prompts import ConsoleChooser
from ..switcher import SwitchOutcome
from ..system import open_in_file_browser
from ..utils.error_format import escape_markup
from ..utils.error_format import exit_with_error
from .common import complete_profile_names
from .common import print_cancelled
from .common import resolve_name_collision
from .common import resolve_path_collision
from .common import share_options
from .common import share_overrides


@click.command(name="new")
@click.argument("name")
@click.option("--path", "path", default=None, help="Folder for the profile (default: <default path>/<name>)")
@share_options()
def profile_new(name: str, path: str | None, **share_flags: bool | None):
    """Create a new profile.

    Sharing options left out fall back to the module defaults
    (see `config show`).
    """
    chooser = ConsoleChooser()
    try:
        controller = create_controller()
        resolution = resolve_name_collision(controller, chooser, name)
        if resolution is None:
            print_cancelled()
            return

        settings = controller.store.get_default_sharing_settings().with_overrides(**share_overrides(share_flags))
        resolution.apply(controller)
        if settings.shared_labels():
            ensure_global_profile()
        profile = controller.create(resolution.name, path, settings)
    except ProfileError as exc:
        exit_with_error(exc)

    console.print(f"[green]✓ Created profile '{escape_markup(profile.name)}'[/green]")
    console.print(f"  Folder: {escape_markup(profile.path)}")


@click.command(name="list")
@click.argument("names", nargs=-1, shell_complete=complete_profile_names)
def profile_list(names: tuple[str, ...]):
    """List profiles, or only the named ones."""
    try:
        store = create_record_store()
        if names:
            profiles = []
            for name in names:
                found = store.get_profile(name)
                if found is None:
                    console.print(f"[yellow]Warning:[/yellow] There is no profile named '{escape_markup(name)}'")
                    continue
                profiles.append(found)
        else:
            profiles = store.get_profiles()
        active = store.get_active_profile_name()
    except ProfileError as exc:
        exit_with_error(exc)

    if not profiles:
        console.print("[yellow]No profiles found.[/yellow]")
        return

    table = Table(title="Factorio Profiles", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="green")
    table.add_column("Path", style="yellow")
    table.add_column("Shared")
    table.add_column("Status")

    for profile in sorted(profiles, key=lambda p: p.name.casefold()):
        shared = ", ".join(profile.settings.shared_labels()) or "[dim]nothing[/dim]"
        status = ""
        if active is not None and profile.name.casefold() == active.casefold():
            status = "[bold green]active[/bold green]"
        table.add_row(escape_markup(profile.name), escape_markup(profile.path), shared, status)

    console.print(table)


@click.command(name="set")
@click.argument("name", shell_complete=complete_profile_names)
@click.option("--new-name", default=None, help="Rename the profile (its folder is renamed too)")
@click.option("--new-path", default=None, help="Move the profile folder to this path")
@share_options()
def profile_set(name: str, new_name: str | None, new_path: str | None, **share_flags: bool | None):
    """Change an existing profile's name, location or sharing settings.

    Turning sharing on deletes the profile's own copy of that resource.
    Turning it off removes the link; the game creates fresh content on next launch.
    """
    chooser = ConsoleChooser()
    try:
        store = create_record_store()
        controller = create_controller(store)
        profile = controller.get(name)
        active = store.get_active_profile_name()
        was_active = active is not None and active.casefold() == profile.name.casefold()

        # Every question is answered before anything changes on disk
        name_resolution = None
        if new_name and new_name.strip():
            name_resolution = resolve_name_collision(controller, chooser, new_name, current=profile.name)
            if name_resolution is None:
                print_cancelled()
                return

        path_resolution = None
        if new_path and new_path.strip():
            path_resolution = resolve_path_collision(chooser, new_path, controller.check_profile_location)
            if path_resolution is None:
                print_cancelled()
                return

        original_path = profile.path
        try:
            if name_resolution is not None:
                name_resolution.apply(controller)
                controller.rename(profile, name_resolution.name)

            if path_resolution is not None:
                path_resolution.apply()
                controller.move(profile, path_resolution.path)

            new_settings = profile.settings.with_overrides(**share_overrides(share_flags))
            if new_settings != profile.settings:
                if new_settings.shared_labels():
                    ensure_global_profile()
                changes = controller.update_sharing_settings(profile, new_settings)
                for change in changes:
                    verb = "Linked" if change.action == "linked" else "Unlinked"
                    console.print(f"  {verb} {escape_markup(change.path.name)}")
        finally:
            # The active link still points at the old folder, even if a later step failed
            if was_active and profile.path != original_path:
                outcome = create_switcher(chooser, store).switch(profile, receive_blueprints=False)
                if outcome is SwitchOutcome.CANCELLED:
                    console.print("[yellow]The active link was not updated; switch to the profile again.[/yellow]")
    except ProfileError as exc:
        exit_with_error(exc)

    console.print(f"[green]✓ Modified profile '{escape_markup(profile.name)}'[/green]")


@click.command(name="remove")
@click.argument("name", shell_complete=complete_profile_names)
def profile_remove(name: str):
    """Delete a profile and its folder. This cannot be undone."""
    try:
        controller = create_controller()
        profile = controller.get(name)
        if not profile.path.is_dir():
            console.print(
                f"[yellow]Warning:[/yellow] The profile folder at '{escape_markup(profile.path)}' could not be located."
            )
        controller.destroy(profile)
    except ProfileError as exc:
        exit_with_error(exc)

    console.print(f"[green]✓ Removed profile '{escape_markup(profile.name)}'[/green]")


@click.command(name="open")
@click.argument("name", required=False, shell_complete=complete_profile_names)
@click.option("--global", "global_profile", is_flag=True, help="Open the global profile folder instead")
def profile_open(name: str | None, global_profile: bool):
    """Open a profile folder in the file browser."""
    if bool(name) == global_profile:
        raise click.UsageError("Specify either a profile NAME or --global")

    try:
        if global_profile:
            path = ensure_global_profile()
        else:
            path = create_controller().get(name).path
            if not path.is_dir():
                raise ProfileStateError(f"The profile folder '{path}' does not exist")
    except ProfileError as exc:
        exit_with_error(exc)

    open_in_file_browser(path)
    console.print(f"Opened {escape_markup(path)}")


__all__ = ["profile_list", "profile_new", "profile_open", "profile_remove", "profile_set"]
