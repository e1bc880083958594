"""Module-wide settings: default location and sharing for new profiles."""

from __future__ import annotations

import click

from ..console import console
from ..errors import ProfileError
from ..paths import create_record_store
from ..paths import get_active_link_path
from ..paths import get_global_profile_path
from ..prompts import ConsoleChooser
from ..utils.error_format import escape_markup
from ..utils.error_format import exit_with_error
from .common import print_cancelled
from .common import resolve_missing_directory
from .common import share_options
from .common import share_overrides


@click.group(invoke_without_command=True)
@click.pass_context
def config(ctx: click.Context):
    """Show or change the module-wide settings."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(config_show)


@config.command(name="show")
def config_show():
    """Show defaults for new profiles and the active profile."""
    try:
        store = create_record_store()
        default_path = store.get_default_path()
        default_sharing = store.get_default_sharing_settings()
        active = store.get_active_profile_name()
    except ProfileError as exc:
        exit_with_error(exc)

    shared = ", ".join(default_sharing.shared_labels()) or "N/A"
    console.print(f"[bold]Path for new profiles:[/bold] {escape_markup(default_path)}")
    console.print(f"[bold]Sharing settings for new profiles:[/bold] {shared}")
    console.print(f"[bold]Currently active profile:[/bold] {escape_markup(active) if active else '[dim]none[/dim]'}")
    console.print(f"[bold]Global profile:[/bold] {escape_markup(get_global_profile_path())}")
    console.print(f"[bold]Game data folder:[/bold] {escape_markup(get_active_link_path())}")


@config.command(name="set")
@click.option("--default-path", default=None, help="Folder in which new profiles are created by default")
@share_options(suffix="-by-default", help_template="Share {label} in new profiles by default")
def config_set(default_path: str | None, **share_flags: bool | None):
    """Change the defaults used by `new`.

    Existing profiles are not affected.
    """
    chooser = ConsoleChooser()
    try:
        store = create_record_store()

        if default_path and default_path.strip():
            resolved = resolve_missing_directory(chooser, default_path)
            if resolved is None:
                print_cancelled()
                return
            store.update_default_path(resolved)

        current = store.get_default_sharing_settings()
        updated = current.with_overrides(**share_overrides(share_flags))
        if updated != current:
            store.update_default_sharing_settings(updated)
    except ProfileError as exc:
        exit_with_error(exc)

    console.print("[green]✓ Modified the module settings[/green]")


__all__ = ["config"]
