"""Option decorators, completion and conflict-resolution prompts shared by commands."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any
from typing import NamedTuple

import click

from ..console import console
from ..errors import ProfileError
from ..lifecycle import ProfileController
from ..lifecycle import expand_path
from ..links import item_exists
from ..links import remove_item
from ..models import SHARED_RESOURCES
from ..models import Profile
from ..paths import create_record_store
from ..paths import get_process_name
from ..prompts import Choice
from ..prompts import Chooser
from ..system import is_process_running

NAME_COLLISION_CHOICES = (
    Choice("Provide a new name", "Enter a different name for this profile."),
    Choice("Overwrite the existing profile", "The existing profile and its folder will be deleted."),
    Choice("Cancel", "Stop without changing anything."),
)

PATH_COLLISION_CHOICES = (
    Choice("Provide a new path", "Enter a different destination."),
    Choice("Overwrite the item at the path", "The existing folder/file will be deleted."),
    Choice("Cancel", "Stop without changing anything."),
)

MISSING_PATH_CHOICES = (
    Choice("Provide a new path", "Enter a different folder."),
    Choice("Use this path anyway", "The folder will be created with the first profile."),
    Choice("Cancel", "Stop without changing anything."),
)

GAME_RUNNING_CHOICES = (
    Choice("Continue anyway", "The game may overwrite the files being changed."),
    Choice("Cancel", "Stop without changing anything."),
)


def share_options(suffix: str = "", help_template: str = "Share {label} with the global profile"):
    """Add one tri-state --share-X/--no-share-X option per shareable resource.

    Omitted options arrive as None so callers can tell "keep" from "false".
    """

    def decorator(f):
        for resource in reversed(SHARED_RESOURCES):
            key = resource.label.lower()
            f = click.option(
                f"--share-{key}{suffix}/--no-share-{key}{suffix}",
                f"share_{key}",
                default=None,
                help=help_template.format(label=resource.label.lower()),
            )(f)
        return f

    return decorator


def share_overrides(share_flags: dict[str, Any]) -> dict[str, bool | None]:
    """Map share_* command parameters onto ShareSettings.with_overrides() arguments."""
    return {key.removeprefix("share_"): value for key, value in share_flags.items()}


def complete_profile_names(ctx: click.Context, param: click.Parameter, incomplete: str) -> list[str]:
    """Shell completion for profile name arguments."""
    try:
        names = create_record_store().get_names()
    except ProfileError:
        return []
    wanted = incomplete.casefold()
    return sorted((n for n in names if n.casefold().startswith(wanted)), key=str.casefold)


def print_cancelled() -> None:
    console.print("[yellow]Cancelled - nothing was changed[/yellow]")


class NameResolution(NamedTuple):
    """A usable name, and the clashing profile to destroy before using it."""

    name: str
    replaces: Profile | None = None

    def apply(self, controller: ProfileController) -> None:
        if self.replaces is not None:
            controller.destroy(self.replaces)


class PathResolution(NamedTuple):
    """A usable path, and whether the item occupying it must be deleted first."""

    path: Path
    replace: bool = False

    def apply(self) -> None:
        if self.replace and item_exists(self.path):
            remove_item(self.path)


def resolve_name_collision(
    controller: ProfileController,
    chooser: Chooser,
    name: str,
    current: str | None = None,
) -> NameResolution | None:
    """Loop until name is usable, asking the operator how to resolve each clash.

    Nothing is changed here; an overwrite choice is returned in the
    resolution and only happens when the caller applies it.

    Args:
        controller: Used to look up the clashing profile
        chooser: Prompt implementation
        name: Desired name
        current: Name of the profile being renamed; matching it is not a clash

    Returns:
        The resolution, or None if the operator cancelled
    """
    while True:
        existing = controller.store.get_profile(name)
        if existing is None:
            return NameResolution(name)
        if current is not None and existing.name.casefold() == current.casefold():
            return NameResolution(name)

        choice = chooser.present_choice(f"The name '{name}' is already taken. Do you want to:", NAME_COLLISION_CHOICES)
        if choice == 0:
            name = chooser.ask_text(f"Please enter a new name which is not '{name}'")
        elif choice == 1:
            return NameResolution(name, replaces=existing)
        else:
            return None


def resolve_path_collision(
    chooser: Chooser,
    path: str,
    check: Callable[[str], Path] = expand_path,
) -> PathResolution | None:
    """Loop until path is usable, asking the operator how to resolve each clash.

    Every candidate goes through check before the operator is offered to
    overwrite it, so a reserved location is rejected instead of deleted.
    Nothing is changed here; see PathResolution.apply.

    Args:
        chooser: Prompt implementation
        path: Desired path as typed
        check: Expands a candidate and raises if it may not be used at all

    Returns:
        The resolution, or None if the operator cancelled
    """
    while True:
        target = check(path)
        if not item_exists(target):
            return PathResolution(target)

        choice = chooser.present_choice(f"The path '{target}' already exists. Do you want to:", PATH_COLLISION_CHOICES)
        if choice == 0:
            path = chooser.ask_text(f"Please enter a new path which is not '{target}'")
        elif choice == 1:
            return PathResolution(target, replace=True)
        else:
            return None


def resolve_missing_directory(chooser: Chooser, path: str) -> str | None:
    """Confirm a directory path that does not exist yet.

    Returns:
        The path as typed (placeholders unexpanded), or None if the operator cancelled
    """
    while not expand_path(path).is_dir():
        choice = chooser.present_choice(f"The path '{path}' cannot be found. Do you want to:", MISSING_PATH_CHOICES)
        if choice == 0:
            path = chooser.ask_text(f"Please enter a new path which is not '{path}'")
        elif choice == 1:
            break
        else:
            return None
    return path


def confirm_game_not_running(chooser: Chooser) -> bool:
    """Ask for confirmation if the game is running; True means go ahead."""
    process_name = get_process_name()
    if not is_process_running(process_name):
        return True
    choice = chooser.present_choice(f"'{process_name}' appears to be running. Do you want to:", GAME_RUNNING_CHOICES)
    return choice == 0
