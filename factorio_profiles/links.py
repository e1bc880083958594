"""Creation and removal of links between a profile and the global profile.

A profile's shareable entries (see models.SHARED_RESOURCES) are either real
items owned by the profile or links pointing at the same entry under the
global profile. This module moves a single entry between those two states.
"""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Literal
from typing import NamedTuple
from typing import Protocol

from .errors import ProfileIOError
from .models import ResourceKind

logger = logging.getLogger(__name__)

# ERROR_PRIVILEGE_NOT_HELD: symlinks need Developer Mode or elevation on Windows
_WINERROR_PRIVILEGE_NOT_HELD = 1314


class LinkChange(NamedTuple):
    """One applied link mutation."""

    action: Literal["linked", "unlinked"]
    path: Path
    target: Path | None = None


class LinkCreator(Protocol):
    """Creates a kind-typed link at link_path pointing to target_path."""

    def create_link(self, link_path: Path, target_path: Path, kind: ResourceKind) -> None: ...


class SymlinkCreator:
    """Native symbolic links."""

    def create_link(self, link_path: Path, target_path: Path, kind: ResourceKind) -> None:
        try:
            os.symlink(target_path, link_path, target_is_directory=kind is ResourceKind.DIRECTORY)
        except OSError as e:
            raise ProfileIOError.from_os_error("create link", link_path, e) from e
        logger.debug(f"Created {kind.value} symlink {link_path} -> {target_path}")


class WindowsLinkCreator(SymlinkCreator):
    """Symbolic links, falling back to NTFS junctions for directories.

    Junctions need no privilege, so directory sharing keeps working for
    users without Developer Mode. File links have no such fallback.
    """

    def create_link(self, link_path: Path, target_path: Path, kind: ResourceKind) -> None:
        try:
            super().create_link(link_path, target_path, kind)
            return
        except ProfileIOError as e:
            cause = e.__cause__
            if kind is not ResourceKind.DIRECTORY or getattr(cause, "winerror", None) != _WINERROR_PRIVILEGE_NOT_HELD:
                raise

        logger.info(f"Symlink privilege not held, creating junction at {link_path}")
        result = subprocess.run(
            ["cmd", "/c", "mklink", "/J", str(link_path), str(target_path)],
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            raise ProfileIOError("create junction", link_path, (result.stderr or result.stdout).strip())


def default_link_creator() -> LinkCreator:
    """Pick the link implementation for the running platform."""
    if os.name == "nt":
        return WindowsLinkCreator()
    return SymlinkCreator()


def is_link(path: Path) -> bool:
    """True for symlinks and junctions, whether or not their target exists."""
    if os.path.islink(path):
        return True
    isjunction = getattr(os.path, "isjunction", None)
    return bool(isjunction and isjunction(path))


def item_exists(path: Path) -> bool:
    """True if anything occupies path, including a dangling link."""
    return os.path.lexists(path)


def remove_link(path: Path) -> None:
    """Delete only the link entry at path; its target is never touched."""
    try:
        # On Windows os.unlink also removes directory symlinks and junctions
        os.unlink(path)
    except OSError as e:
        raise ProfileIOError.from_os_error("remove link", path, e) from e
    logger.info(f"Removed link {path}")


def remove_item(path: Path) -> None:
    """Delete a real file or a whole directory tree at path."""
    try:
        if path.is_dir() and not is_link(path):
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as e:
        raise ProfileIOError.from_os_error("delete", path, e) from e
    logger.info(f"Deleted {path}")


def ensure_link_state(
    profile_path: Path,
    resource_name: str,
    kind: ResourceKind,
    should_be_linked: bool,
    global_profile_path: Path,
    link_creator: LinkCreator | None = None,
) -> LinkChange | None:
    """Bring profile_path/resource_name into the requested linked state.

    When a link is requested and a real item is in the way, the item is
    deleted first. This is destructive and irreversible. When a link is no
    longer requested, only the link is removed; the external application
    recreates real content on its next use.

    Args:
        profile_path: Profile directory containing the entry
        resource_name: Fixed entry name (e.g. "mods")
        kind: Link kind; must match the resource
        should_be_linked: Desired state
        global_profile_path: Directory holding the shared originals
        link_creator: Link implementation (platform default if None)

    Returns:
        The applied change, or None if the entry was already in the requested state

    Raises:
        ProfileIOError: If a delete or link operation fails
    """
    link_path = profile_path / resource_name
    currently_linked = is_link(link_path)

    if should_be_linked and not currently_linked:
        if item_exists(link_path):
            logger.warning(f"Replacing existing {resource_name} in {profile_path} with a shared link")
            remove_item(link_path)
        target_path = global_profile_path / resource_name
        creator = link_creator or default_link_creator()
        creator.create_link(link_path, target_path, kind)
        logger.info(f"Linked {link_path} -> {target_path}")
        return LinkChange("linked", link_path, target_path)

    if not should_be_linked and currently_linked:
        remove_link(link_path)
        return LinkChange("unlinked", link_path)

    return None
