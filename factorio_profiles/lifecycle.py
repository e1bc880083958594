"""Profile lifecycle: create, rename, move, update sharing settings and destroy.

Every mutation changes disk state first and the record store second, so a
failed filesystem step never leaves a record pointing at a moved or missing
directory.
"""

import logging
import os
import re
import shutil
from pathlib import Path

from .errors import NameInUseError
from .errors import ProfileIOError
from .errors import ProfileNotFoundError
from .errors import ProfileValidationError
from .errors import TargetExistsError
from .links import LinkChange
from .links import LinkCreator
from .links import item_exists
from .models import Profile
from .models import ShareSettings
from .reconciler import apply_settings_diff
from .record_store import RecordStore

logger = logging.getLogger(__name__)

# Characters that cannot appear in a folder name on at least one supported platform
_ILLEGAL_FOLDER_CHARS = re.compile(r'[\\/<>:?|*"]')
_PERCENT_PLACEHOLDER = re.compile(r"%([^%]+)%")


def sanitize_folder_name(name: str) -> str:
    """Strip characters that are not allowed in a folder name."""
    return _ILLEGAL_FOLDER_CHARS.sub("", name)


def expand_path(path: str | Path) -> Path:
    """Expand ``~``, ``$VAR``/``${VAR}`` and ``%VAR%`` placeholders into an absolute path.

    Unknown variables are left as written.
    """
    text = _PERCENT_PLACEHOLDER.sub(lambda m: os.environ.get(m.group(1), m.group(0)), str(path))
    return Path(os.path.expanduser(os.path.expandvars(text))).absolute()


def _require_name(name: str | None) -> str:
    if name is None or not name.strip():
        raise ProfileValidationError("The name cannot be blank or empty")
    return name


def _is_same_location(a: Path, b: Path) -> bool:
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


def _overlaps(a: Path, b: Path) -> bool:
    """True if a and b are the same folder or one contains the other."""
    a, b = a.resolve(), b.resolve()
    return a.is_relative_to(b) or b.is_relative_to(a)


class ProfileController:
    """Orchestrates profile directories, their shared links and their records."""

    def __init__(self, store: RecordStore, global_profile_path: Path, link_creator: LinkCreator | None = None):
        self.store = store
        self.global_profile_path = global_profile_path
        self.link_creator = link_creator

    def get(self, name: str) -> Profile:
        """Look up a profile by name (case-insensitive).

        Raises:
            ProfileNotFoundError: If no record matches
        """
        profile = self.store.get_profile(name)
        if profile is None:
            raise ProfileNotFoundError(name)
        return profile

    def resolve_profile_path(self, name: str, path: str | Path | None = None) -> Path:
        """Work out where a new profile's directory goes.

        An explicit path is used as the profile folder itself. Otherwise the
        sanitized name becomes a child of the module default path.
        """
        if path is not None and str(path).strip():
            return expand_path(path)

        leaf = sanitize_folder_name(name)
        if not leaf.strip():
            raise ProfileValidationError(f"The name '{name}' cannot be used as a folder name")
        return expand_path(self.store.get_default_path()) / leaf

    def check_profile_location(self, path: str | Path) -> Path:
        """Expand path and make sure a profile folder may be placed there.

        The location may not be, contain or sit inside the global profile
        folder or any existing profile folder, including the profile being
        moved. Callers run this before deleting anything at the location.

        Returns:
            The expanded path

        Raises:
            ProfileValidationError: The location overlaps a reserved folder
        """
        target = expand_path(path)
        if _overlaps(target, expand_path(self.global_profile_path)):
            raise ProfileValidationError(f"The path '{target}' is reserved for the global profile")
        for other in self.store.get_profiles():
            if _overlaps(target, other.path):
                raise ProfileValidationError(f"The path '{target}' overlaps the folder of profile '{other.name}'")
        return target

    def _check_name_free(self, name: str, current: str | None = None) -> None:
        existing = self.store.get_profile(name)
        if existing is None:
            return
        if current is not None and existing.name.casefold() == current.casefold():
            return
        raise NameInUseError(name)

    def create(
        self,
        name: str,
        path: str | Path | None = None,
        settings: ShareSettings | None = None,
    ) -> Profile:
        """Create a profile directory, its shared links and its record.

        Args:
            name: Unique profile name
            path: Explicit profile folder; defaults to <default path>/<sanitized name>
            settings: Sharing settings; defaults to the module default settings

        Returns:
            The created profile

        Raises:
            ProfileValidationError: Blank name or reserved path
            NameInUseError: The name is taken (callers resolve this beforehand)
            TargetExistsError: The profile folder already exists
            ProfileIOError: The folder or a link could not be created
        """
        _require_name(name)
        profile_path = self.check_profile_location(self.resolve_profile_path(name, path))
        self._check_name_free(name)
        if profile_path.is_dir():
            raise TargetExistsError(profile_path)

        settings = (settings if settings is not None else self.store.get_default_sharing_settings()).model_copy()

        try:
            profile_path.mkdir(parents=True)
        except OSError as e:
            raise ProfileIOError.from_os_error("create profile folder", profile_path, e) from e
        logger.info(f"Created profile folder {profile_path}")

        apply_settings_diff(profile_path, self.global_profile_path, ShareSettings(), settings, self.link_creator)

        profile = Profile(name=name, path=profile_path, settings=settings)
        self.store.add_profile(profile)
        logger.info(f"Created profile: {name}")
        return profile

    def rename(self, profile: Profile, new_name: str) -> Profile:
        """Rename a profile and its folder.

        The folder becomes a sibling named after the sanitized new name. The
        record is only updated after the folder move succeeded.

        Raises:
            ProfileValidationError: Blank or unusable name
            NameInUseError: Another profile already has the name
            TargetExistsError: The sibling folder already exists
            ProfileIOError: The folder could not be moved
        """
        _require_name(new_name)
        leaf = sanitize_folder_name(new_name)
        if not leaf.strip():
            raise ProfileValidationError(f"The name '{new_name}' cannot be used as a folder name")
        self._check_name_free(new_name, current=profile.name)

        old_name = profile.name
        old_path = profile.path
        new_path = old_path.parent / leaf

        if new_path != old_path:
            if item_exists(new_path) and not _is_same_location(new_path, old_path):
                raise TargetExistsError(new_path)
            try:
                old_path.rename(new_path)
            except OSError as e:
                raise ProfileIOError.from_os_error("move profile folder", old_path, e) from e
            logger.info(f"Moved profile folder {old_path} -> {new_path}")

        self.store.update_profile_name(old_name, new_name)
        if new_path != old_path:
            self.store.update_profile_path(new_name, new_path)

        active = self.store.get_active_profile_name()
        if active is not None and active.casefold() == old_name.casefold():
            self.store.set_active_profile_name(new_name)

        profile.name = new_name
        profile.path = new_path
        logger.info(f"Renamed profile: {old_name} -> {new_name}")
        return profile

    def move(self, profile: Profile, new_path: str | Path) -> Profile:
        """Move a profile folder to a new location, then record the new path.

        Raises:
            ProfileValidationError: The target overlaps the global profile or a profile folder
            TargetExistsError: Something already exists at the target
            ProfileIOError: The folder could not be moved
        """
        target = self.check_profile_location(new_path)
        if item_exists(target):
            raise TargetExistsError(target)

        old_path = profile.path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            # Links inside the profile are moved as links, never followed
            shutil.move(str(old_path), str(target))
        except OSError as e:
            raise ProfileIOError.from_os_error("move profile folder", old_path, e) from e
        logger.info(f"Moved profile folder {old_path} -> {target}")

        self.store.update_profile_path(profile.name, target)
        profile.path = target
        return profile

    def update_sharing_settings(self, profile: Profile, new_settings: ShareSettings) -> list[LinkChange]:
        """Apply new sharing settings to a profile's links, then persist them.

        Returns:
            The link changes that were applied
        """
        new_settings = new_settings.model_copy()
        changes = apply_settings_diff(
            profile.path,
            self.global_profile_path,
            profile.settings,
            new_settings,
            self.link_creator,
        )
        self.store.update_profile_sharing_settings(profile.name, new_settings)
        profile.settings = new_settings
        return changes

    def destroy(self, profile: Profile) -> None:
        """Delete a profile folder recursively, then its record.

        Shared links inside the folder are removed as links; the global
        profile is never touched. If the profile was active, the active
        pointer is cleared.

        Raises:
            ProfileIOError: The folder could not be deleted
        """
        if item_exists(profile.path):
            try:
                shutil.rmtree(profile.path)
            except OSError as e:
                raise ProfileIOError.from_os_error("delete profile folder", profile.path, e) from e
            logger.info(f"Deleted profile folder {profile.path}")
        else:
            logger.warning(f"Profile folder {profile.path} is already missing")

        self.store.remove_profile(profile.name)

        active = self.store.get_active_profile_name()
        if active is not None and active.casefold() == profile.name.casefold():
            self.store.set_active_profile_name(None)
        logger.info(f"Destroyed profile: {profile.name}")
