"""Repoint the application's data directory at a profile."""

import logging
import shutil
from enum import Enum
from pathlib import Path

from .errors import InvariantViolationError
from .errors import ProfileIOError
from .errors import ProfileStateError
from .links import LinkCreator
from .links import default_link_creator
from .links import is_link
from .links import item_exists
from .links import remove_item
from .links import remove_link
from .models import BLUEPRINT_FILE_NAME
from .models import Profile
from .models import ResourceKind
from .prompts import Choice
from .prompts import Chooser
from .record_store import RecordStore

logger = logging.getLogger(__name__)


class SwitchOutcome(str, Enum):
    SWITCHED = "switched"
    CANCELLED = "cancelled"


_REPLACE_CHOICES = (
    Choice("Delete it and continue", "The existing folder and everything in it will be deleted."),
    Choice("Cancel", "Stop without changing anything."),
)
_CANCEL_INDEX = 1


class ActiveProfileSwitcher:
    """
    Maintains the single active-profile link.

    The old link is removed before the new one is created, so there is a
    short window with no active link at all. The application only reads
    the link at startup, so that window is harmless; two targets at once
    never happen.
    """

    def __init__(
        self,
        store: RecordStore,
        active_link_path: Path,
        global_profile_path: Path,
        chooser: Chooser,
        link_creator: LinkCreator | None = None,
    ):
        self.store = store
        self.active_link_path = active_link_path
        self.global_profile_path = global_profile_path
        self.chooser = chooser
        self.link_creator = link_creator or default_link_creator()

    def switch(self, profile: Profile, receive_blueprints: bool = True) -> SwitchOutcome:
        """Make profile the active one.

        Args:
            profile: Profile to activate
            receive_blueprints: Copy the global blueprint file into a profile
                that shares blueprints. Disabled when only re-pointing the
                link after the active profile was renamed or moved.

        Returns:
            SWITCHED on success, CANCELLED if the operator declined to delete
            a real folder at the link location (nothing was changed)

        Raises:
            ProfileStateError: The profile folder does not exist
            InvariantViolationError: Blueprints are shared but the global file is missing
            ProfileIOError: Any filesystem step failed
        """
        if not profile.path.is_dir():
            raise ProfileStateError(f"The profile folder '{profile.path}' does not exist")

        if not self._clear_active_link():
            logger.info(f"Switch to {profile.name} cancelled")
            return SwitchOutcome.CANCELLED

        try:
            self.active_link_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ProfileIOError.from_os_error("create folder", self.active_link_path.parent, e) from e
        self.link_creator.create_link(self.active_link_path, profile.path, ResourceKind.DIRECTORY)
        logger.info(f"Active link {self.active_link_path} -> {profile.path}")

        self.store.set_active_profile_name(profile.name)

        if receive_blueprints and profile.settings.share_blueprints:
            self._receive_blueprints(profile)

        return SwitchOutcome.SWITCHED

    def _clear_active_link(self) -> bool:
        """Empty the active link location; False if the operator cancelled."""
        location = self.active_link_path
        if is_link(location):
            remove_link(location)
            return True

        if not item_exists(location):
            return True

        choice = self.chooser.present_choice(
            f"'{location}' is a real folder, not a profile link. Do you want to:",
            _REPLACE_CHOICES,
        )
        if choice == _CANCEL_INDEX:
            return False

        remove_item(location)
        return True

    def _receive_blueprints(self, profile: Profile) -> None:
        global_file = self.global_profile_path / BLUEPRINT_FILE_NAME
        if not global_file.is_file():
            raise InvariantViolationError(
                f"Profile '{profile.name}' shares blueprints but there is no global blueprint file at '{global_file}'"
            )

        local_file = profile.blueprint_file
        # The game rewrites this file in place, so the profile needs a real copy
        if is_link(local_file):
            remove_link(local_file)

        try:
            shutil.copyfile(global_file, local_file)
        except OSError as e:
            raise ProfileIOError.from_os_error("copy blueprints to", local_file, e) from e
        logger.info(f"Copied global blueprints into {local_file}")
