"""Push a profile's blueprint storage back to the global profile.

The game treats blueprint-storage.dat as a single file it rewrites in
place, so it cannot stay a live link while the game runs. Switching copies
the global file into the profile; after playing, sync copies it back.
"""

import logging
import os
import shutil
from pathlib import Path

from .errors import InvariantViolationError
from .errors import ProfileIOError
from .links import is_link
from .links import item_exists
from .models import BLUEPRINT_FILE_NAME
from .models import Profile

logger = logging.getLogger(__name__)


class BlueprintSync:
    def __init__(self, global_profile_path: Path):
        self.global_profile_path = global_profile_path

    @property
    def global_file(self) -> Path:
        return self.global_profile_path / BLUEPRINT_FILE_NAME

    def sync(self, profile: Profile) -> bool:
        """Copy the profile's blueprint file over the global one.

        Does nothing (not even a filesystem check) when the profile does not
        share blueprints.

        Returns:
            True if the global file was replaced, False if there was nothing to do

        Raises:
            InvariantViolationError: Blueprints are shared but the profile has no blueprint file
            ProfileIOError: The global file could not be replaced
        """
        if not profile.settings.share_blueprints:
            logger.debug(f"Profile {profile.name} does not share blueprints, nothing to sync")
            return False

        local_file = profile.blueprint_file
        if not local_file.is_file():
            raise InvariantViolationError(
                f"Profile '{profile.name}' shares blueprints but has no blueprint file at '{local_file}'"
            )

        global_file = self.global_file
        if is_link(local_file) and item_exists(global_file) and os.path.samefile(local_file, global_file):
            logger.debug(f"{local_file} already links to {global_file}")
            return False

        try:
            if item_exists(global_file):
                global_file.unlink()
            global_file.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(local_file, global_file)
        except OSError as e:
            raise ProfileIOError.from_os_error("copy blueprints to", global_file, e) from e

        logger.info(f"Synced blueprints from {profile.name} to {global_file}")
        return True
