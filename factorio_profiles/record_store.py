"""Persistence of profile records and module-wide defaults.

The whole document is read, mutated in memory and written back on every
change. There is no locking: concurrent invocations against the same
document are unsupported and the last writer wins.
"""

import contextlib
import logging
import tempfile
from abc import ABC
from abc import abstractmethod
from pathlib import Path
from typing import Protocol
from typing import runtime_checkable

import yaml
from pydantic import ValidationError

from .errors import NameInUseError
from .errors import ProfileNotFoundError
from .errors import RecordStoreError
from .models import ModuleDefaults
from .models import Profile
from .models import ProfileDatabase
from .models import ShareSettings

logger = logging.getLogger(__name__)


@runtime_checkable
class RecordStore(Protocol):
    """CRUD over profile records, module defaults and the active-profile pointer.

    Lookups by name are case-insensitive. Returned objects are copies;
    mutating them has no effect until passed back through an update call.
    """

    def get_names(self) -> list[str]: ...

    def get_profiles(self) -> list[Profile]: ...

    def get_profile(self, name: str) -> Profile | None: ...

    def add_profile(self, profile: Profile) -> None: ...

    def remove_profile(self, name: str) -> None: ...

    def update_profile_name(self, old_name: str, new_name: str) -> None: ...

    def update_profile_path(self, name: str, path: Path) -> None: ...

    def update_profile_sharing_settings(self, name: str, settings: ShareSettings) -> None: ...

    def get_default_path(self) -> str: ...

    def update_default_path(self, path: str) -> None: ...

    def get_default_sharing_settings(self) -> ShareSettings: ...

    def update_default_sharing_settings(self, settings: ShareSettings) -> None: ...

    def get_active_profile_name(self) -> str | None: ...

    def set_active_profile_name(self, name: str | None) -> None: ...


class _DocumentRecordStore(ABC):
    """RecordStore operations expressed over a whole-document load/save pair."""

    def __init__(self, default_save_path: str):
        self.default_save_path = default_save_path

    def _initial_document(self) -> ProfileDatabase:
        return ProfileDatabase(config=ModuleDefaults(new_profile_save_path=self.default_save_path))

    @abstractmethod
    def _load(self) -> ProfileDatabase:
        """Return a private copy of the whole document."""

    @abstractmethod
    def _save(self, document: ProfileDatabase) -> None:
        """Replace the whole document."""

    def _require(self, document: ProfileDatabase, name: str) -> Profile:
        profile = document.find(name)
        if profile is None:
            raise ProfileNotFoundError(name)
        return profile

    # ----- Profiles -----

    def get_names(self) -> list[str]:
        return [profile.name for profile in self._load().profiles]

    def get_profiles(self) -> list[Profile]:
        return list(self._load().profiles)

    def get_profile(self, name: str) -> Profile | None:
        return self._load().find(name)

    def add_profile(self, profile: Profile) -> None:
        document = self._load()
        if document.find(profile.name) is not None:
            raise NameInUseError(profile.name)
        document.profiles.append(profile.model_copy(deep=True))
        self._save(document)
        logger.info(f"Added profile record: {profile.name}")

    def remove_profile(self, name: str) -> None:
        document = self._load()
        profile = self._require(document, name)
        document.profiles.remove(profile)
        self._save(document)
        logger.info(f"Removed profile record: {name}")

    def update_profile_name(self, old_name: str, new_name: str) -> None:
        document = self._load()
        profile = self._require(document, old_name)
        other = document.find(new_name)
        if other is not None and other is not profile:
            raise NameInUseError(new_name)
        profile.name = new_name
        self._save(document)
        logger.info(f"Renamed profile record: {old_name} -> {new_name}")

    def update_profile_path(self, name: str, path: Path) -> None:
        document = self._load()
        self._require(document, name).path = Path(path)
        self._save(document)
        logger.info(f"Updated path of profile {name}: {path}")

    def update_profile_sharing_settings(self, name: str, settings: ShareSettings) -> None:
        document = self._load()
        self._require(document, name).settings = settings.model_copy()
        self._save(document)
        logger.info(f"Updated sharing settings of profile {name}")

    # ----- Module defaults -----

    def get_default_path(self) -> str:
        return self._load().config.new_profile_save_path

    def update_default_path(self, path: str) -> None:
        document = self._load()
        document.config.new_profile_save_path = path
        self._save(document)
        logger.info(f"Set default path for new profiles: {path}")

    def get_default_sharing_settings(self) -> ShareSettings:
        return self._load().config.new_profile_sharing_settings

    def update_default_sharing_settings(self, settings: ShareSettings) -> None:
        document = self._load()
        document.config.new_profile_sharing_settings = settings.model_copy()
        self._save(document)
        logger.info("Updated default sharing settings for new profiles")

    # ----- Active profile -----

    def get_active_profile_name(self) -> str | None:
        return self._load().active_profile

    def set_active_profile_name(self, name: str | None) -> None:
        document = self._load()
        document.active_profile = name
        self._save(document)
        if name is None:
            logger.info("Cleared active profile")
        else:
            logger.info(f"Set active profile to: {name}")


class YamlRecordStore(_DocumentRecordStore):
    """
    Record store persisted as a single YAML document.

    Contract:
    - Inputs: path of the document, initial default save path for new profiles
    - Side Effects: rewrites the whole document on every mutation
    - Errors: RecordStoreError for unreadable or invalid documents
    - Missing document: treated as the initial, empty document
    """

    def __init__(self, path: Path, default_save_path: str):
        super().__init__(default_save_path)
        self.path = path

    def _load(self) -> ProfileDatabase:
        if not self.path.exists():
            return self._initial_document()

        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise RecordStoreError(f"Failed to read profile database {self.path}: {e}") from e

        if not data:
            return self._initial_document()

        try:
            return ProfileDatabase.model_validate(data)
        except ValidationError as e:
            raise RecordStoreError(f"Profile database {self.path} is invalid: {e}") from e

    def _save(self, document: ProfileDatabase) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Write to temp file first (atomic write pattern)
        with tempfile.NamedTemporaryFile(
            mode="w", dir=self.path.parent, prefix="database_", suffix=".tmp", delete=False, encoding="utf-8"
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            try:
                yaml.safe_dump(document.model_dump(mode="json"), tmp_file, default_flow_style=False, sort_keys=False)
                tmp_file.flush()
            except Exception as e:
                with contextlib.suppress(OSError):
                    temp_path.unlink()
                raise RecordStoreError(f"Failed to write profile database {self.path}: {e}") from e

        try:
            temp_path.replace(self.path)
        except OSError as e:
            with contextlib.suppress(OSError):
                temp_path.unlink()
            raise RecordStoreError(f"Failed to write profile database {self.path}: {e}") from e


class InMemoryRecordStore(_DocumentRecordStore):
    """Record store kept in memory, with the same copy semantics as the YAML store."""

    def __init__(self, default_save_path: str = "profiles"):
        super().__init__(default_save_path)
        self._document = self._initial_document()

    def _load(self) -> ProfileDatabase:
        return self._document.model_copy(deep=True)

    def _save(self, document: ProfileDatabase) -> None:
        self._document = document.model_copy(deep=True)
