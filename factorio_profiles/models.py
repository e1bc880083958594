"""Pydantic models for profiles, sharing settings and the persisted record document."""

from enum import Enum
from pathlib import Path
from typing import NamedTuple

from pydantic import BaseModel
from pydantic import Field

BLUEPRINT_FILE_NAME = "blueprint-storage.dat"


class ResourceKind(str, Enum):
    """Whether a shareable resource is a directory or a single file."""

    DIRECTORY = "directory"
    FILE = "file"


class SharedResource(NamedTuple):
    """A fixed-name child entry of a profile directory that can be linked to the global profile."""

    name: str
    kind: ResourceKind
    flag: str
    label: str


# Processing order is fixed so reconciliation is deterministic
SHARED_RESOURCES: tuple[SharedResource, ...] = (
    SharedResource("config", ResourceKind.DIRECTORY, "share_config", "Config"),
    SharedResource("mods", ResourceKind.DIRECTORY, "share_mods", "Mods"),
    SharedResource("saves", ResourceKind.DIRECTORY, "share_saves", "Saves"),
    SharedResource("scenarios", ResourceKind.DIRECTORY, "share_scenarios", "Scenarios"),
    SharedResource(BLUEPRINT_FILE_NAME, ResourceKind.FILE, "share_blueprints", "Blueprints"),
)


class ShareSettings(BaseModel):
    """Which resources a profile links to the global profile instead of owning."""

    share_config: bool = Field(default=False, description="Link the config directory")
    share_mods: bool = Field(default=False, description="Link the mods directory")
    share_saves: bool = Field(default=False, description="Link the saves directory")
    share_scenarios: bool = Field(default=False, description="Link the scenarios directory")
    share_blueprints: bool = Field(default=False, description="Share the blueprint storage file")

    def is_shared(self, resource: SharedResource) -> bool:
        return getattr(self, resource.flag)

    def with_overrides(
        self,
        config: bool | None = None,
        mods: bool | None = None,
        saves: bool | None = None,
        scenarios: bool | None = None,
        blueprints: bool | None = None,
    ) -> "ShareSettings":
        """Return a copy with every non-None override applied.

        The receiver is left untouched so callers can still diff against it.
        """
        overrides = {
            "share_config": config,
            "share_mods": mods,
            "share_saves": saves,
            "share_scenarios": scenarios,
            "share_blueprints": blueprints,
        }
        return self.model_copy(update={k: v for k, v in overrides.items() if v is not None})

    def shared_labels(self) -> list[str]:
        """Human labels of the enabled flags, in resource order."""
        return [resource.label for resource in SHARED_RESOURCES if self.is_shared(resource)]


class Profile(BaseModel):
    """A named, isolated profile directory."""

    name: str = Field(..., description="Unique profile name (case-insensitive)")
    path: Path = Field(..., description="Absolute location of the profile directory")
    settings: ShareSettings = Field(default_factory=ShareSettings)

    @property
    def blueprint_file(self) -> Path:
        return self.path / BLUEPRINT_FILE_NAME


class ModuleDefaults(BaseModel):
    """Module-wide defaults applied when creating new profiles."""

    new_profile_save_path: str = Field(..., description="Parent directory for new profiles")
    new_profile_sharing_settings: ShareSettings = Field(default_factory=ShareSettings)


class ProfileDatabase(BaseModel):
    """The complete persisted record document."""

    version: str = "1.0.0"
    config: ModuleDefaults
    active_profile: str | None = None
    profiles: list[Profile] = Field(default_factory=list)

    def find(self, name: str) -> Profile | None:
        """Case-insensitive lookup returning the stored object itself."""
        wanted = name.casefold()
        for profile in self.profiles:
            if profile.name.casefold() == wanted:
                return profile
        return None
