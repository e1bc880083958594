"""Exception hierarchy for profile operations.

Every failure raised by the core derives from ProfileError so the CLI layer
can report it uniformly and abort the invoked command.
"""

from pathlib import Path


class ProfileError(Exception):
    """Base class for all profile operation failures."""


class ProfileValidationError(ProfileError):
    """Raised when an argument is invalid before anything is attempted."""


class ProfileStateError(ProfileError):
    """Raised when the current state conflicts with the requested operation.

    The core never resolves these on its own; the calling layer decides
    whether to prompt, override or cancel.
    """


class NameInUseError(ProfileStateError):
    """Raised when a profile name is already taken."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"The name '{name}' is already taken")


class TargetExistsError(ProfileStateError):
    """Raised when a destination path is already occupied."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"The path '{path}' already exists")


class ProfileNotFoundError(ProfileStateError):
    """Raised when no profile record matches a name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"There is no profile named '{name}'")


class ProfileIOError(ProfileError):
    """Raised when a filesystem operation fails.

    Carries the attempted path and the underlying system error text.
    """

    def __init__(self, action: str, path: Path, detail: str):
        self.action = action
        self.path = path
        self.detail = detail
        super().__init__(f"Could not {action} '{path}': {detail}")

    @classmethod
    def from_os_error(cls, action: str, path: Path, error: OSError) -> "ProfileIOError":
        return cls(action, path, error.strerror or str(error))


class InvariantViolationError(ProfileError):
    """Raised when persisted state and disk state disagree in a way that needs operator attention."""


class RecordStoreError(ProfileError):
    """Raised when the record document cannot be read or is invalid."""
