"""CLI path policy and dependency injection helpers.

This module centralizes ALL path-related policy decisions for the CLI.
The core receives paths via injection; this module provides the CLI's choices.
"""

import logging
import os
import sys
from pathlib import Path

from .blueprints import BlueprintSync
from .errors import ProfileIOError
from .lifecycle import ProfileController
from .prompts import Chooser
from .record_store import RecordStore
from .record_store import YamlRecordStore
from .switcher import ActiveProfileSwitcher

logger = logging.getLogger(__name__)

HOME_ENV = "FACTORIO_PROFILES_HOME"
DATA_DIR_ENV = "FACTORIO_DATA_DIR"
PROCESS_NAME_ENV = "FACTORIO_PROCESS_NAME"

DEFAULT_PROCESS_NAME = "factorio"


# ===== LOCATIONS =====


def get_data_root() -> Path:
    """Root folder for the database, logs and the default profile location."""
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".factorio-profiles"


def get_database_path() -> Path:
    return get_data_root() / "database.yaml"


def get_log_path() -> Path:
    return get_data_root() / "factorio-profiles.log.jsonl"


def get_profiles_root() -> Path:
    return get_data_root() / "profiles"


def get_global_profile_path() -> Path:
    """Folder holding everything profiles share; target of all shared links."""
    return get_profiles_root() / "global"


def get_active_link_path() -> Path:
    """The game's user-data folder, which becomes a link to the active profile.

    Returns:
        FACTORIO_DATA_DIR if set, otherwise the platform's standard location
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()

    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
        return base / "Factorio"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "factorio"
    return Path.home() / ".factorio"


def get_process_name() -> str:
    return os.environ.get(PROCESS_NAME_ENV, DEFAULT_PROCESS_NAME)


def ensure_global_profile() -> Path:
    """Create the global profile folder if it does not exist yet.

    Raises:
        ProfileIOError: If the folder cannot be created
    """
    path = get_global_profile_path()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ProfileIOError.from_os_error("create global profile folder", path, e) from e
    return path


# ===== FACTORIES =====


def create_record_store() -> RecordStore:
    """Create the YAML record store at the CLI's database location."""
    return YamlRecordStore(get_database_path(), default_save_path=str(get_profiles_root()))


def create_controller(store: RecordStore | None = None) -> ProfileController:
    return ProfileController(store or create_record_store(), get_global_profile_path())


def create_switcher(chooser: Chooser, store: RecordStore | None = None) -> ActiveProfileSwitcher:
    return ActiveProfileSwitcher(
        store or create_record_store(),
        get_active_link_path(),
        get_global_profile_path(),
        chooser,
    )


def create_blueprint_sync() -> BlueprintSync:
    return BlueprintSync(get_global_profile_path())
