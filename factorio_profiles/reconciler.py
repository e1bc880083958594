"""Apply the difference between two sharing settings to a profile directory."""

import logging
from pathlib import Path

from .links import LinkChange
from .links import LinkCreator
from .links import ensure_link_state
from .models import SHARED_RESOURCES
from .models import ShareSettings

logger = logging.getLogger(__name__)


def apply_settings_diff(
    profile_path: Path,
    global_profile_path: Path,
    old_settings: ShareSettings,
    new_settings: ShareSettings,
    link_creator: LinkCreator | None = None,
) -> list[LinkChange]:
    """Add or remove links for every flag that differs between old and new.

    Unchanged flags are skipped entirely, so reapplying identical settings
    touches nothing on disk. A failure part-way leaves earlier changes in
    place; there is no rollback across resources.

    Returns:
        The changes applied, in resource order
    """
    changes: list[LinkChange] = []
    for resource in SHARED_RESOURCES:
        was_shared = old_settings.is_shared(resource)
        now_shared = new_settings.is_shared(resource)
        if was_shared == now_shared:
            continue

        change = ensure_link_state(
            profile_path,
            resource.name,
            resource.kind,
            now_shared,
            global_profile_path,
            link_creator=link_creator,
        )
        if change is not None:
            changes.append(change)

    logger.debug(f"Applied {len(changes)} link change(s) to {profile_path}")
    return changes
