"""Site settings routes."""

import logging
from typing import Dict, List

from fastapi import APIRouter

from api.routes.auth import AdminUserDep
from core.dependencies import StorageDep
from schemas.setting import Setting, SettingsUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["Settings"])


@router.get("", summary="Settings grouped by group name")
def get_settings(storage: StorageDep) -> Dict[str, Dict[str, str]]:
    """Return every setting as ``{group: {name: value}}``."""
    grouped: Dict[str, Dict[str, str]] = {}
    for setting in storage.get_all_settings():
        grouped.setdefault(setting.group, {})[setting.name] = setting.value
    return grouped


@router.post("", response_model=List[Setting], summary="Update settings")
def update_settings(
    req: SettingsUpdateRequest,
    storage: StorageDep,
    current_user: AdminUserDep,
) -> List[Setting]:
    """Update the values of existing settings.

    Unknown names are skipped rather than created.

    Returns:
        The settings that were updated.
    """
    results = []
    for name, value in req.settings.items():
        updated = storage.update_setting(name, value)
        if updated is None:
            logger.warning("Ignoring update for unknown setting %r", name)
            continue
        results.append(updated)
    logger.info("User id=%s updated %d settings", current_user.id, len(results))
    return results
