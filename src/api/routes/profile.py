"""Profile routes.

This module handles HTTP endpoints for the signed-in account's own profile.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from api.routes.auth import CurrentUserDep
from core.dependencies import StorageDep, UserManagerDep
from schemas.user import ProfileResponse, ProfileUpdateRequest, UserPublic

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["Profile"])


@router.get("", response_model=ProfileResponse, summary="Get own profile")
def get_profile(current_user: CurrentUserDep, storage: StorageDep) -> ProfileResponse:
    """Return the caller's account together with the registrations it owns."""
    return ProfileResponse(
        user=current_user.to_public(),
        registrations=storage.get_registrations_by_user(current_user.id),
    )


@router.put("", response_model=UserPublic, summary="Update own profile")
def update_profile(
    req: ProfileUpdateRequest,
    current_user: CurrentUserDep,
    user_manager: UserManagerDep,
) -> UserPublic:
    """Update the caller's names, contact details or password.

    Raises:
        HTTPException: 404 if the account vanished after the session was resolved.
    """
    changes = req.model_dump(exclude_unset=True, exclude_none=True)
    updated = user_manager.update_user(current_user.id, changes)
    if updated is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    logger.info("User id=%s updated their profile", current_user.id)
    return updated.to_public()
