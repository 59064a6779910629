"""User management routes (admin only)."""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Response, status

from api.routes.auth import AdminUserDep
from core.dependencies import UserManagerDep
from core.exceptions import DuplicateUsernameError, SelfDeletionError
from schemas.user import CreateUserRequest, UpdateUserRequest, UserPublic

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


@router.get("", response_model=List[UserPublic], summary="List users")
def list_users(_admin: AdminUserDep, user_manager: UserManagerDep) -> List[UserPublic]:
    return [user.to_public() for user in user_manager.list_users()]


@router.get("/{user_id}", response_model=UserPublic, summary="Get user")
def get_user(
    user_id: int, _admin: AdminUserDep, user_manager: UserManagerDep
) -> UserPublic:
    user = user_manager.get_user(user_id)
    if user is None:
        raise _not_found()
    return user.to_public()


@router.post(
    "",
    response_model=UserPublic,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
def create_user(
    req: CreateUserRequest, admin: AdminUserDep, user_manager: UserManagerDep
) -> UserPublic:
    """Create an account with any role.

    Raises:
        HTTPException: 409 if the username is taken.
    """
    try:
        user = user_manager.create_user(**req.model_dump())
    except DuplicateUsernameError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    logger.info("Admin id=%s created user id=%s", admin.id, user.id)
    return user.to_public()


@router.put("/{user_id}", response_model=UserPublic, summary="Update user")
def update_user(
    user_id: int,
    req: UpdateUserRequest,
    _admin: AdminUserDep,
    user_manager: UserManagerDep,
) -> UserPublic:
    """Partially update an account. Omitted fields are left untouched.

    Raises:
        HTTPException: 404 if the account does not exist, 409 on a rename
            onto an existing username.
    """
    changes = req.model_dump(exclude_unset=True, exclude_none=True)
    try:
        user = user_manager.update_user(user_id, changes)
    except DuplicateUsernameError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if user is None:
        raise _not_found()
    return user.to_public()


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete user",
)
def delete_user(
    user_id: int, admin: AdminUserDep, user_manager: UserManagerDep
) -> Response:
    """Delete an account. Admins cannot delete themselves.

    Registrations and wiki articles the account owned are kept with their
    owner cleared.
    """
    try:
        deleted = user_manager.delete_user(user_id, acting_user_id=admin.id)
    except SelfDeletionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not deleted:
        raise _not_found()
    logger.info("Admin id=%s deleted user id=%s", admin.id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
