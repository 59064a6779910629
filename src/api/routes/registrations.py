"""Carnival registration routes.

Anyone may submit the registration form. Listing is scoped by role: admins see
every registration, users see their own. Only admins may delete or change the
status or owner of a registration.
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Response, status

from api.routes.auth import AdminUserDep, MemberUserDep, OptionalUserDep
from core.dependencies import StorageDep
from core.exceptions import AuthorizationError, NotFoundError
from schemas.registration import Registration, RegistrationForm, RegistrationUpdate
from schemas.user import User
from utils.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Registration"])

ADMIN_ONLY_FIELDS = {"status", "user_id"}


def _get_accessible_registration(
    storage: Storage, registration_pk: int, current_user: User
) -> Registration:
    """Load a registration the caller owns, or any registration for admins.

    Raises:
        NotFoundError: If the registration does not exist.
        AuthorizationError: If it belongs to someone else.
    """
    registration = storage.get_registration(registration_pk)
    if registration is None:
        raise NotFoundError("Registration", registration_pk)
    if current_user.role != "admin" and registration.user_id != current_user.id:
        raise AuthorizationError()
    return registration


@router.post(
    "/register-carnival",
    response_model=Registration,
    status_code=status.HTTP_201_CREATED,
    summary="Submit the carnival registration form",
)
def register_carnival(
    form: RegistrationForm,
    storage: StorageDep,
    current_user: OptionalUserDep,
) -> Registration:
    """Create a registration, owned by the caller when logged in."""
    owner_id = current_user.id if current_user else None
    registration = storage.create_registration(form.to_new_registration(owner_id))
    logger.info(
        "Carnival registration %s submitted (owner id=%s)",
        registration.registration_id,
        owner_id,
    )
    return registration


@router.get("/registrations", response_model=List[Registration], summary="List registrations")
def list_registrations(
    storage: StorageDep,
    current_user: MemberUserDep,
) -> List[Registration]:
    if current_user.role == "admin":
        return storage.get_all_registrations()
    return storage.get_registrations_by_user(current_user.id)


@router.get(
    "/registrations/{registration_pk}",
    response_model=Registration,
    summary="Get a registration",
)
def get_registration(
    registration_pk: int,
    storage: StorageDep,
    current_user: MemberUserDep,
) -> Registration:
    return _get_accessible_registration(storage, registration_pk, current_user)


@router.put(
    "/registrations/{registration_pk}",
    response_model=Registration,
    summary="Update a registration",
)
def update_registration(
    registration_pk: int,
    req: RegistrationUpdate,
    storage: StorageDep,
    current_user: MemberUserDep,
) -> Registration:
    """Apply a partial update.

    Raises:
        HTTPException: 403 when a non-admin touches ``status`` or ``user_id``,
            400 when ``user_id`` names a missing account.
    """
    _get_accessible_registration(storage, registration_pk, current_user)

    changes = req.model_dump(exclude_unset=True, exclude_none=True)
    if current_user.role != "admin" and ADMIN_ONLY_FIELDS & changes.keys():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admins can change the status or owner of a registration",
        )
    if "user_id" in changes and storage.get_user(changes["user_id"]) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"User {changes['user_id']} does not exist",
        )

    updated = storage.update_registration(registration_pk, changes)
    if updated is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Registration not found",
        )
    return updated


@router.delete(
    "/registrations/{registration_pk}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a registration",
)
def delete_registration(
    registration_pk: int,
    storage: StorageDep,
    current_user: AdminUserDep,
) -> Response:
    if not storage.delete_registration(registration_pk):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Registration not found",
        )
    logger.info("User id=%s deleted registration pk=%s", current_user.id, registration_pk)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
