"""Authentication routes.

This module handles HTTP endpoints for sign-up, login and logout, and provides
the dependencies other routers use to resolve and gate the current user.
"""

import logging
from typing import Annotated, Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from config import SESSION_COOKIE_NAME, SESSION_COOKIE_SECURE
from core.dependencies import SessionManagerDep, UserManagerDep
from core.exceptions import AuthenticationError, AuthorizationError, DuplicateUsernameError
from schemas.user import LoginRequest, RegisterRequest, User, UserPublic

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])


def _set_session_cookie(response: Response, token: str, max_age: int) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=max_age,
        httponly=True,
        samesite="lax",
        secure=SESSION_COOKIE_SECURE,
    )


def get_current_user_optional(
    request: Request,
    session_manager: SessionManagerDep,
) -> Optional[User]:
    """Resolve the session cookie to an account, or None for anonymous callers.

    Storage failures are not swallowed here; they surface as a 500.
    """
    token = request.cookies.get(SESSION_COOKIE_NAME)
    return session_manager.current_principal(token)


def get_current_user(
    user: Optional[User] = Depends(get_current_user_optional),
) -> User:
    """Get current authenticated user.

    Raises:
        AuthorizationError: 401 if there is no valid session.
    """
    if user is None:
        raise AuthorizationError("Not authenticated", status_code=401)
    return user


def require_roles(*roles: str) -> Callable[..., User]:
    """Build a dependency accepting exactly the listed roles.

    Roles are not hierarchical: a route that should accept admins and users
    has to list both.
    """

    def _dep(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise AuthorizationError()
        return user

    return _dep


require_admin = require_roles("admin")
require_member = require_roles("user", "admin")

OptionalUserDep = Annotated[Optional[User], Depends(get_current_user_optional)]
CurrentUserDep = Annotated[User, Depends(get_current_user)]
AdminUserDep = Annotated[User, Depends(require_admin)]
MemberUserDep = Annotated[User, Depends(require_member)]


@router.post(
    "/register",
    response_model=UserPublic,
    status_code=status.HTTP_201_CREATED,
    summary="User sign-up",
)
def register(
    req: RegisterRequest,
    response: Response,
    user_manager: UserManagerDep,
    session_manager: SessionManagerDep,
) -> UserPublic:
    """Create an account and log it in.

    Self sign-up always creates a ``user``; admins are created through
    ``POST /api/users`` or the CLI.

    Raises:
        HTTPException: 409 if the username is taken.
    """
    try:
        user = user_manager.create_user(
            username=req.username,
            password=req.password,
            role="user",
            first_name=req.first_name,
            last_name=req.last_name,
            email=req.email,
            phone_number=req.phone_number,
        )
    except DuplicateUsernameError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )

    token = session_manager.start_session(user)
    _set_session_cookie(response, token, session_manager.max_age_seconds)
    return user.to_public()


@router.post("/login", response_model=UserPublic, summary="User login")
def login(
    req: LoginRequest,
    response: Response,
    session_manager: SessionManagerDep,
) -> UserPublic:
    """Login with username and password.

    Raises:
        HTTPException: 401 with the same message whether the username is
            unknown or the password is wrong.
    """
    try:
        user, token = session_manager.login(req.username, req.password)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )

    _set_session_cookie(response, token, session_manager.max_age_seconds)
    return user.to_public()


@router.post("/logout", summary="User logout")
def logout(
    request: Request,
    response: Response,
    session_manager: SessionManagerDep,
) -> dict:
    """Invalidate the caller's session server-side and clear the cookie.

    Calling it without a session is not an error.
    """
    session_manager.logout(request.cookies.get(SESSION_COOKIE_NAME))
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        httponly=True,
        samesite="lax",
        secure=SESSION_COOKIE_SECURE,
    )
    return {"success": True, "message": "Logged out successfully"}


@router.get("/user", response_model=UserPublic, summary="Current user")
def get_current_user_info(current_user: CurrentUserDep) -> UserPublic:
    return current_user.to_public()
