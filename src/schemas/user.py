"""User schema definitions.

This module defines account records and the request/response bodies of the
authentication, profile and user management endpoints.
"""

from datetime import datetime
from typing import List, Literal, Optional

import pytz
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from schemas.registration import Registration

Role = Literal["user", "admin"]


class UserPublic(BaseModel):
    """Account as returned to clients. Never carries the password."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    role: str = "user"
    created_at: str


class User(UserPublic):
    """Stored account, including the password hash."""

    password: str = Field(repr=False)

    def to_public(self) -> UserPublic:
        return UserPublic(**self.model_dump(exclude={"password"}))


class NewUser(BaseModel):
    """Insert payload for ``Storage.create_user``. ``password`` is already hashed."""

    username: str
    password: str = Field(repr=False)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    role: str = "user"
    created_at: str = Field(
        default_factory=lambda: datetime.now(pytz.utc).isoformat()
    )


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, description="Username is required")
    password: str = Field(min_length=1, description="Password is required")


class RegisterRequest(BaseModel):
    """Self sign-up. The role is always ``user``."""

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None


class CreateUserRequest(RegisterRequest):
    """Admin-side account creation."""

    role: Role = "user"


class UpdateUserRequest(BaseModel):
    """Admin-side partial account update."""

    username: Optional[str] = Field(default=None, min_length=1)
    password: Optional[str] = Field(default=None, min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None
    role: Optional[Role] = None


class ProfileUpdateRequest(BaseModel):
    """Self-service profile update. Username and role are not editable here."""

    password: Optional[str] = Field(default=None, min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None


class ProfileResponse(BaseModel):
    user: UserPublic
    registrations: List[Registration]
