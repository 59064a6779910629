"""User management utilities.

This module provides account management on top of a ``Storage`` backend:
creation with password hashing, credential checks, updates and deletion.
"""

import functools
import logging
import secrets
from typing import Any, Dict, List, Optional

from core.exceptions import SelfDeletionError
from schemas.user import NewUser, User
from utils.passwords import hash_password, verify_password
from utils.storage import Storage

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=1)
def _dummy_hash() -> str:
    """Hash checked against when the username does not exist."""
    return hash_password(secrets.token_hex(16))


class UserManager:
    """Manages account operations."""

    def __init__(self, storage: Storage):
        """Initialize UserManager.

        Args:
            storage: Storage backend.
        """
        self.storage = storage

    def create_user(
        self,
        username: str,
        password: str,
        role: str = "user",
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> User:
        """Create a new account.

        Args:
            username: Username for the new account.
            password: Plain text password.
            role: 'user' or 'admin'.
            first_name: Optional first name.
            last_name: Optional last name.
            email: Optional email address.
            phone_number: Optional phone number.

        Returns:
            Created User object.

        Raises:
            DuplicateUsernameError: If the username already exists.
        """
        user = self.storage.create_user(
            NewUser(
                username=username,
                password=hash_password(password),
                role=role,
                first_name=first_name,
                last_name=last_name,
                email=email,
                phone_number=phone_number,
            )
        )
        logger.info("Created %s account: %s", role, username)
        return user

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """Return the account if the credentials match, otherwise None.

        A missing username still pays for one hash verification so that the
        two failure cases cannot be told apart by timing.
        """
        user = self.storage.get_user_by_username(username)
        if user is None:
            verify_password(password, _dummy_hash())
            return None
        if not verify_password(password, user.password):
            return None
        return user

    def get_user(self, user_id: int) -> Optional[User]:
        return self.storage.get_user(user_id)

    def list_users(self) -> List[User]:
        return self.storage.get_users()

    def update_user(self, user_id: int, data: Dict[str, Any]) -> Optional[User]:
        """Apply a partial update, hashing a new password if one is supplied.

        Returns:
            The updated User, or None if the account does not exist.

        Raises:
            DuplicateUsernameError: If renaming onto an existing username.
        """
        changes = dict(data)
        if changes.get("password"):
            changes["password"] = hash_password(changes["password"])
        else:
            changes.pop("password", None)
        return self.storage.update_user(user_id, changes)

    def delete_user(self, user_id: int, acting_user_id: int) -> bool:
        """Delete an account on behalf of ``acting_user_id``.

        Raises:
            SelfDeletionError: If an account tries to delete itself.
        """
        if user_id == acting_user_id:
            raise SelfDeletionError()
        return self.storage.delete_user(user_id)
