"""Storage interface shared by the in-memory and relational backends.

Every method is total over its return type: a missing record is reported as
``None``, ``False`` or an empty list. Only constraint violations
(``DuplicateUsernameError``, ``DuplicateSettingError``) and infrastructure
failures (``InfrastructureError``) are raised.
"""

import secrets
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytz

from config import REGISTRATION_ID_PREFIX
from schemas.registration import NewRegistration, Registration
from schemas.session import AuthSession
from schemas.setting import NewSetting, Setting
from schemas.user import NewUser, User
from schemas.wiki import NewWikiContent, WikiContent

# Fields that partial updates may touch. Anything else is ignored.
USER_MUTABLE_FIELDS = frozenset(
    {"username", "password", "first_name", "last_name", "email", "phone_number", "role"}
)
REGISTRATION_MUTABLE_FIELDS = frozenset(
    {
        "user_id",
        "first_name",
        "last_name",
        "email",
        "phone_number",
        "participant_type",
        "grade",
        "activities",
        "special_requests",
        "status",
    }
)
WIKI_MUTABLE_FIELDS = frozenset({"title", "content", "category"})


def generate_registration_id(now: Optional[datetime] = None) -> str:
    """Build a human facing registration id such as ``SC2025-48213``.

    The five digit suffix is drawn uniformly from [10000, 99999]. It is not
    unique on its own; callers must check for collisions.
    """
    now = now or datetime.now(pytz.utc)
    suffix = 10000 + secrets.randbelow(90000)
    return f"{REGISTRATION_ID_PREFIX}{now.year}-{suffix}"


def pick_fields(data: Dict[str, Any], allowed: frozenset) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key in allowed}


class Storage(ABC):
    """CRUD over accounts, registrations, wiki content, settings and sessions."""

    # --- Users ---

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]:
        """Case-insensitive lookup."""

    @abstractmethod
    def get_users(self) -> List[User]:
        ...

    @abstractmethod
    def create_user(self, user: NewUser) -> User:
        """Insert an account whose password is already hashed.

        Raises:
            DuplicateUsernameError: If the username is taken.
        """

    @abstractmethod
    def update_user(self, user_id: int, data: Dict[str, Any]) -> Optional[User]:
        """Apply a partial update.

        Raises:
            DuplicateUsernameError: If renaming onto a taken username.
        """

    @abstractmethod
    def delete_user(self, user_id: int) -> bool:
        """Delete an account, clearing references to it and dropping its sessions."""

    # --- Registrations ---

    @abstractmethod
    def get_registration(self, registration_pk: int) -> Optional[Registration]:
        ...

    @abstractmethod
    def get_registration_by_registration_id(self, registration_id: str) -> Optional[Registration]:
        ...

    @abstractmethod
    def get_registrations_by_user(self, user_id: int) -> List[Registration]:
        ...

    @abstractmethod
    def get_all_registrations(self) -> List[Registration]:
        ...

    @abstractmethod
    def create_registration(self, registration: NewRegistration) -> Registration:
        """Insert a registration, assigning id, registration id and timestamp.

        Raises:
            InfrastructureError: If no free registration id was found within
                ``REGISTRATION_ID_MAX_ATTEMPTS`` draws.
        """

    @abstractmethod
    def update_registration(self, registration_pk: int, data: Dict[str, Any]) -> Optional[Registration]:
        """Apply a partial update. The registration id never changes."""

    @abstractmethod
    def delete_registration(self, registration_pk: int) -> bool:
        ...

    # --- Wiki ---

    @abstractmethod
    def get_wiki_content(self, content_id: int) -> Optional[WikiContent]:
        ...

    @abstractmethod
    def get_all_wiki_content(self) -> List[WikiContent]:
        ...

    @abstractmethod
    def get_wiki_content_by_category(self, category: str) -> List[WikiContent]:
        """Case-insensitive category match."""

    @abstractmethod
    def get_all_wiki_categories(self) -> List[str]:
        """Distinct categories of the articles that currently exist."""

    @abstractmethod
    def create_wiki_content(self, content: NewWikiContent) -> WikiContent:
        ...

    @abstractmethod
    def update_wiki_content(self, content_id: int, data: Dict[str, Any]) -> Optional[WikiContent]:
        """Apply a partial update and always refresh ``last_updated``."""

    @abstractmethod
    def delete_wiki_content(self, content_id: int) -> bool:
        ...

    # --- Settings ---

    @abstractmethod
    def get_setting(self, name: str) -> Optional[Setting]:
        ...

    @abstractmethod
    def get_settings_by_group(self, group: str) -> List[Setting]:
        ...

    @abstractmethod
    def create_setting(self, setting: NewSetting) -> Setting:
        """Insert a setting.

        Raises:
            DuplicateSettingError: If a setting with that name exists.
        """

    @abstractmethod
    def update_setting(self, name: str, value: str) -> Optional[Setting]:
        """Change the value of an existing setting. Never creates one."""

    @abstractmethod
    def get_all_settings(self) -> List[Setting]:
        ...

    # --- Sessions ---

    @abstractmethod
    def create_session(self, session: AuthSession) -> AuthSession:
        ...

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[AuthSession]:
        ...

    @abstractmethod
    def delete_session(self, session_id: str) -> bool:
        ...

    @abstractmethod
    def delete_expired_sessions(self, now: Optional[datetime] = None) -> int:
        """Remove sessions whose absolute expiry has passed. Returns the count."""
