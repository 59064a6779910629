"""In-process storage backend.

Records live in dicts keyed by integer id with one monotonic counter per
table, so ids are never reused. Used by the test-suite and by
``STORAGE_BACKEND=memory``.
"""

import logging
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytz

from config import REGISTRATION_ID_MAX_ATTEMPTS
from core.exceptions import DuplicateSettingError, DuplicateUsernameError, InfrastructureError
from schemas.registration import NewRegistration, Registration
from schemas.session import AuthSession
from schemas.setting import NewSetting, Setting
from schemas.user import NewUser, User
from schemas.wiki import NewWikiContent, WikiContent
from utils.storage import (
    REGISTRATION_MUTABLE_FIELDS,
    USER_MUTABLE_FIELDS,
    WIKI_MUTABLE_FIELDS,
    Storage,
    generate_registration_id,
    pick_fields,
)

logger = logging.getLogger(__name__)


def _copy(record):
    return record.model_copy(deep=True) if record is not None else None


class MemStorage(Storage):
    """Dict-backed ``Storage``. Mutations are serialized by a single lock."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._users: Dict[int, User] = {}
        self._registrations: Dict[int, Registration] = {}
        self._wiki: Dict[int, WikiContent] = {}
        self._settings: Dict[str, Setting] = {}
        self._sessions: Dict[str, AuthSession] = {}
        self._user_seq = 0
        self._registration_seq = 0
        self._wiki_seq = 0
        self._setting_seq = 0

    # --- Users ---

    def get_user(self, user_id: int) -> Optional[User]:
        return _copy(self._users.get(user_id))

    def _find_username(self, username: str) -> Optional[User]:
        wanted = username.lower()
        for user in self._users.values():
            if user.username.lower() == wanted:
                return user
        return None

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            return _copy(self._find_username(username))

    def get_users(self) -> List[User]:
        with self._lock:
            return [_copy(u) for u in self._users.values()]

    def create_user(self, user: NewUser) -> User:
        with self._lock:
            if self._find_username(user.username) is not None:
                raise DuplicateUsernameError(user.username)
            self._user_seq += 1
            record = User(id=self._user_seq, **user.model_dump())
            self._users[record.id] = record
            return _copy(record)

    def update_user(self, user_id: int, data: Dict[str, Any]) -> Optional[User]:
        with self._lock:
            current = self._users.get(user_id)
            if current is None:
                return None
            changes = pick_fields(data, USER_MUTABLE_FIELDS)
            new_username = changes.get("username")
            if new_username is not None:
                other = self._find_username(new_username)
                if other is not None and other.id != user_id:
                    raise DuplicateUsernameError(new_username)
            updated = current.model_copy(update=changes)
            self._users[user_id] = updated
            return _copy(updated)

    def delete_user(self, user_id: int) -> bool:
        with self._lock:
            if self._users.pop(user_id, None) is None:
                return False
            for pk, registration in self._registrations.items():
                if registration.user_id == user_id:
                    self._registrations[pk] = registration.model_copy(update={"user_id": None})
            for pk, content in self._wiki.items():
                if content.created_by == user_id:
                    self._wiki[pk] = content.model_copy(update={"created_by": None})
            for session_id in [s.session_id for s in self._sessions.values() if s.user_id == user_id]:
                del self._sessions[session_id]
            return True

    # --- Registrations ---

    def get_registration(self, registration_pk: int) -> Optional[Registration]:
        return _copy(self._registrations.get(registration_pk))

    def get_registration_by_registration_id(self, registration_id: str) -> Optional[Registration]:
        with self._lock:
            for registration in self._registrations.values():
                if registration.registration_id == registration_id:
                    return _copy(registration)
        return None

    def get_registrations_by_user(self, user_id: int) -> List[Registration]:
        with self._lock:
            return [_copy(r) for r in self._registrations.values() if r.user_id == user_id]

    def get_all_registrations(self) -> List[Registration]:
        with self._lock:
            return [_copy(r) for r in self._registrations.values()]

    def create_registration(self, registration: NewRegistration) -> Registration:
        with self._lock:
            taken = {r.registration_id for r in self._registrations.values()}
            for _ in range(REGISTRATION_ID_MAX_ATTEMPTS):
                registration_id = generate_registration_id()
                if registration_id not in taken:
                    break
                logger.warning("Registration id collision on %s, drawing again", registration_id)
            else:
                raise InfrastructureError("Could not allocate a unique registration id")

            self._registration_seq += 1
            record = Registration(
                id=self._registration_seq,
                registration_id=registration_id,
                created_at=datetime.now(pytz.utc).isoformat(),
                **registration.model_dump(),
            )
            self._registrations[record.id] = record
            return _copy(record)

    def update_registration(self, registration_pk: int, data: Dict[str, Any]) -> Optional[Registration]:
        with self._lock:
            current = self._registrations.get(registration_pk)
            if current is None:
                return None
            updated = current.model_copy(update=pick_fields(data, REGISTRATION_MUTABLE_FIELDS))
            self._registrations[registration_pk] = updated
            return _copy(updated)

    def delete_registration(self, registration_pk: int) -> bool:
        with self._lock:
            return self._registrations.pop(registration_pk, None) is not None

    # --- Wiki ---

    def get_wiki_content(self, content_id: int) -> Optional[WikiContent]:
        return _copy(self._wiki.get(content_id))

    def get_all_wiki_content(self) -> List[WikiContent]:
        with self._lock:
            return [_copy(c) for c in self._wiki.values()]

    def get_wiki_content_by_category(self, category: str) -> List[WikiContent]:
        wanted = category.lower()
        with self._lock:
            return [_copy(c) for c in self._wiki.values() if c.category.lower() == wanted]

    def get_all_wiki_categories(self) -> List[str]:
        with self._lock:
            # dict keeps first-appearance order
            return list(dict.fromkeys(c.category for c in self._wiki.values()))

    def create_wiki_content(self, content: NewWikiContent) -> WikiContent:
        with self._lock:
            self._wiki_seq += 1
            record = WikiContent(
                id=self._wiki_seq,
                last_updated=datetime.now(pytz.utc).isoformat(),
                **content.model_dump(),
            )
            self._wiki[record.id] = record
            return _copy(record)

    def update_wiki_content(self, content_id: int, data: Dict[str, Any]) -> Optional[WikiContent]:
        with self._lock:
            current = self._wiki.get(content_id)
            if current is None:
                return None
            changes = pick_fields(data, WIKI_MUTABLE_FIELDS)
            changes["last_updated"] = datetime.now(pytz.utc).isoformat()
            updated = current.model_copy(update=changes)
            self._wiki[content_id] = updated
            return _copy(updated)

    def delete_wiki_content(self, content_id: int) -> bool:
        with self._lock:
            return self._wiki.pop(content_id, None) is not None

    # --- Settings ---

    def get_setting(self, name: str) -> Optional[Setting]:
        return _copy(self._settings.get(name))

    def get_settings_by_group(self, group: str) -> List[Setting]:
        with self._lock:
            return [_copy(s) for s in self._settings.values() if s.group == group]

    def create_setting(self, setting: NewSetting) -> Setting:
        with self._lock:
            if setting.name in self._settings:
                raise DuplicateSettingError(setting.name)
            self._setting_seq += 1
            record = Setting(id=self._setting_seq, **setting.model_dump())
            self._settings[record.name] = record
            return _copy(record)

    def update_setting(self, name: str, value: str) -> Optional[Setting]:
        with self._lock:
            current = self._settings.get(name)
            if current is None:
                return None
            updated = current.model_copy(update={"value": value})
            self._settings[name] = updated
            return _copy(updated)

    def get_all_settings(self) -> List[Setting]:
        with self._lock:
            return sorted((_copy(s) for s in self._settings.values()), key=lambda s: s.id)

    # --- Sessions ---

    def create_session(self, session: AuthSession) -> AuthSession:
        with self._lock:
            self._sessions[session.session_id] = _copy(session)
            return _copy(session)

    def get_session(self, session_id: str) -> Optional[AuthSession]:
        return _copy(self._sessions.get(session_id))

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def delete_expired_sessions(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.now(pytz.utc)
        with self._lock:
            expired = [s.session_id for s in self._sessions.values() if s.is_expired(now)]
            for session_id in expired:
                del self._sessions[session_id]
            return len(expired)
