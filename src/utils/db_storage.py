"""Relational storage backend using SQLAlchemy.

One instance wraps one request-scoped SQLAlchemy session. Each public method
commits its own unit of work; database failures other than the uniqueness
violations handled inline surface as ``InfrastructureError``.
"""

import functools
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytz
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from config import REGISTRATION_ID_MAX_ATTEMPTS
from core.exceptions import (
    CarnivalError,
    DuplicateSettingError,
    DuplicateUsernameError,
    InfrastructureError,
)
from models.auth_session import AuthSessionModel
from models.registration import RegistrationModel
from models.setting import SettingModel
from models.user import UserModel
from models.wiki_content import WikiContentModel
from schemas.registration import NewRegistration, Registration
from schemas.session import AuthSession, format_expiry
from schemas.setting import NewSetting, Setting
from schemas.user import NewUser, User
from schemas.wiki import NewWikiContent, WikiContent
from utils.converters import (
    model_to_registration,
    model_to_session,
    model_to_setting,
    model_to_user,
    model_to_wiki_content,
    session_to_model,
)
from utils.storage import (
    REGISTRATION_MUTABLE_FIELDS,
    USER_MUTABLE_FIELDS,
    WIKI_MUTABLE_FIELDS,
    Storage,
    generate_registration_id,
    pick_fields,
)

logger = logging.getLogger(__name__)


def _db_operation(method):
    """Roll back and re-raise database failures as ``InfrastructureError``."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except CarnivalError:
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Database error in %s", method.__name__)
            raise InfrastructureError(f"Database error in {method.__name__}") from exc

    return wrapper


def _is_username_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return "username" in message or "uq_users_username_lower" in message


class DatabaseStorage(Storage):
    """``Storage`` implementation over a SQLAlchemy session."""

    def __init__(self, db: Session):
        """Initialize DatabaseStorage.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    # --- Users ---

    def _user_query_by_username(self, username: str):
        return self.db.query(UserModel).filter(
            func.lower(UserModel.username) == username.lower()
        )

    @_db_operation
    def get_user(self, user_id: int) -> Optional[User]:
        model = self.db.get(UserModel, user_id)
        return model_to_user(model) if model else None

    @_db_operation
    def get_user_by_username(self, username: str) -> Optional[User]:
        model = self._user_query_by_username(username).first()
        return model_to_user(model) if model else None

    @_db_operation
    def get_users(self) -> List[User]:
        models = self.db.query(UserModel).order_by(UserModel.id).all()
        return [model_to_user(m) for m in models]

    @_db_operation
    def create_user(self, user: NewUser) -> User:
        if self._user_query_by_username(user.username).first():
            raise DuplicateUsernameError(user.username)

        # Two concurrent sign-ups can both pass the check above; the unique
        # index on lower(username) decides the winner.
        model = UserModel(**user.model_dump())
        try:
            self.db.add(model)
            self.db.commit()
            self.db.refresh(model)
        except IntegrityError as exc:
            self.db.rollback()
            if _is_username_violation(exc):
                raise DuplicateUsernameError(user.username) from exc
            raise

        logger.info("Created user: %s", user.username)
        return model_to_user(model)

    @_db_operation
    def update_user(self, user_id: int, data: Dict[str, Any]) -> Optional[User]:
        model = self.db.get(UserModel, user_id)
        if not model:
            return None

        changes = pick_fields(data, USER_MUTABLE_FIELDS)
        new_username = changes.get("username")
        if new_username is not None:
            other = self._user_query_by_username(new_username).first()
            if other is not None and other.id != user_id:
                raise DuplicateUsernameError(new_username)

        for key, value in changes.items():
            setattr(model, key, value)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if _is_username_violation(exc):
                raise DuplicateUsernameError(new_username or model.username) from exc
            raise
        self.db.refresh(model)
        return model_to_user(model)

    @_db_operation
    def delete_user(self, user_id: int) -> bool:
        model = self.db.get(UserModel, user_id)
        if not model:
            return False
        # Clear references explicitly; not every engine enforces ON DELETE.
        self.db.query(RegistrationModel).filter(
            RegistrationModel.user_id == user_id
        ).update({RegistrationModel.user_id: None}, synchronize_session=False)
        self.db.query(WikiContentModel).filter(
            WikiContentModel.created_by == user_id
        ).update({WikiContentModel.created_by: None}, synchronize_session=False)
        self.db.query(AuthSessionModel).filter(
            AuthSessionModel.user_id == user_id
        ).delete(synchronize_session=False)
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted user id=%s", user_id)
        return True

    # --- Registrations ---

    @_db_operation
    def get_registration(self, registration_pk: int) -> Optional[Registration]:
        model = self.db.get(RegistrationModel, registration_pk)
        return model_to_registration(model) if model else None

    @_db_operation
    def get_registration_by_registration_id(self, registration_id: str) -> Optional[Registration]:
        model = (
            self.db.query(RegistrationModel)
            .filter(RegistrationModel.registration_id == registration_id)
            .first()
        )
        return model_to_registration(model) if model else None

    @_db_operation
    def get_registrations_by_user(self, user_id: int) -> List[Registration]:
        models = (
            self.db.query(RegistrationModel)
            .filter(RegistrationModel.user_id == user_id)
            .order_by(RegistrationModel.id)
            .all()
        )
        return [model_to_registration(m) for m in models]

    @_db_operation
    def get_all_registrations(self) -> List[Registration]:
        models = self.db.query(RegistrationModel).order_by(RegistrationModel.id).all()
        return [model_to_registration(m) for m in models]

    def _registration_id_taken(self, registration_id: str) -> bool:
        return (
            self.db.query(RegistrationModel.id)
            .filter(RegistrationModel.registration_id == registration_id)
            .first()
            is not None
        )

    @_db_operation
    def create_registration(self, registration: NewRegistration) -> Registration:
        for _ in range(REGISTRATION_ID_MAX_ATTEMPTS):
            registration_id = generate_registration_id()
            if self._registration_id_taken(registration_id):
                logger.warning("Registration id collision on %s, drawing again", registration_id)
                continue

            model = RegistrationModel(
                registration_id=registration_id,
                created_at=datetime.now(pytz.utc).isoformat(),
                **registration.model_dump(),
            )
            try:
                self.db.add(model)
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                if "registration_id" not in str(exc.orig).lower():
                    raise
                logger.warning("Registration id %s taken concurrently, drawing again", registration_id)
                continue
            self.db.refresh(model)
            logger.info("Created registration %s", registration_id)
            return model_to_registration(model)

        raise InfrastructureError("Could not allocate a unique registration id")

    @_db_operation
    def update_registration(self, registration_pk: int, data: Dict[str, Any]) -> Optional[Registration]:
        model = self.db.get(RegistrationModel, registration_pk)
        if not model:
            return None
        for key, value in pick_fields(data, REGISTRATION_MUTABLE_FIELDS).items():
            setattr(model, key, value)
        self.db.commit()
        self.db.refresh(model)
        return model_to_registration(model)

    @_db_operation
    def delete_registration(self, registration_pk: int) -> bool:
        model = self.db.get(RegistrationModel, registration_pk)
        if not model:
            return False
        registration_id = model.registration_id
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted registration %s", registration_id)
        return True

    # --- Wiki ---

    @_db_operation
    def get_wiki_content(self, content_id: int) -> Optional[WikiContent]:
        model = self.db.get(WikiContentModel, content_id)
        return model_to_wiki_content(model) if model else None

    @_db_operation
    def get_all_wiki_content(self) -> List[WikiContent]:
        models = self.db.query(WikiContentModel).order_by(WikiContentModel.id).all()
        return [model_to_wiki_content(m) for m in models]

    @_db_operation
    def get_wiki_content_by_category(self, category: str) -> List[WikiContent]:
        models = (
            self.db.query(WikiContentModel)
            .filter(func.lower(WikiContentModel.category) == category.lower())
            .order_by(WikiContentModel.id)
            .all()
        )
        return [model_to_wiki_content(m) for m in models]

    @_db_operation
    def get_all_wiki_categories(self) -> List[str]:
        rows = (
            self.db.query(WikiContentModel.category)
            .group_by(WikiContentModel.category)
            .order_by(func.min(WikiContentModel.id))
            .all()
        )
        return [row[0] for row in rows]

    @_db_operation
    def create_wiki_content(self, content: NewWikiContent) -> WikiContent:
        model = WikiContentModel(
            last_updated=datetime.now(pytz.utc).isoformat(),
            **content.model_dump(),
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        return model_to_wiki_content(model)

    @_db_operation
    def update_wiki_content(self, content_id: int, data: Dict[str, Any]) -> Optional[WikiContent]:
        model = self.db.get(WikiContentModel, content_id)
        if not model:
            return None
        for key, value in pick_fields(data, WIKI_MUTABLE_FIELDS).items():
            setattr(model, key, value)
        model.last_updated = datetime.now(pytz.utc).isoformat()
        self.db.commit()
        self.db.refresh(model)
        return model_to_wiki_content(model)

    @_db_operation
    def delete_wiki_content(self, content_id: int) -> bool:
        model = self.db.get(WikiContentModel, content_id)
        if not model:
            return False
        self.db.delete(model)
        self.db.commit()
        return True

    # --- Settings ---

    @_db_operation
    def get_setting(self, name: str) -> Optional[Setting]:
        model = self.db.query(SettingModel).filter(SettingModel.name == name).first()
        return model_to_setting(model) if model else None

    @_db_operation
    def get_settings_by_group(self, group: str) -> List[Setting]:
        models = (
            self.db.query(SettingModel)
            .filter(SettingModel.group == group)
            .order_by(SettingModel.id)
            .all()
        )
        return [model_to_setting(m) for m in models]

    @_db_operation
    def create_setting(self, setting: NewSetting) -> Setting:
        if self.db.query(SettingModel.id).filter(SettingModel.name == setting.name).first():
            raise DuplicateSettingError(setting.name)

        model = SettingModel(**setting.model_dump())
        try:
            self.db.add(model)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if "name" not in str(exc.orig).lower():
                raise
            raise DuplicateSettingError(setting.name) from exc
        self.db.refresh(model)
        return model_to_setting(model)

    @_db_operation
    def update_setting(self, name: str, value: str) -> Optional[Setting]:
        model = self.db.query(SettingModel).filter(SettingModel.name == name).first()
        if not model:
            return None
        model.value = value
        self.db.commit()
        self.db.refresh(model)
        return model_to_setting(model)

    @_db_operation
    def get_all_settings(self) -> List[Setting]:
        models = self.db.query(SettingModel).order_by(SettingModel.id).all()
        return [model_to_setting(m) for m in models]

    # --- Sessions ---

    @_db_operation
    def create_session(self, session: AuthSession) -> AuthSession:
        model = session_to_model(session)
        self.db.add(model)
        self.db.commit()
        return session

    @_db_operation
    def get_session(self, session_id: str) -> Optional[AuthSession]:
        model = self.db.get(AuthSessionModel, session_id)
        return model_to_session(model) if model else None

    @_db_operation
    def delete_session(self, session_id: str) -> bool:
        deleted = (
            self.db.query(AuthSessionModel)
            .filter(AuthSessionModel.session_id == session_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted > 0

    @_db_operation
    def delete_expired_sessions(self, now: Optional[datetime] = None) -> int:
        cutoff = format_expiry(now or datetime.now(pytz.utc))
        deleted = (
            self.db.query(AuthSessionModel)
            .filter(AuthSessionModel.expires_at <= cutoff)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted
