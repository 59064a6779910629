"""Conversions between ORM models and pydantic records."""

from models.auth_session import AuthSessionModel
from models.registration import RegistrationModel
from models.setting import SettingModel
from models.user import UserModel
from models.wiki_content import WikiContentModel
from schemas.registration import Registration
from schemas.session import AuthSession
from schemas.setting import Setting
from schemas.user import User
from schemas.wiki import WikiContent


def model_to_user(model: UserModel) -> User:
    return User.model_validate(model)


def model_to_registration(model: RegistrationModel) -> Registration:
    return Registration.model_validate(model)


def model_to_wiki_content(model: WikiContentModel) -> WikiContent:
    return WikiContent.model_validate(model)


def model_to_setting(model: SettingModel) -> Setting:
    return Setting.model_validate(model)


def model_to_session(model: AuthSessionModel) -> AuthSession:
    return AuthSession(
        session_id=model.session_id,
        user_id=model.user_id,
        created_at=model.created_at,
        expires_at=model.expires_at,
    )


def session_to_model(session: AuthSession) -> AuthSessionModel:
    return AuthSessionModel(**session.model_dump())
