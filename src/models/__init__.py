"""SQLAlchemy models. Importing this package registers every table."""

from .auth_session import AuthSessionModel
from .registration import RegistrationModel
from .setting import SettingModel
from .user import UserModel
from .wiki_content import WikiContentModel

__all__ = [
    "AuthSessionModel",
    "RegistrationModel",
    "SettingModel",
    "UserModel",
    "WikiContentModel",
]
