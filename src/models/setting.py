"""Site setting database model."""

from sqlalchemy import Column, Integer, String

from .base import Base


class SettingModel(Base):
    """Named site setting, grouped for the admin settings tabs."""

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    value = Column(String, nullable=False)
    group = Column(String, nullable=False)  # general, email, appearance

    __table_args__ = {"sqlite_autoincrement": True}
