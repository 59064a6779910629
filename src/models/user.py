"""User database model.

This module defines the User database model using SQLAlchemy.
"""

from sqlalchemy import Column, Index, Integer, String, func

from .base import Base


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False)
    password = Column(String, nullable=False)  # scrypt "hash.salt" or legacy bcrypt
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone_number = Column(String, nullable=True)
    role = Column(String, nullable=False, default="user")  # 'admin' or 'user'
    created_at = Column(String, nullable=False)  # ISO format string

    __table_args__ = (
        Index("uq_users_username_lower", func.lower(username), unique=True),
        {"sqlite_autoincrement": True},
    )
