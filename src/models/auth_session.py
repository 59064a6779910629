"""Server-side login session model."""

from sqlalchemy import Column, ForeignKey, Integer, String

from .base import Base


class AuthSessionModel(Base):
    __tablename__ = "auth_sessions"

    session_id = Column(String, primary_key=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(String, nullable=False)
    expires_at = Column(String, nullable=False, index=True)
