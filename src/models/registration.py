"""Event registration database model."""

from sqlalchemy import JSON, Column, ForeignKey, Integer, String

from config import DEFAULT_REGISTRATION_STATUS
from .base import Base


class RegistrationModel(Base):
    """A single carnival sign-up, optionally owned by an account."""

    __tablename__ = "registrations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone_number = Column(String, nullable=True)
    participant_type = Column(String, nullable=False)  # student, teacher, parent, other
    grade = Column(String, nullable=True)
    activities = Column(JSON, nullable=False, default=list)
    special_requests = Column(String, nullable=True)
    status = Column(String, nullable=False, default=DEFAULT_REGISTRATION_STATUS)
    # Human facing id, e.g. "SC2025-48213"
    registration_id = Column(String, unique=True, nullable=False, index=True)
    created_at = Column(String, nullable=False)

    __table_args__ = {"sqlite_autoincrement": True}
