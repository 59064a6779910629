"""Event registration schema definitions."""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictBool, field_validator

from config import DEFAULT_REGISTRATION_STATUS

ParticipantType = Literal["student", "teacher", "parent", "other"]
RegistrationStatus = Literal["pending", "confirmed", "cancelled"]


class Registration(BaseModel):
    """A stored registration."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None
    participant_type: str
    grade: Optional[str] = None
    activities: List[str] = Field(default_factory=list)
    special_requests: Optional[str] = None
    status: str
    registration_id: str
    created_at: str


class NewRegistration(BaseModel):
    """Insert payload for ``Storage.create_registration``.

    The registration id and creation time are assigned by the storage layer.
    """

    user_id: Optional[int] = None
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = ""
    participant_type: ParticipantType
    grade: Optional[str] = ""
    activities: List[str] = Field(default_factory=list)
    special_requests: Optional[str] = ""
    status: RegistrationStatus = DEFAULT_REGISTRATION_STATUS


class RegistrationForm(BaseModel):
    """Public carnival sign-up form."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    phone_number: Optional[str] = None
    participant_type: ParticipantType
    grade: Optional[str] = None
    activities: Optional[Union[List[str], str]] = None
    special_requests: Optional[str] = None
    accept_terms: StrictBool

    @field_validator("accept_terms")
    @classmethod
    def terms_must_be_accepted(cls, value: bool) -> bool:
        if value is not True:
            raise ValueError("You must accept the terms and conditions")
        return value

    def activity_list(self) -> List[str]:
        """Normalize ``activities`` to a list, wrapping a lone string."""
        if self.activities is None:
            return []
        if isinstance(self.activities, str):
            return [self.activities]
        return list(self.activities)

    def to_new_registration(self, user_id: Optional[int]) -> NewRegistration:
        return NewRegistration(
            user_id=user_id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            phone_number=self.phone_number or "",
            participant_type=self.participant_type,
            grade=self.grade or "",
            activities=self.activity_list(),
            special_requests=self.special_requests or "",
            status=DEFAULT_REGISTRATION_STATUS,
        )


class RegistrationUpdate(BaseModel):
    """Partial update. ``status`` and ``user_id`` may only be changed by admins."""

    user_id: Optional[int] = None
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None
    participant_type: Optional[ParticipantType] = None
    grade: Optional[str] = None
    activities: Optional[List[str]] = None
    special_requests: Optional[str] = None
    status: Optional[RegistrationStatus] = None
