"""Login session schema definitions.

A session is the server-side half of an authenticated browser: the cookie
only carries a signed reference to ``session_id``.
"""

from datetime import datetime, timedelta
from typing import Optional

import pytz
from pydantic import BaseModel, Field


def format_expiry(moment: datetime) -> str:
    """Fixed-width UTC timestamp, so stored expiries compare correctly as text."""
    return moment.astimezone(pytz.utc).isoformat(timespec="microseconds")


class AuthSession(BaseModel):
    session_id: str = Field(
        description="Opaque random identifier, also the primary key.",
        frozen=True,
    )
    user_id: int = Field(description="The id of the authenticated account.")
    created_at: str = Field(
        description="The time when the session was created.",
        default_factory=lambda: datetime.now(pytz.utc).isoformat(),
    )
    expires_at: str = Field(
        description="Absolute expiry. Sessions are never renewed.",
    )

    @classmethod
    def start(cls, session_id: str, user_id: int, max_age_seconds: int) -> "AuthSession":
        now = datetime.now(pytz.utc)
        return cls(
            session_id=session_id,
            user_id=user_id,
            created_at=now.isoformat(),
            expires_at=format_expiry(now + timedelta(seconds=max_age_seconds)),
        )

    def expires_at_dt(self) -> datetime:
        return datetime.fromisoformat(self.expires_at.replace("Z", "+00:00"))

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(pytz.utc)
        return now >= self.expires_at_dt()
