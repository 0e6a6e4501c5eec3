"""Domain models for class sessions."""

from dataclasses import dataclass
from datetime import date, datetime, time
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass(frozen=True)
class ClassSession:
    """Represents a persisted attendance-taking session."""

    id: UUID
    name: str
    date: str
    time: str
    duration_minutes: int
    qr_payload: str | None
    expires_at: datetime
    is_active: bool
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """Return True once the session's QR code no longer accepts scans."""
        return now > self.expires_at

    def is_open(self, now: datetime) -> bool:
        """Return True while the session still reads as the active one."""
        return now < self.expires_at

    def starts_at(self) -> datetime | None:
        """Return the naive meeting start, if date and time parse."""
        try:
            return datetime.combine(
                date.fromisoformat(self.date), time.fromisoformat(self.time)
            )
        except ValueError:
            return None


class SessionDraft(BaseModel):
    """Validated input for a new session."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    date: str = Field(min_length=1, pattern=r"^\d{4}-\d{2}-\d{2}$")
    time: str = Field(min_length=1, pattern=r"^\d{2}:\d{2}$")
    duration_minutes: int = Field(ge=1)

    @field_validator("date")
    @classmethod
    def _real_date(cls, value: str) -> str:
        date.fromisoformat(value)
        return value

    @field_validator("time")
    @classmethod
    def _real_time(cls, value: str) -> str:
        time.fromisoformat(value)
        return value
