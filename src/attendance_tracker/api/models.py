"""Pydantic models for API requests."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SessionCreateRequest(BaseModel):
    """Admin request to open a new session.

    Fields are loosely typed so the session service reports every invalid
    field in one response.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    date: str = ""
    time: str = ""
    duration_minutes: int | str = Field(default=0, alias="duration")


class ScanRequest(BaseModel):
    """Decoded text from a student's QR scan."""

    text: str


class AttendanceToggleRequest(BaseModel):
    """Admin override of a student's presence."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: UUID = Field(alias="sessionId")
    is_present: bool = Field(alias="isPresent")
