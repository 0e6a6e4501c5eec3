"""QR payload model."""

from datetime import UTC, datetime, timedelta

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

DEFAULT_EXPIRY_MINUTES = 10
MAX_EXPIRY_MINUTES = 24 * 60


class QrPayload(BaseModel):
    """Contents of a session QR code."""

    model_config = ConfigDict(
        populate_by_name=True, frozen=True, coerce_numbers_to_str=True
    )

    session_id: str = Field(alias="sessionId", min_length=1)
    name: str | None = None
    date: str | None = None
    time: str | None = None
    duration: int | None = None
    generated_at: datetime | None = Field(default=None, alias="generatedAt")
    expires_after_minutes: int = Field(
        default=DEFAULT_EXPIRY_MINUTES,
        ge=0,
        le=MAX_EXPIRY_MINUTES,
        alias="expiresAfterMinutes",
        validation_alias=AliasChoices(
            "expiresAfterMinutes", "expiresAfter", "expires_after_minutes"
        ),
    )

    @field_validator("generated_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @model_validator(mode="after")
    def _expiry_in_range(self) -> "QrPayload":
        if self.generated_at is not None:
            try:
                self.generated_at + timedelta(minutes=self.expires_after_minutes)
            except OverflowError as exc:
                raise ValueError("generatedAt is out of range") from exc
        return self

    @property
    def expires_at(self) -> datetime | None:
        if self.generated_at is None:
            return None
        return self.generated_at + timedelta(minutes=self.expires_after_minutes)

    def is_expired(self, now: datetime) -> bool:
        """Return True when the payload's own validity window has passed."""
        expires_at = self.expires_at
        return expires_at is not None and now > expires_at
