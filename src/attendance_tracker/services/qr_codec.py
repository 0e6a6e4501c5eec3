"""Encoding and decoding of session QR payloads.

The codec is pure: it never reads a clock or a store. Expiry and existence
checks belong to the attendance service.
"""

from datetime import datetime

from pydantic import ValidationError as PydanticValidationError

from attendance_tracker.domain.errors import MalformedPayload
from attendance_tracker.domain.qr import DEFAULT_EXPIRY_MINUTES, QrPayload
from attendance_tracker.domain.sessions import ClassSession


def build_payload(
    session: ClassSession,
    generated_at: datetime,
    expires_after_minutes: int = DEFAULT_EXPIRY_MINUTES,
) -> QrPayload:
    """Return the QR payload describing a session."""
    return QrPayload(
        session_id=str(session.id),
        name=session.name,
        date=session.date,
        time=session.time,
        duration=session.duration_minutes,
        generated_at=generated_at,
        expires_after_minutes=expires_after_minutes,
    )


def encode_payload(
    session: ClassSession,
    generated_at: datetime,
    expires_after_minutes: int = DEFAULT_EXPIRY_MINUTES,
) -> str:
    """Serialize a session to compact JSON text for a QR code."""
    payload = build_payload(session, generated_at, expires_after_minutes)
    return payload.model_dump_json(by_alias=True)


def decode_payload(text: str) -> QrPayload:
    """Parse scanned QR text into a payload."""
    if not text or not text.strip():
        raise MalformedPayload("Invalid QR code format - empty scan")
    try:
        return QrPayload.model_validate_json(text)
    except PydanticValidationError as exc:
        raise MalformedPayload(
            "Invalid QR code format - could not parse QR data"
        ) from exc
