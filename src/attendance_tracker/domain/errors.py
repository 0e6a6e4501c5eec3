"""Error taxonomy for session and attendance operations."""

from http import HTTPStatus


class AttendanceError(Exception):
    """Base class for errors reported to callers by kind."""

    kind = "attendance_error"
    status_code = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, object]:
        return {"error": self.kind, "message": self.message}


class ValidationError(AttendanceError):
    """Session-creation input is invalid."""

    kind = "validation_error"
    status_code = HTTPStatus.UNPROCESSABLE_ENTITY

    def __init__(self, fields: dict[str, str]) -> None:
        names = ", ".join(sorted(fields))
        super().__init__(f"Invalid session fields: {names}")
        self.fields = fields

    def to_dict(self) -> dict[str, object]:
        return {**super().to_dict(), "fields": self.fields}


class MalformedPayload(AttendanceError):
    """Scanned text is not a session QR payload."""

    kind = "malformed_payload"
    status_code = HTTPStatus.BAD_REQUEST


class UnknownSession(AttendanceError):
    """Scanned payload references a session that does not exist."""

    kind = "unknown_session"
    status_code = HTTPStatus.NOT_FOUND


class ExpiredCode(AttendanceError):
    """Scanned QR code is no longer accepted."""

    kind = "expired_code"
    status_code = HTTPStatus.GONE


class StorageError(AttendanceError):
    """A store operation failed."""

    kind = "storage_error"
    status_code = HTTPStatus.SERVICE_UNAVAILABLE
