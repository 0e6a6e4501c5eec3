"""Session lifecycle: creation, the single active session, and expiry."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID, uuid4

from pydantic import ValidationError as PydanticValidationError

from attendance_tracker.domain.errors import UnknownSession, ValidationError
from attendance_tracker.domain.qr import DEFAULT_EXPIRY_MINUTES
from attendance_tracker.domain.sessions import ClassSession, SessionDraft
from attendance_tracker.services.cache import ACTIVE_SESSION_KEY, Cache
from attendance_tracker.services.notifications import (
    ACTIVE_SESSION_CHANGED,
    SESSION_CREATED,
    NotificationHub,
    SessionEvent,
)
from attendance_tracker.services.qr_codec import encode_payload

_logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


class SessionRepository(Protocol):
    """Persistence interface for class sessions."""

    def replace_active(self, session: ClassSession) -> ClassSession:
        """Deactivate every active session and insert this one, atomically."""

    def deactivate_all(self) -> int:
        """Mark all active sessions inactive and return how many changed."""

    def get_active(self) -> ClassSession | None:
        """Return the session flagged active, if any."""

    def get(self, session_id: UUID) -> ClassSession | None:
        """Return a session by id, if present."""

    def list_sessions(self) -> list[ClassSession]:
        """Return all sessions, newest first."""

    def mark_notified(self, session_id: UUID) -> None:
        """Touch the session row after a change notification."""


class QrImageRenderer(Protocol):
    """Turns QR text into a downloadable image."""

    def render_png(self, text: str) -> bytes:
        """Return PNG bytes for the given QR contents."""


@dataclass
class SessionService:
    """Creates sessions and answers which one is currently accepting scans."""

    repository: SessionRepository
    notifications: NotificationHub
    cache: Cache
    qr_renderer: QrImageRenderer
    expiry_minutes: int = DEFAULT_EXPIRY_MINUTES
    cache_ttl_seconds: int = 5
    clock: Callable[[], datetime] = field(default=utcnow)

    async def create_session(
        self, name: str, date: str, time: str, duration_minutes: int
    ) -> ClassSession:
        """Create a new active session, replacing whichever was active."""
        draft = validate_draft(name, date, time, duration_minutes)
        now = self.clock()
        session = ClassSession(
            id=uuid4(),
            name=draft.name,
            date=draft.date,
            time=draft.time,
            duration_minutes=draft.duration_minutes,
            qr_payload=None,
            expires_at=now + timedelta(minutes=self.expiry_minutes),
            is_active=True,
            created_at=now,
        )
        qr_text = encode_payload(
            session, generated_at=now, expires_after_minutes=self.expiry_minutes
        )
        created = self.repository.replace_active(replace(session, qr_payload=qr_text))
        _logger.info(
            "Session created: id=%s name=%s expires_at=%s",
            created.id,
            created.name,
            created.expires_at.isoformat(),
        )
        await self.notifications.publish(
            SessionEvent(kind=SESSION_CREATED, session=created, occurred_at=now)
        )
        return created

    def get_active_session(self, *, fresh: bool = False) -> ClassSession | None:
        """Return the active, unexpired session.

        A session still flagged active after its expiry reads as no session.
        """
        now = self.clock()
        if not fresh:
            cached = self.cache.get(ACTIVE_SESSION_KEY)
            if isinstance(cached, ClassSession) and cached.is_open(now):
                return cached
        session = self.repository.get_active()
        if session is None or not session.is_open(now):
            return None
        self.cache.set(ACTIVE_SESSION_KEY, session, ttl_seconds=self.cache_ttl_seconds)
        return session

    def get_session(self, session_id: UUID) -> ClassSession | None:
        """Return a session by id."""
        return self.repository.get(session_id)

    def list_sessions(self) -> list[ClassSession]:
        """Return all sessions, newest first."""
        return self.repository.list_sessions()

    async def close_active_session(self) -> int:
        """Deactivate the active session without creating a new one."""
        changed = self.repository.deactivate_all()
        self.cache.delete(ACTIVE_SESSION_KEY)
        _logger.info("Active sessions closed: count=%s", changed)
        if changed:
            await self.notifications.publish(
                SessionEvent(
                    kind=ACTIVE_SESSION_CHANGED, session=None, occurred_at=self.clock()
                )
            )
        return changed

    def qr_image(self, session_id: UUID) -> bytes:
        """Return a PNG of the QR code issued for a session."""
        session = self.repository.get(session_id)
        if session is None:
            raise UnknownSession(f"Session {session_id} not found")
        text = session.qr_payload or encode_payload(
            session,
            generated_at=session.created_at,
            expires_after_minutes=self.expiry_minutes,
        )
        return self.qr_renderer.render_png(text)


def validate_draft(
    name: str, date: str, time: str, duration_minutes: int
) -> SessionDraft:
    """Validate session input, naming every offending field."""
    try:
        return SessionDraft(
            name=name, date=date, time=time, duration_minutes=duration_minutes
        )
    except PydanticValidationError as exc:
        fields: dict[str, str] = {}
        for error in exc.errors():
            location = error.get("loc") or ("session",)
            fields.setdefault(str(location[0]), error["msg"])
        raise ValidationError(fields) from exc
