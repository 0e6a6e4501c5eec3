"""Polling backstop for active-session changes made elsewhere."""

import asyncio
import logging
from dataclasses import dataclass, field
from uuid import UUID

from attendance_tracker.services.notifications import (
    ACTIVE_SESSION_CHANGED,
    NotificationHub,
    SessionEvent,
)
from attendance_tracker.services.sessions import SessionService

_logger = logging.getLogger(__name__)


@dataclass
class SessionWatcher:
    """Re-reads the active session on an interval and announces changes."""

    session_service: SessionService
    notifications: NotificationHub
    interval_seconds: float = 5.0
    _last_seen: UUID | None = field(default=None, init=False)
    _primed: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.notifications.subscribe(self.observe, name="session-watcher")

    def observe(self, event: SessionEvent) -> None:
        """Track announcements so local changes are not re-announced."""
        self._last_seen = event.session_id
        self._primed = True

    async def poll_once(self) -> bool:
        """Poll the store once; return True if a change was announced."""
        session = self.session_service.get_active_session(fresh=True)
        current = session.id if session else None
        if not self._primed:
            self._last_seen = current
            self._primed = True
            return False
        if current == self._last_seen:
            return False
        _logger.info("Active session changed: %s -> %s", self._last_seen, current)
        await self.notifications.publish(
            SessionEvent(
                kind=ACTIVE_SESSION_CHANGED,
                session=session,
                occurred_at=self.session_service.clock(),
            )
        )
        return True

    async def run(self, stop: asyncio.Event) -> None:
        """Poll until ``stop`` is set."""
        while not stop.is_set():
            try:
                await self.poll_once()
            except Exception:
                _logger.exception("Active session poll failed")
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.interval_seconds)
            except TimeoutError:
                continue
