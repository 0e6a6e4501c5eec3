"""Best-effort fan-out of active-session changes.

Publishing is a latency optimization for other open clients. Subscribers
are independent: a failing subscriber is logged and skipped, and nothing
raised by a subscriber reaches the publisher. Clients still poll the
active session as a fallback.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol
from uuid import UUID

from attendance_tracker.domain.sessions import ClassSession
from attendance_tracker.services.cache import ACTIVE_SESSION_KEY, Cache

SESSION_CREATED = "session_created"
ACTIVE_SESSION_CHANGED = "active_session_changed"

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionEvent:
    """Signal that the active session changed."""

    kind: str
    session: ClassSession | None
    occurred_at: datetime

    @property
    def session_id(self) -> UUID | None:
        return self.session.id if self.session else None

    def to_dict(self) -> dict[str, object]:
        return {
            "event": self.kind,
            "session_id": str(self.session_id) if self.session_id else None,
            "timestamp": self.occurred_at.isoformat(),
        }


Subscriber = Callable[[SessionEvent], Awaitable[None] | None]


@dataclass
class _Subscription:
    name: str
    callback: Subscriber
    kinds: frozenset[str] | None


@dataclass
class NotificationHub:
    """Single publish port with any number of registered subscribers."""

    _subscriptions: list[_Subscription] = field(default_factory=list)

    def subscribe(
        self,
        callback: Subscriber,
        *,
        name: str | None = None,
        kinds: set[str] | None = None,
    ) -> Callable[[], None]:
        """Register a subscriber and return a function that removes it."""
        subscription = _Subscription(
            name=name or getattr(callback, "__qualname__", repr(callback)),
            callback=callback,
            kinds=frozenset(kinds) if kinds else None,
        )
        self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        return unsubscribe

    async def publish(self, event: SessionEvent) -> int:
        """Deliver an event to every interested subscriber.

        Returns the number of subscribers that handled it without error.
        """
        delivered = 0
        for subscription in list(self._subscriptions):
            if subscription.kinds and event.kind not in subscription.kinds:
                continue
            try:
                result = subscription.callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                _logger.exception(
                    "Notification subscriber %s failed for %s session_id=%s",
                    subscription.name,
                    event.kind,
                    event.session_id,
                )
                continue
            delivered += 1
        return delivered


@dataclass
class CacheRefresher:
    """Writes the announced session straight into the local cache."""

    cache: Cache
    ttl_seconds: int = 5

    def __call__(self, event: SessionEvent) -> None:
        if event.session is None or not event.session.is_active:
            self.cache.delete(ACTIVE_SESSION_KEY)
            return
        self.cache.set(ACTIVE_SESSION_KEY, event.session, self.ttl_seconds)


class NotifiedMarker(Protocol):
    """Store operation that bumps a session row for change subscriptions."""

    def mark_notified(self, session_id: UUID) -> None:
        """Record that a change notification went out for the session."""


@dataclass
class StoreTouch:
    """Touches the session row so external change feeds fire."""

    repository: NotifiedMarker

    def __call__(self, event: SessionEvent) -> None:
        if event.session_id is not None:
            self.repository.mark_notified(event.session_id)
