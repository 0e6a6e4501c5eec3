"""Attendance recording from scanned QR codes."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol
from uuid import UUID

from attendance_tracker.domain.attendance import (
    AttendanceRecord,
    AttendanceStatus,
    CheckInResult,
)
from attendance_tracker.domain.errors import (
    ExpiredCode,
    StorageError,
    UnknownSession,
)
from attendance_tracker.services.qr_codec import decode_payload
from attendance_tracker.services.sessions import SessionRepository, utcnow

_logger = logging.getLogger(__name__)


class AttendanceRepository(Protocol):
    """Persistence interface for check-in records.

    The store holds a uniqueness constraint on (session_id, user_id).
    """

    def insert(
        self,
        session_id: UUID,
        user_id: str,
        check_in_time: datetime,
        status: AttendanceStatus,
    ) -> AttendanceRecord | None:
        """Insert a record; return None if one already exists for the pair."""

    def find(self, session_id: UUID, user_id: str) -> AttendanceRecord | None:
        """Return the record for a session and user, if present."""

    def update_status(
        self, record_id: UUID, status: AttendanceStatus
    ) -> AttendanceRecord:
        """Change a record's status and return the updated record."""

    def list_by_session(self, session_id: UUID) -> list[AttendanceRecord]:
        """Return records for a session."""

    def list_by_user(self, user_id: str) -> list[AttendanceRecord]:
        """Return records for a user, newest first."""


@dataclass
class AttendanceService:
    """Validates scans against the session store and writes check-ins."""

    repository: AttendanceRepository
    session_repository: SessionRepository
    clock: Callable[[], datetime] = field(default=utcnow)

    def record_attendance(self, raw_scan_text: str, user_id: str) -> CheckInResult:
        """Record a check-in for a scanned QR code.

        Repeat scans by the same user return the stored record with
        ``newly_recorded`` set to False.
        """
        payload = decode_payload(raw_scan_text)
        try:
            session_id = UUID(payload.session_id)
        except ValueError as exc:
            raise UnknownSession(f"Session {payload.session_id} not found") from exc
        session = self.session_repository.get(session_id)
        if session is None:
            raise UnknownSession(f"Session {payload.session_id} not found")

        now = self.clock()
        if session.is_expired(now) or payload.is_expired(now):
            raise ExpiredCode("This QR code has expired. Please ask for a new code.")
        if not session.is_active:
            raise ExpiredCode("This session has been replaced by a newer QR code.")

        existing = self.repository.find(session.id, user_id)
        if existing is not None:
            return CheckInResult(record=existing, newly_recorded=False)

        created = self.repository.insert(
            session_id=session.id,
            user_id=user_id,
            check_in_time=now,
            status=AttendanceStatus.PRESENT,
        )
        if created is None:
            # Lost a race with a concurrent scan for the same pair.
            winner = self.repository.find(session.id, user_id)
            if winner is None:
                raise StorageError("Check-in conflicted but no record was found")
            return CheckInResult(record=winner, newly_recorded=False)

        _logger.info("Check-in recorded: session_id=%s user_id=%s", session.id, user_id)
        return CheckInResult(record=created, newly_recorded=True)

    def set_attendance(
        self, session_id: UUID, user_id: str, present: bool
    ) -> AttendanceRecord | None:
        """Explicitly mark a student present or absent for a session."""
        if self.session_repository.get(session_id) is None:
            raise UnknownSession(f"Session {session_id} not found")
        target = AttendanceStatus.PRESENT if present else AttendanceStatus.ABSENT
        existing = self.repository.find(session_id, user_id)
        if existing is None:
            if not present:
                return None
            created = self.repository.insert(
                session_id=session_id,
                user_id=user_id,
                check_in_time=self.clock(),
                status=target,
            )
            if created is not None:
                return created
            existing = self.repository.find(session_id, user_id)
            if existing is None:
                raise StorageError("Check-in conflicted but no record was found")
        if existing.status is target:
            return existing
        _logger.info(
            "Attendance toggled: session_id=%s user_id=%s status=%s",
            session_id,
            user_id,
            target.value,
        )
        return self.repository.update_status(existing.id, target)

    def list_for_session(self, session_id: UUID) -> list[AttendanceRecord]:
        """Return all records for a session."""
        return self.repository.list_by_session(session_id)

    def list_for_user(self, user_id: str) -> list[AttendanceRecord]:
        """Return all records for a user."""
        return self.repository.list_by_user(user_id)
