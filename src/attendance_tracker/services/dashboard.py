"""Read-side dashboard views for students and admins."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from attendance_tracker.domain.attendance import AttendanceRecord
from attendance_tracker.domain.sessions import ClassSession
from attendance_tracker.domain.students import RosterEntry, Student
from attendance_tracker.services.attendance import AttendanceRepository
from attendance_tracker.services.sessions import SessionRepository, utcnow


class StudentRepository(Protocol):
    """Directory of known students."""

    def list_students(self) -> list[Student]:
        """Return every student."""


@dataclass(frozen=True)
class SessionSummary:
    """Attendance totals for one session."""

    session: ClassSession
    present_count: int
    student_count: int
    rate: int


@dataclass(frozen=True)
class StudentDashboard:
    """What a student sees on their home page."""

    active_session: ClassSession | None
    is_checked_in: bool
    total_sessions: int
    present_sessions: int
    attendance_rate: int
    upcoming: list[ClassSession]


@dataclass(frozen=True)
class AdminDashboard:
    """Live roster for the active session plus per-session totals."""

    active_session: ClassSession | None
    roster: list[RosterEntry]
    sessions: list[SessionSummary]


def attendance_rate(records: Iterable[AttendanceRecord]) -> int:
    """Percentage of records marked present, rounded; 0 when empty."""
    rows = list(records)
    if not rows:
        return 0
    present = sum(1 for record in rows if record.is_present)
    return round(100 * present / len(rows))


def build_roster(
    students: Iterable[Student], records: Iterable[AttendanceRecord]
) -> list[RosterEntry]:
    """Derive present/absent for every student from a session's records."""
    by_user = {record.user_id: record for record in records}
    roster = []
    for student in students:
        record = by_user.get(student.id)
        present = record is not None and record.is_present
        roster.append(
            RosterEntry(
                student=student,
                is_present=present,
                check_in_time=record.check_in_time if present else None,
            )
        )
    return roster


def summarize_sessions(
    sessions: Iterable[ClassSession],
    records_by_session: dict[UUID, list[AttendanceRecord]],
    student_count: int,
) -> list[SessionSummary]:
    summaries = []
    for session in sessions:
        records = records_by_session.get(session.id, [])
        present = sum(1 for record in records if record.is_present)
        rate = round(100 * present / student_count) if student_count else 0
        summaries.append(
            SessionSummary(
                session=session,
                present_count=present,
                student_count=student_count,
                rate=rate,
            )
        )
    return summaries


def upcoming_sessions(
    sessions: Iterable[ClassSession],
    now: datetime,
    limit: int = 3,
    timezone_name: str = "UTC",
) -> list[ClassSession]:
    """Sessions that have not started yet, soonest first.

    Session dates and times are wall-clock values in ``timezone_name``.
    """
    local_now = now.astimezone(ZoneInfo(timezone_name)).replace(tzinfo=None)
    dated = [
        (start, session)
        for session in sessions
        if (start := session.starts_at()) is not None and start >= local_now
    ]
    dated.sort(key=lambda pair: pair[0])
    return [session for _, session in dated[:limit]]


@dataclass
class DashboardService:
    """Fetches store state and hands it to the pure view builders."""

    session_repository: SessionRepository
    attendance_repository: AttendanceRepository
    student_repository: StudentRepository
    active_session: Callable[[], ClassSession | None]
    clock: Callable[[], datetime] = field(default=utcnow)
    timezone_name: str = "UTC"

    def student_dashboard(self, user_id: str) -> StudentDashboard:
        records = self.attendance_repository.list_by_user(user_id)
        active = self.active_session()
        return StudentDashboard(
            active_session=active,
            is_checked_in=active is not None
            and any(
                record.session_id == active.id and record.is_present
                for record in records
            ),
            total_sessions=len(records),
            present_sessions=sum(1 for record in records if record.is_present),
            attendance_rate=attendance_rate(records),
            upcoming=upcoming_sessions(
                self.session_repository.list_sessions(),
                self.clock(),
                timezone_name=self.timezone_name,
            ),
        )

    def session_roster(self, session_id: UUID) -> list[RosterEntry]:
        """Return every student's derived presence for a session."""
        return build_roster(
            self.student_repository.list_students(),
            self.attendance_repository.list_by_session(session_id),
        )

    def admin_dashboard(self) -> AdminDashboard:
        students = self.student_repository.list_students()
        sessions = self.session_repository.list_sessions()
        records_by_session = {
            session.id: self.attendance_repository.list_by_session(session.id)
            for session in sessions
        }
        active = self.active_session()
        roster = (
            build_roster(students, records_by_session.get(active.id, []))
            if active
            else []
        )
        return AdminDashboard(
            active_session=active,
            roster=roster,
            sessions=summarize_sessions(sessions, records_by_session, len(students)),
        )
