"""JSON shapes returned to the display layer."""

from attendance_tracker.domain.attendance import AttendanceRecord, CheckInResult
from attendance_tracker.domain.sessions import ClassSession
from attendance_tracker.domain.students import RosterEntry
from attendance_tracker.services.dashboard import (
    AdminDashboard,
    SessionSummary,
    StudentDashboard,
)


def serialize_session(
    session: ClassSession, include_qr: bool = False
) -> dict[str, object]:
    data: dict[str, object] = {
        "id": str(session.id),
        "name": session.name,
        "date": session.date,
        "time": session.time,
        "duration": session.duration_minutes,
        "expiresAt": session.expires_at.isoformat(),
        "isActive": session.is_active,
        "createdAt": session.created_at.isoformat(),
    }
    if include_qr:
        data["qrCode"] = session.qr_payload
    return data


def serialize_record(record: AttendanceRecord) -> dict[str, object]:
    return {
        "id": str(record.id),
        "sessionId": str(record.session_id),
        "userId": record.user_id,
        "checkInTime": record.check_in_time.isoformat(),
        "status": record.status.value,
    }


def serialize_check_in(result: CheckInResult) -> dict[str, object]:
    return {
        "status": "recorded" if result.newly_recorded else "already_recorded",
        "newlyRecorded": result.newly_recorded,
        "record": serialize_record(result.record),
    }


def serialize_roster_entry(entry: RosterEntry) -> dict[str, object]:
    return {
        "id": entry.student.id,
        "name": entry.student.name,
        "username": entry.student.username,
        "isPresent": entry.is_present,
        "checkInTime": entry.check_in_time.isoformat()
        if entry.check_in_time
        else None,
    }


def _serialize_summary(summary: SessionSummary) -> dict[str, object]:
    return {
        "session": serialize_session(summary.session),
        "presentCount": summary.present_count,
        "studentCount": summary.student_count,
        "rate": summary.rate,
    }


def serialize_student_dashboard(dashboard: StudentDashboard) -> dict[str, object]:
    active = dashboard.active_session
    return {
        "activeSession": serialize_session(active) if active else None,
        "isCheckedIn": dashboard.is_checked_in,
        "totalSessions": dashboard.total_sessions,
        "presentSessions": dashboard.present_sessions,
        "attendanceRate": dashboard.attendance_rate,
        "upcomingSessions": [serialize_session(s) for s in dashboard.upcoming],
    }


def serialize_admin_dashboard(dashboard: AdminDashboard) -> dict[str, object]:
    active = dashboard.active_session
    return {
        "activeSession": serialize_session(active) if active else None,
        "roster": [serialize_roster_entry(entry) for entry in dashboard.roster],
        "sessions": [_serialize_summary(summary) for summary in dashboard.sessions],
    }
