"""Supabase-backed attendance repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from attendance_tracker.adapters.supabase_support import (
    execute,
    is_unique_violation,
    parse_timestamp,
)
from attendance_tracker.domain.attendance import AttendanceRecord, AttendanceStatus
from attendance_tracker.domain.errors import StorageError
from attendance_tracker.services.attendance import AttendanceRepository

_COLUMNS = "id, session_id, user_id, check_in_time, status"


@dataclass
class SupabaseAttendanceRepository(AttendanceRepository):
    """Supabase implementation for check-in records."""

    client: Client

    def insert(
        self,
        session_id: UUID,
        user_id: str,
        check_in_time: datetime,
        status: AttendanceStatus,
    ) -> AttendanceRecord | None:
        """Insert a record; None when the (session, user) pair already exists."""
        try:
            response = execute(
                self.client.table("attendance").insert(
                    {
                        "session_id": str(session_id),
                        "user_id": user_id,
                        "check_in_time": check_in_time.isoformat(),
                        "status": status.value,
                    }
                ),
                "record attendance",
            )
        except StorageError as exc:
            if is_unique_violation(exc):
                return None
            raise
        if not response.data:
            raise StorageError("Failed to record attendance")
        return _parse_row(response.data[0])

    def find(self, session_id: UUID, user_id: str) -> AttendanceRecord | None:
        """Return the record for a session and user, if present."""
        response = execute(
            self.client.table("attendance")
            .select(_COLUMNS)
            .eq("session_id", str(session_id))
            .eq("user_id", user_id)
            .limit(1),
            "load attendance",
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def update_status(
        self, record_id: UUID, status: AttendanceStatus
    ) -> AttendanceRecord:
        """Change a record's status."""
        response = execute(
            self.client.table("attendance")
            .update({"status": status.value})
            .eq("id", str(record_id)),
            "update attendance",
        )
        if not response.data:
            raise StorageError(f"Attendance record {record_id} not found")
        return _parse_row(response.data[0])

    def list_by_session(self, session_id: UUID) -> list[AttendanceRecord]:
        """Return records for a session in check-in order."""
        response = execute(
            self.client.table("attendance")
            .select(_COLUMNS)
            .eq("session_id", str(session_id))
            .order("check_in_time", desc=False),
            "list session attendance",
        )
        return [_parse_row(row) for row in response.data or []]

    def list_by_user(self, user_id: str) -> list[AttendanceRecord]:
        """Return a user's records, newest first."""
        response = execute(
            self.client.table("attendance")
            .select(_COLUMNS)
            .eq("user_id", user_id)
            .order("check_in_time", desc=True),
            "list user attendance",
        )
        return [_parse_row(row) for row in response.data or []]


def _parse_row(row: dict[str, object]) -> AttendanceRecord:
    return AttendanceRecord(
        id=UUID(str(row["id"])),
        session_id=UUID(str(row["session_id"])),
        user_id=str(row["user_id"]),
        check_in_time=parse_timestamp(row["check_in_time"]),
        status=AttendanceStatus(row.get("status") or AttendanceStatus.PRESENT.value),
    )
