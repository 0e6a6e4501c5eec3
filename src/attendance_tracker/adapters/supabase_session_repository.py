"""Supabase-backed session repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from attendance_tracker.adapters.supabase_support import execute, parse_timestamp
from attendance_tracker.domain.errors import StorageError
from attendance_tracker.domain.sessions import ClassSession
from attendance_tracker.services.sessions import SessionRepository

_COLUMNS = "id, name, date, time, duration, qr_code, expires_at, is_active, created_at"


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for class sessions.

    Replacing the active session goes through the ``create_active_session``
    database function so deactivation and insert share one transaction.
    """

    client: Client

    def replace_active(self, session: ClassSession) -> ClassSession:
        """Deactivate the current session and insert the new one."""
        response = execute(
            self.client.rpc(
                "create_active_session",
                {
                    "p_id": str(session.id),
                    "p_name": session.name,
                    "p_date": session.date,
                    "p_time": session.time,
                    "p_duration": session.duration_minutes,
                    "p_qr_code": session.qr_payload,
                    "p_expires_at": session.expires_at.isoformat(),
                    "p_created_at": session.created_at.isoformat(),
                },
            ),
            "create session",
        )
        data = response.data
        row = data[0] if isinstance(data, list) and data else data
        if not isinstance(row, dict):
            raise StorageError("Failed to create session")
        return _parse_row(row)

    def deactivate_all(self) -> int:
        """Mark every active session inactive."""
        response = execute(
            self.client.table("sessions")
            .update({"is_active": False})
            .eq("is_active", True),
            "deactivate sessions",
        )
        return len(response.data or [])

    def get_active(self) -> ClassSession | None:
        """Return the session flagged active, if any."""
        response = execute(
            self.client.table("sessions")
            .select(_COLUMNS)
            .eq("is_active", True)
            .order("created_at", desc=True)
            .limit(1),
            "load active session",
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def get(self, session_id: UUID) -> ClassSession | None:
        """Return a session by id, if present."""
        response = execute(
            self.client.table("sessions")
            .select(_COLUMNS)
            .eq("id", str(session_id))
            .limit(1),
            "load session",
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def list_sessions(self) -> list[ClassSession]:
        """Return all sessions, newest first."""
        response = execute(
            self.client.table("sessions")
            .select(_COLUMNS)
            .order("created_at", desc=True),
            "list sessions",
        )
        return [_parse_row(row) for row in response.data or []]

    def mark_notified(self, session_id: UUID) -> None:
        """Bump the row so realtime subscribers see a change."""
        execute(
            self.client.table("sessions")
            .update(
                {
                    "last_notified_at": datetime.now(tz=UTC).isoformat(),
                    "notified": True,
                }
            )
            .eq("id", str(session_id)),
            "mark session notified",
        )


def _parse_row(row: dict[str, object]) -> ClassSession:
    return ClassSession(
        id=UUID(str(row["id"])),
        name=str(row["name"]),
        date=str(row["date"]),
        time=str(row["time"])[:5],
        duration_minutes=int(row.get("duration") or 0),
        qr_payload=row.get("qr_code"),
        expires_at=parse_timestamp(row["expires_at"]),
        is_active=bool(row.get("is_active")),
        created_at=parse_timestamp(row["created_at"]),
    )
