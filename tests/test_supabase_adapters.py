"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

import pytest
from postgrest.exceptions import APIError

from attendance_tracker.adapters.supabase_attendance_repository import (
    SupabaseAttendanceRepository,
)
from attendance_tracker.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from attendance_tracker.adapters.supabase_student_repository import (
    SupabaseStudentRepository,
)
from attendance_tracker.domain.attendance import AttendanceStatus
from attendance_tracker.domain.errors import StorageError
from attendance_tracker.domain.sessions import ClassSession

NOW = datetime(2024, 1, 10, 8, 55, tzinfo=UTC)


@dataclass
class FakeResponse:
    data: object


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[object]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": [], "rpc": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    error: APIError | None = None

    def queue(self, action: str, data: object) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        if self.error is not None:
            raise self.error
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)
    rpc_calls: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]

    def rpc(self, name: str, params: dict[str, object]) -> FakeTable:
        self.rpc_calls.append((name, params))
        table = self.table(f"rpc:{name}")
        table._action = "rpc"
        return table


def _session_row(session_id: str, is_active: bool = True) -> dict[str, object]:
    return {
        "id": session_id,
        "name": "CS101",
        "date": "2024-01-10",
        "time": "09:00:00",
        "duration": 60,
        "qr_code": '{"sessionId": "x"}',
        "expires_at": "2024-01-10T09:05:00+00:00",
        "is_active": is_active,
        "created_at": "2024-01-10T08:55:00+00:00",
    }


def test_session_repository_replaces_active_through_rpc() -> None:
    client = FakeSupabaseClient()
    session_id = uuid4()
    client.table("rpc:create_active_session").queue(
        "rpc", [_session_row(str(session_id))]
    )
    session = ClassSession(
        id=session_id,
        name="CS101",
        date="2024-01-10",
        time="09:00",
        duration_minutes=60,
        qr_payload='{"sessionId": "x"}',
        expires_at=NOW,
        is_active=True,
        created_at=NOW,
    )

    created = SupabaseSessionRepository(client).replace_active(session)

    name, params = client.rpc_calls[0]
    assert name == "create_active_session"
    assert params["p_id"] == str(session_id)
    assert params["p_duration"] == 60
    assert created.id == session_id
    assert created.time == "09:00"
    assert created.is_active


def test_session_repository_reads_and_updates() -> None:
    client = FakeSupabaseClient()
    sessions = client.table("sessions")
    first, second = str(uuid4()), str(uuid4())
    sessions.queue("select", [_session_row(first)])
    sessions.queue("select", [_session_row(first), _session_row(second, False)])
    sessions.queue("update", [_session_row(first, False)])
    repository = SupabaseSessionRepository(client)

    active = repository.get_active()
    listed = repository.list_sessions()
    changed = repository.deactivate_all()
    missing = repository.get(uuid4())
    repository.mark_notified(uuid4())

    assert active is not None and str(active.id) == first
    assert [str(s.id) for s in listed] == [first, second]
    assert changed == 1
    assert missing is None
    assert sessions.last_payload["notified"] is True  # type: ignore[index]


def test_attendance_repository_insert_and_conflict() -> None:
    client = FakeSupabaseClient()
    attendance = client.table("attendance")
    session_id = uuid4()
    row = {
        "id": str(uuid4()),
        "session_id": str(session_id),
        "user_id": "u1",
        "check_in_time": "2024-01-10T08:56:00+00:00",
        "status": "present",
    }
    attendance.queue("insert", [row])
    repository = SupabaseAttendanceRepository(client)

    record = repository.insert(session_id, "u1", NOW, AttendanceStatus.PRESENT)

    assert record is not None
    assert record.status is AttendanceStatus.PRESENT
    assert attendance.last_payload["user_id"] == "u1"  # type: ignore[index]

    attendance.error = APIError({"code": "23505", "message": "duplicate key"})
    assert repository.insert(session_id, "u1", NOW, AttendanceStatus.PRESENT) is None

    attendance.error = APIError({"code": "42P01", "message": "missing table"})
    with pytest.raises(StorageError):
        repository.insert(session_id, "u1", NOW, AttendanceStatus.PRESENT)


def test_attendance_repository_queries() -> None:
    client = FakeSupabaseClient()
    attendance = client.table("attendance")
    session_id = uuid4()
    row = {
        "id": str(uuid4()),
        "session_id": str(session_id),
        "user_id": "u1",
        "check_in_time": "2024-01-10T08:56:00+00:00",
        "status": "absent",
    }
    attendance.queue("select", [row])
    attendance.queue("select", [row])
    attendance.queue("update", [{**row, "status": "present"}])
    repository = SupabaseAttendanceRepository(client)

    found = repository.find(session_id, "u1")
    by_user = repository.list_by_user("u1")
    updated = repository.update_status(uuid4(), AttendanceStatus.PRESENT)

    assert found is not None and found.status is AttendanceStatus.ABSENT
    assert len(by_user) == 1
    assert updated.status is AttendanceStatus.PRESENT
    assert repository.list_by_session(session_id) == []


def test_student_repository_lists_students() -> None:
    client = FakeSupabaseClient()
    client.table("users").queue(
        "select", [{"id": 7, "name": "Ada", "username": "ada"}]
    )

    students = SupabaseStudentRepository(client).list_students()

    assert [(s.id, s.name) for s in students] == [("7", "Ada")]
    assert ("role", "student") in client.table("users").last_filters
