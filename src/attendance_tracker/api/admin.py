"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response, status

from attendance_tracker.api.models import AttendanceToggleRequest, SessionCreateRequest
from attendance_tracker.api.serializers import (
    serialize_admin_dashboard,
    serialize_record,
    serialize_roster_entry,
    serialize_session,
)
from attendance_tracker.domain.errors import UnknownSession
from attendance_tracker.services.export import (
    build_attendance_workbook,
    export_filename,
)

if TYPE_CHECKING:
    from attendance_tracker.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])

_XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.post(
    "/sessions",
    dependencies=[Depends(require_admin)],
    status_code=status.HTTP_201_CREATED,
)
async def create_session(
    payload: SessionCreateRequest, request: Request
) -> dict[str, object]:
    """Open a new session and return it with its QR payload."""
    container: AppContainer = request.app.state.container
    session = await container.session_service.create_session(
        name=payload.name,
        date=payload.date,
        time=payload.time,
        duration_minutes=payload.duration_minutes,
    )
    return {"session": serialize_session(session, include_qr=True)}


@router.post("/sessions/close", dependencies=[Depends(require_admin)])
async def close_session(request: Request) -> dict[str, object]:
    """Stop accepting scans for the active session."""
    container: AppContainer = request.app.state.container
    closed = await container.session_service.close_active_session()
    return {"closed": closed}


@router.get("/sessions/{session_id}/qr.png", dependencies=[Depends(require_admin)])
async def session_qr_image(session_id: UUID, request: Request) -> Response:
    """Download the QR code issued for a session."""
    container: AppContainer = request.app.state.container
    image = container.session_service.qr_image(session_id)
    return Response(
        content=image,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="qrcode-{session_id}.png"'},
    )


@router.get(
    "/sessions/{session_id}/export.xlsx", dependencies=[Depends(require_admin)]
)
async def export_attendance(session_id: UUID, request: Request) -> Response:
    """Download the session roster as a spreadsheet."""
    container: AppContainer = request.app.state.container
    session = container.session_service.get_session(session_id)
    if session is None:
        raise UnknownSession(f"Session {session_id} not found")
    roster = container.dashboard_service.session_roster(session_id)
    return Response(
        content=build_attendance_workbook(session, roster),
        media_type=_XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(session)}"'
        },
    )


@router.get("/attendance/{session_id}", dependencies=[Depends(require_admin)])
async def session_roster(session_id: UUID, request: Request) -> dict[str, object]:
    """Return every student's presence for a session."""
    container: AppContainer = request.app.state.container
    roster = container.dashboard_service.session_roster(session_id)
    return {"students": [serialize_roster_entry(entry) for entry in roster]}


@router.post("/attendance/{student_id}", dependencies=[Depends(require_admin)])
async def toggle_attendance(
    student_id: str, payload: AttendanceToggleRequest, request: Request
) -> dict[str, object]:
    """Mark a student present or absent by hand."""
    container: AppContainer = request.app.state.container
    record = container.attendance_service.set_attendance(
        payload.session_id, student_id, payload.is_present
    )
    return {"record": serialize_record(record) if record else None}


@router.get("/dashboard", dependencies=[Depends(require_admin)])
async def admin_dashboard(request: Request) -> dict[str, object]:
    """Live roster and per-session attendance totals."""
    container: AppContainer = request.app.state.container
    return serialize_admin_dashboard(container.dashboard_service.admin_dashboard())
