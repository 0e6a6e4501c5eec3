"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from attendance_tracker.api.admin import router as admin_router
from attendance_tracker.api.models import ScanRequest
from attendance_tracker.api.serializers import (
    serialize_check_in,
    serialize_record,
    serialize_session,
    serialize_student_dashboard,
)
from attendance_tracker.app_logging import configure_logging
from attendance_tracker.containers import AppContainer
from attendance_tracker.domain.errors import AttendanceError

_NO_STORE = "no-cache, no-store, must-revalidate"


async def require_user(x_user_id: str | None = Header(default=None)) -> str:
    """Return the caller's user id from the X-User-Id header."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return x_user_id.strip()


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        stop = asyncio.Event()
        watcher_task = None
        state_container: AppContainer = app.state.container
        if state_container.settings.poll_interval_seconds > 0:
            watcher_task = asyncio.create_task(
                state_container.session_watcher.run(stop)
            )
        yield
        stop.set()
        if watcher_task is not None:
            await watcher_task
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(AttendanceError)
    async def attendance_error_handler(
        request: Request, exc: AttendanceError
    ) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("%s on %s: %s", exc.kind, request.url.path, exc.message)
        return JSONResponse(status_code=int(exc.status_code), content=exc.to_dict())

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/sessions")
    async def list_sessions(request: Request) -> dict[str, object]:
        """Return all sessions, newest first."""
        state_container: AppContainer = request.app.state.container
        sessions = state_container.session_service.list_sessions()
        return {"sessions": [serialize_session(session) for session in sessions]}

    @app.get("/sessions/active")
    async def active_session(request: Request, response: Response) -> dict[str, object]:
        """Return the session currently accepting scans, if any."""
        state_container: AppContainer = request.app.state.container
        response.headers["Cache-Control"] = _NO_STORE
        session = state_container.session_service.get_active_session()
        return {
            "session": serialize_session(session) if session else None,
            "pollIntervalSeconds": state_container.settings.poll_interval_seconds,
        }

    @app.post("/attendance/scan")
    async def scan(
        payload: ScanRequest, request: Request, user_id: str = Depends(require_user)
    ) -> dict[str, object]:
        """Record attendance from decoded QR text."""
        state_container: AppContainer = request.app.state.container
        result = state_container.attendance_service.record_attendance(
            payload.text, user_id
        )
        return serialize_check_in(result)

    @app.get("/attendance/me")
    async def my_attendance(
        request: Request, user_id: str = Depends(require_user)
    ) -> dict[str, object]:
        """Return the caller's attendance records."""
        state_container: AppContainer = request.app.state.container
        records = state_container.attendance_service.list_for_user(user_id)
        return {"records": [serialize_record(record) for record in records]}

    @app.get("/dashboard/student")
    async def student_dashboard(
        request: Request, user_id: str = Depends(require_user)
    ) -> dict[str, object]:
        """Return the caller's dashboard summary."""
        state_container: AppContainer = request.app.state.container
        dashboard = state_container.dashboard_service.student_dashboard(user_id)
        return serialize_student_dashboard(dashboard)

    return app
