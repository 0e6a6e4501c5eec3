"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from attendance_tracker.adapters.qrcode_image_renderer import QrcodeImageRenderer
from attendance_tracker.adapters.supabase_attendance_repository import (
    SupabaseAttendanceRepository,
)
from attendance_tracker.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from attendance_tracker.adapters.supabase_student_repository import (
    SupabaseStudentRepository,
)
from attendance_tracker.adapters.webhook_client import HttpxWebhookClient
from attendance_tracker.config import Settings
from attendance_tracker.services.attendance import AttendanceService
from attendance_tracker.services.cache import InMemoryCache
from attendance_tracker.services.dashboard import DashboardService
from attendance_tracker.services.notifications import (
    SESSION_CREATED,
    CacheRefresher,
    NotificationHub,
    StoreTouch,
)
from attendance_tracker.services.sessions import SessionService
from attendance_tracker.services.watcher import SessionWatcher


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    notifications: NotificationHub
    session_service: SessionService
    attendance_service: AttendanceService
    dashboard_service: DashboardService
    session_watcher: SessionWatcher
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    session_repository = SupabaseSessionRepository(supabase_client)
    attendance_repository = SupabaseAttendanceRepository(supabase_client)
    student_repository = SupabaseStudentRepository(supabase_client)
    cache = InMemoryCache()

    notifications = NotificationHub()
    notifications.subscribe(
        CacheRefresher(cache, resolved_settings.active_session_cache_seconds),
        name="cache",
    )
    notifications.subscribe(
        StoreTouch(session_repository), name="store-touch", kinds={SESSION_CREATED}
    )
    webhook_client = None
    if resolved_settings.notify_webhook_url:
        webhook_client = HttpxWebhookClient.create(resolved_settings.notify_webhook_url)
        notifications.subscribe(
            webhook_client.notify, name="webhook", kinds={SESSION_CREATED}
        )

    session_service = SessionService(
        repository=session_repository,
        notifications=notifications,
        cache=cache,
        qr_renderer=QrcodeImageRenderer(),
        expiry_minutes=resolved_settings.qr_expiry_minutes,
        cache_ttl_seconds=resolved_settings.active_session_cache_seconds,
    )
    attendance_service = AttendanceService(
        repository=attendance_repository,
        session_repository=session_repository,
    )
    dashboard_service = DashboardService(
        session_repository=session_repository,
        attendance_repository=attendance_repository,
        student_repository=student_repository,
        active_session=session_service.get_active_session,
        timezone_name=resolved_settings.session_timezone,
    )
    session_watcher = SessionWatcher(
        session_service=session_service,
        notifications=notifications,
        interval_seconds=resolved_settings.poll_interval_seconds,
    )

    async def close_resources() -> None:
        if webhook_client is not None:
            await webhook_client.close()

    return AppContainer(
        settings=resolved_settings,
        notifications=notifications,
        session_service=session_service,
        attendance_service=attendance_service,
        dashboard_service=dashboard_service,
        session_watcher=session_watcher,
        close_resources=close_resources,
    )
