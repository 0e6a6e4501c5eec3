"""Domain models for attendance records."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class AttendanceStatus(str, Enum):
    """Stored status of a check-in row."""

    PRESENT = "present"
    ABSENT = "absent"


@dataclass(frozen=True)
class AttendanceRecord:
    """Represents one student's check-in for one session."""

    id: UUID
    session_id: UUID
    user_id: str
    check_in_time: datetime
    status: AttendanceStatus

    @property
    def is_present(self) -> bool:
        return self.status is AttendanceStatus.PRESENT


@dataclass(frozen=True)
class CheckInResult:
    """Outcome of a scan: the stored record and whether this call created it."""

    record: AttendanceRecord
    newly_recorded: bool
