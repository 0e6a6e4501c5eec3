"""Domain models for students and roster views."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Student:
    """A known student."""

    id: str
    name: str
    username: str


@dataclass(frozen=True)
class RosterEntry:
    """Derived presence of a student for one session."""

    student: Student
    is_present: bool
    check_in_time: datetime | None
