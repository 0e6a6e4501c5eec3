"""Spreadsheet export of a session roster."""

from io import BytesIO

import pandas as pd

from attendance_tracker.domain.sessions import ClassSession
from attendance_tracker.domain.students import RosterEntry


def roster_frame(roster: list[RosterEntry]) -> pd.DataFrame:
    """Return one row per student with derived presence."""
    rows = [
        {
            "Name": entry.student.name,
            "Username": entry.student.username,
            "Status": "present" if entry.is_present else "absent",
            "Check-in time": entry.check_in_time.strftime("%H:%M")
            if entry.check_in_time
            else "",
        }
        for entry in roster
    ]
    return pd.DataFrame(rows, columns=["Name", "Username", "Status", "Check-in time"])


def build_attendance_workbook(session: ClassSession, roster: list[RosterEntry]) -> bytes:
    """Return an .xlsx workbook with a session summary and the roster."""
    summary = pd.DataFrame(
        [
            {
                "Session": session.name,
                "Date": session.date,
                "Time": session.time,
                "Duration (minutes)": session.duration_minutes,
                "Present": sum(1 for entry in roster if entry.is_present),
                "Students": len(roster),
            }
        ]
    )
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        summary.to_excel(writer, sheet_name="Session", index=False)
        roster_frame(roster).to_excel(writer, sheet_name="Attendance", index=False)
    return buffer.getvalue()


def export_filename(session: ClassSession) -> str:
    slug = "-".join(session.name.split()) or "session"
    return f"attendance-{slug}-{session.date}.xlsx"
