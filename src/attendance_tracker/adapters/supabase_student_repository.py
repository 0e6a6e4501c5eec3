"""Supabase-backed student directory."""

from dataclasses import dataclass

from supabase import Client

from attendance_tracker.adapters.supabase_support import execute
from attendance_tracker.domain.students import Student
from attendance_tracker.services.dashboard import StudentRepository


@dataclass
class SupabaseStudentRepository(StudentRepository):
    """Reads students from the users table."""

    client: Client

    def list_students(self) -> list[Student]:
        """Return every user with the student role, by name."""
        response = execute(
            self.client.table("users")
            .select("id, name, username")
            .eq("role", "student")
            .order("name", desc=False),
            "list students",
        )
        return [
            Student(
                id=str(row["id"]),
                name=str(row.get("name") or ""),
                username=str(row.get("username") or ""),
            )
            for row in response.data or []
        ]
