from dataclasses import dataclass
from typing import Optional


TEACHER = "teacher"
STUDENT = "student"
ROLES = (TEACHER, STUDENT)


@dataclass(frozen=True)
class Viewer:
    """Claims handed over by the identity provider for the current request."""

    user_id: str
    role: Optional[str] = None
    student_id: Optional[str] = None

    @property
    def is_teacher(self) -> bool:
        return self.role == TEACHER

    @property
    def is_student(self) -> bool:
        return self.role == STUDENT

    def can_view_student(self, student_id: str) -> bool:
        if self.is_teacher:
            return True
        return self.is_student and self.student_id is not None and str(self.student_id) == str(student_id)
