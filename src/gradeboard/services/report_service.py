import logging
from typing import Any, Dict, List, Optional, Sequence

from gradeboard.config.settings import settings
from gradeboard.core.aggregates import available_terms, results_for_term, summarize
from gradeboard.core.grading import GradeScale, get_scale
from gradeboard.core.names import DEFAULT_NAMES, NameTables
from gradeboard.core.records import Result, next_result_id
from gradeboard.services.results_api import RecordId, ResultsApiClient, ResultsApiError


logger = logging.getLogger(__name__)


class ReportServiceError(Exception):
    pass


class ReportService:
    def __init__(
        self,
        client: ResultsApiClient,
        scale: GradeScale,
        names: NameTables = DEFAULT_NAMES,
    ) -> None:
        self.client = client
        self.scale = scale
        self.names = names

    @classmethod
    def from_settings(cls) -> "ReportService":
        return cls(ResultsApiClient.from_settings(), get_scale(settings.grade_scale))

    def analytics(self, results: Sequence[Result]) -> Dict[str, List[Dict[str, Any]]]:
        return summarize(results, self.scale, self.names)

    def teacher_dashboard(self) -> Dict[str, Any]:
        students = self.client.list_students()
        sessions = self.client.list_sessions()
        teachers = self.client.list_teachers()
        subjects = self.client.list_subjects()
        results = self.client.list_results()

        session_name = "Session"
        if sessions and isinstance(sessions[0], dict) and sessions[0].get("name"):
            session_name = str(sessions[0]["name"])

        return {
            "session": session_name,
            "student_count": len(students),
            "teacher_count": len(teachers),
            "subject_count": len(subjects),
            **self.analytics(results),
        }

    def _score_rows(self, result: Result) -> List[Dict[str, Any]]:
        rows = []
        for score in result.scores:
            band = self.scale.band_for(score.total)
            rows.append(
                {
                    "subjectId": score.subject_id,
                    "subject": self.names.subject_name(score.subject_id),
                    "ca": score.ca,
                    "exam": score.exam,
                    "total": score.total,
                    "grade": band.grade,
                    "color": band.color,
                }
            )
        return rows

    def student_sheet(self, student_id: RecordId, term_id: Optional[int] = None) -> Dict[str, Any]:
        student = self.client.get_student(student_id)
        results = self.client.list_results(student_id)
        terms = available_terms(results)

        if term_id is None:
            term_id = terms[0] if terms else 1

        return {
            "student": student,
            "terms": terms,
            "selected_term": term_id,
            "term_label": self.names.term_name(term_id),
            "results": [
                {
                    "id": result.id,
                    "sessionId": result.session_id,
                    "termId": result.term_id,
                    "scores": self._score_rows(result),
                }
                for result in results_for_term(results, term_id)
            ],
        }

    def new_result(self, student_id: RecordId, term_id: int, session_id: int = 1) -> Result:
        existing = self.client.list_results()
        return Result.blank(
            id=next_result_id(existing),
            student_id=student_id,
            term_id=term_id,
            session_id=session_id,
        )

    def save_result(self, result: Result) -> Result:
        result = result.with_recomputed_totals()
        existing_ids = {str(r.id) for r in self.client.list_results(result.student_id)}
        if str(result.id) in existing_ids:
            logger.info("Updating result %s for student %s", result.id, result.student_id)
            return self.client.update_result(result)
        logger.info("Creating result %s for student %s", result.id, result.student_id)
        return self.client.create_result(result)

    def delete_result(self, result_id: RecordId) -> None:
        self.client.delete_result(result_id)

    def list_students(self, query: Optional[str] = None) -> List[Dict[str, Any]]:
        """Roster, optionally narrowed to names or registration numbers containing ``query``."""
        students = self.client.list_students()
        q = (query or "").strip().lower()
        if not q:
            return students
        return [
            student
            for student in students
            if q in str(student.get("name") or "").lower() or q in str(student.get("regNo") or "").lower()
        ]

    def create_student(self, name: str, reg_no: str, class_name: str) -> Dict[str, Any]:
        name, reg_no, class_name = name.strip(), reg_no.strip(), class_name.strip()
        if not name or not reg_no or not class_name:
            raise ReportServiceError("name, regNo and class are required")

        for student in self.client.list_students():
            if str(student.get("regNo", "")) == reg_no:
                raise ReportServiceError("Student with this registration number already exists")
            same_name = str(student.get("name", "")).lower() == name.lower()
            if same_name and student.get("class") == class_name:
                raise ReportServiceError("Student already exists in this class")

        return self.client.create_student({"name": name, "regNo": reg_no, "class": class_name})

    def delete_student(self, student_id: RecordId) -> int:
        """Delete a student and their results; returns how many results were removed."""
        removed = 0
        for result in self.client.list_results(student_id):
            try:
                self.client.delete_result(result.id)
                removed += 1
            except ResultsApiError as exc:
                logger.warning("Failed to delete result %s of student %s: %s", result.id, student_id, exc)
        self.client.delete_student(student_id)
        return removed
