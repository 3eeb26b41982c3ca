import unittest

from gradeboard.core.grading import CLASSROOM_SCALE, DISTRIBUTION_SCALE
from gradeboard.core.records import Result, Score, parse_results
from gradeboard.services.report_service import ReportService, ReportServiceError
from gradeboard.services.results_api import ResultsApiError


class FakeResultsClient:
    def __init__(self, results=None, students=None, sessions=None, teachers=None, subjects=None):
        self.results = list(results or [])
        self.students = list(students or [])
        self.sessions = list(sessions or [])
        self.teachers = list(teachers or [])
        self.subjects = list(subjects or [])
        self.calls = []
        self.failing_result_ids = set()

    def list_results(self, student_id=None):
        if student_id is None:
            return list(self.results)
        return [r for r in self.results if str(r.student_id) == str(student_id)]

    def create_result(self, result):
        self.calls.append(("create", result.id))
        self.results.append(result)
        return result

    def update_result(self, result):
        self.calls.append(("update", result.id))
        self.results = [result if r.id == result.id else r for r in self.results]
        return result

    def delete_result(self, result_id):
        if result_id in self.failing_result_ids:
            raise ResultsApiError("boom", 500)
        self.calls.append(("delete_result", result_id))
        self.results = [r for r in self.results if r.id != result_id]

    def list_students(self):
        return list(self.students)

    def get_student(self, student_id):
        for student in self.students:
            if str(student["id"]) == str(student_id):
                return student
        raise ResultsApiError(f"Student {student_id} not found", 404)

    def create_student(self, payload):
        created = {"id": str(len(self.students) + 1), **payload}
        self.students.append(created)
        return created

    def delete_student(self, student_id):
        self.calls.append(("delete_student", student_id))
        self.students = [s for s in self.students if str(s["id"]) != str(student_id)]

    def list_teachers(self):
        return list(self.teachers)

    def list_sessions(self):
        return list(self.sessions)

    def list_subjects(self):
        return list(self.subjects)


RESULTS = parse_results(
    [
        {
            "id": 1,
            "studentId": 1,
            "sessionId": 1,
            "termId": 2,
            "scores": [
                {"subjectId": 1, "ca": 35, "exam": 57, "total": 92},
                {"subjectId": 2, "ca": 20, "exam": 30, "total": 50},
            ],
        },
        {
            "id": 2,
            "studentId": 1,
            "sessionId": 1,
            "termId": 1,
            "scores": [{"subjectId": 1, "ca": 30, "exam": 40, "total": 70}],
        },
        {
            "id": 3,
            "studentId": 2,
            "sessionId": 1,
            "termId": 1,
            "scores": [{"subjectId": 3, "ca": 25, "exam": 55, "total": 80}],
        },
    ]
)

STUDENTS = [
    {"id": "1", "name": "Ada Obi", "regNo": "REG-001", "class": "JSS1"},
    {"id": "2", "name": "Tunde Bello", "regNo": "REG-002", "class": "JSS2"},
]


class ReportServiceTests(unittest.TestCase):
    def setUp(self):
        self.client = FakeResultsClient(
            results=RESULTS,
            students=STUDENTS,
            sessions=[{"id": "1", "name": "2024/2025"}],
            teachers=[{"id": "1", "name": "Mrs Eze", "subject": "Mathematics"}],
            subjects=["Mathematics", "English", "Physics"],
        )
        self.service = ReportService(self.client, CLASSROOM_SCALE)

    def test_teacher_dashboard(self):
        dashboard = self.service.teacher_dashboard()
        self.assertEqual(dashboard["session"], "2024/2025")
        self.assertEqual(dashboard["student_count"], 2)
        self.assertEqual(dashboard["teacher_count"], 1)
        self.assertEqual(dashboard["subject_count"], 3)
        self.assertEqual(
            [(row["subjectId"], row["average"]) for row in dashboard["subjectAverages"]],
            [(1, 81), (2, 50), (3, 80)],
        )
        self.assertEqual(
            [(row["termId"], row["average"]) for row in dashboard["termAverages"]],
            [(2, 71), (1, 75)],
        )
        counts = {row["grade"]: row["count"] for row in dashboard["gradeDistribution"]}
        self.assertEqual(counts, {"A": 1, "B": 1, "C": 1, "D": 0, "F": 1})

    def test_dashboard_without_sessions(self):
        self.client.sessions = []
        self.assertEqual(self.service.teacher_dashboard()["session"], "Session")

    def test_injected_scale_changes_grades(self):
        service = ReportService(self.client, DISTRIBUTION_SCALE)
        grades = [row["grade"] for row in service.analytics(RESULTS)["gradeDistribution"]]
        self.assertEqual(grades, ["A", "B", "C", "D", "E", "F"])

    def test_student_sheet_defaults_to_first_term(self):
        sheet = self.service.student_sheet("1")
        self.assertEqual(sheet["terms"], [1, 2])
        self.assertEqual(sheet["selected_term"], 1)
        self.assertEqual(sheet["term_label"], "1st Term")
        self.assertEqual([r["id"] for r in sheet["results"]], [2])

    def test_student_sheet_grades_scores(self):
        sheet = self.service.student_sheet("1", term_id=2)
        rows = sheet["results"][0]["scores"]
        self.assertEqual(rows[0]["subject"], "Mathematics")
        self.assertEqual(rows[0]["grade"], "A")
        self.assertEqual(rows[0]["color"], "bg-green-600 text-white")
        self.assertEqual(rows[1]["grade"], "F")

    def test_student_sheet_without_results(self):
        self.client.students.append({"id": "3", "name": "New", "regNo": "REG-003", "class": "JSS1"})
        sheet = self.service.student_sheet("3")
        self.assertEqual(sheet["terms"], [])
        self.assertEqual(sheet["selected_term"], 1)
        self.assertEqual(sheet["results"], [])

    def test_missing_student(self):
        with self.assertRaises(ResultsApiError):
            self.service.student_sheet("42")

    def test_new_result_uses_next_id(self):
        result = self.service.new_result("1", term_id=3)
        self.assertEqual(result.id, 4)
        self.assertEqual(result.term_id, 3)
        self.assertEqual(len(result.scores), 5)

    def test_save_result_updates_existing(self):
        edited = Result(
            id=2,
            student_id=1,
            session_id=1,
            term_id=1,
            scores=(Score(subject_id=1, ca=38, exam=55, total=70),),
        )
        saved = self.service.save_result(edited)
        self.assertEqual(self.client.calls, [("update", 2)])
        self.assertEqual(saved.scores[0].total, 93)

    def test_save_result_creates_new(self):
        result = Result.blank(id=4, student_id=1, term_id=3)
        self.service.save_result(result)
        self.assertEqual(self.client.calls, [("create", 4)])

    def test_list_students(self):
        self.assertEqual(len(self.service.list_students()), 2)
        self.assertEqual(len(self.service.list_students("  ")), 2)

    def test_list_students_filters_by_name_or_reg_no(self):
        self.assertEqual([s["id"] for s in self.service.list_students("TUNDE")], ["2"])
        self.assertEqual([s["id"] for s in self.service.list_students("reg-001")], ["1"])
        self.assertEqual(self.service.list_students("zzz"), [])

    def test_create_student_rejects_duplicates(self):
        with self.assertRaises(ReportServiceError):
            self.service.create_student("Someone", "REG-001", "JSS3")
        with self.assertRaises(ReportServiceError):
            self.service.create_student("ada obi", "REG-009", "JSS1")
        with self.assertRaises(ReportServiceError):
            self.service.create_student(" ", "REG-009", "JSS1")

    def test_create_student(self):
        created = self.service.create_student(" Chidi ", "REG-010", "JSS1")
        self.assertEqual(created["name"], "Chidi")
        self.assertEqual(created["regNo"], "REG-010")

    def test_delete_student_removes_results_first(self):
        removed = self.service.delete_student("1")
        self.assertEqual(removed, 2)
        self.assertEqual(
            self.client.calls,
            [("delete_result", 1), ("delete_result", 2), ("delete_student", "1")],
        )

    def test_delete_student_skips_failed_result_deletes(self):
        self.client.failing_result_ids = {1}
        with self.assertLogs("gradeboard.services.report_service", level="WARNING"):
            removed = self.service.delete_student("1")
        self.assertEqual(removed, 1)
        self.assertEqual(self.client.calls[-1], ("delete_student", "1"))


if __name__ == "__main__":
    unittest.main()
