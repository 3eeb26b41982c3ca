from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable

DEFAULT_SUBJECT_IDS: tuple[int, ...] = (1, 2, 3, 4, 5)


class RecordError(ValueError):
    pass


def _to_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise RecordError(f"{field_name} must be a number")
    if isinstance(value, (int, float)):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise RecordError(f"{field_name} must be a number") from exc
    return int(number) if number.is_integer() else number


def _to_mark(value: Any, field_name: str) -> float:
    # null or blank marks read as 0
    if value is None or value == "":
        return 0
    return _to_number(value, field_name)


def _to_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise RecordError(f"{field_name} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise RecordError(f"{field_name} must be an integer")
        return int(value)
    try:
        return int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise RecordError(f"{field_name} must be an integer") from exc


def _to_id(value: Any, field_name: str) -> int | str:
    if value is None or value == "":
        raise RecordError(f"{field_name} is required")
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    text = str(value).strip()
    return int(text) if text.isdigit() else text


@dataclass(frozen=True)
class Score:
    subject_id: int
    ca: float = 0
    exam: float = 0
    total: float = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Score:
        if not isinstance(data, dict):
            raise RecordError("score must be an object")
        if data.get("subjectId") is None:
            raise RecordError("score.subjectId is required")
        ca = _to_mark(data.get("ca"), "score.ca")
        exam = _to_mark(data.get("exam"), "score.exam")
        raw_total = data.get("total")
        total = ca + exam if raw_total is None else _to_number(raw_total, "score.total")
        return cls(
            subject_id=_to_int(data["subjectId"], "score.subjectId"),
            ca=ca,
            exam=exam,
            total=total,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "subjectId": self.subject_id,
            "ca": self.ca,
            "exam": self.exam,
            "total": self.total,
        }

    def with_marks(self, *, ca: float | None = None, exam: float | None = None) -> Score:
        ca = self.ca if ca is None else ca
        exam = self.exam if exam is None else exam
        return replace(self, ca=ca, exam=exam, total=ca + exam)


@dataclass(frozen=True)
class Result:
    id: int | str
    student_id: int | str
    session_id: int
    term_id: int
    scores: tuple[Score, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Result:
        if not isinstance(data, dict):
            raise RecordError("result must be an object")
        if data.get("termId") is None:
            raise RecordError("result.termId is required")

        raw_scores = data.get("scores", [])
        if not isinstance(raw_scores, list):
            raise RecordError("result.scores must be an array")

        return cls(
            id=_to_id(data.get("id"), "result.id"),
            student_id=_to_id(data.get("studentId"), "result.studentId"),
            session_id=_to_int(data.get("sessionId") or 1, "result.sessionId"),
            term_id=_to_int(data["termId"], "result.termId"),
            scores=tuple(Score.from_dict(item) for item in raw_scores),
        )

    @classmethod
    def blank(
        cls,
        id: int | str,
        student_id: int | str,
        term_id: int,
        session_id: int = 1,
        subject_ids: Iterable[int] = DEFAULT_SUBJECT_IDS,
    ) -> Result:
        return cls(
            id=id,
            student_id=student_id,
            session_id=session_id,
            term_id=term_id,
            scores=tuple(Score(subject_id=subject_id) for subject_id in subject_ids),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "studentId": self.student_id,
            "sessionId": self.session_id,
            "termId": self.term_id,
            "scores": [score.to_dict() for score in self.scores],
        }

    def with_recomputed_totals(self) -> Result:
        return replace(self, scores=tuple(score.with_marks() for score in self.scores))


def parse_results(items: Iterable[dict[str, Any]]) -> list[Result]:
    return [Result.from_dict(item) for item in items]


def next_result_id(results: Iterable[Result]) -> int:
    numeric = [r.id for r in results if isinstance(r.id, int)]
    return max(numeric, default=0) + 1
