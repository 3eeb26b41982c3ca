from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Sequence

from gradeboard.core.grading import DEFAULT_SCALE, GradeScale
from gradeboard.core.names import DEFAULT_NAMES, NameTables
from gradeboard.core.records import Result


@dataclass(frozen=True)
class DistributionRow:
    grade: str
    range: str
    count: int
    percentage: str
    color: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "grade": self.grade,
            "range": self.range,
            "count": self.count,
            "percentage": self.percentage,
            "color": self.color,
        }


@dataclass(frozen=True)
class SubjectAverageRow:
    subject_id: int
    name: str
    average: int

    def to_dict(self) -> dict[str, Any]:
        return {"subjectId": self.subject_id, "name": self.name, "average": self.average}


@dataclass(frozen=True)
class TermAverageRow:
    term_id: int
    label: str
    average: int

    def to_dict(self) -> dict[str, Any]:
        return {"termId": self.term_id, "label": self.label, "average": self.average}


def round_half_up(value: float) -> int:
    """Nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3). NaN and infinities give 0."""
    if not math.isfinite(value):
        return 0
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _format_percentage(count: int, total: int) -> str:
    if total == 0:
        return "0%"
    return f"{count / total * 100:.1f}%"


def grade_distribution(
    results: Iterable[Result],
    scale: GradeScale = DEFAULT_SCALE,
) -> list[DistributionRow]:
    counts = {grade: 0 for grade in scale.grades}
    classified = 0

    for result in results:
        for score in result.scores:
            counts[scale.classify(score.total)] += 1
            classified += 1

    return [
        DistributionRow(
            grade=band.grade,
            range=band.range_label,
            count=counts[band.grade],
            percentage=_format_percentage(counts[band.grade], classified),
            color=band.color,
        )
        for band in scale.bands
    ]


def subject_averages(
    results: Iterable[Result],
    names: NameTables = DEFAULT_NAMES,
) -> list[SubjectAverageRow]:
    # dicts keep insertion order, so rows follow first appearance
    stats: dict[int, list[float]] = {}

    for result in results:
        for score in result.scores:
            bucket = stats.setdefault(score.subject_id, [0.0, 0])
            bucket[0] += score.total
            bucket[1] += 1

    return [
        SubjectAverageRow(
            subject_id=subject_id,
            name=names.subject_name(subject_id),
            average=round_half_up(total / count),
        )
        for subject_id, (total, count) in stats.items()
    ]


def term_averages(
    results: Iterable[Result],
    names: NameTables = DEFAULT_NAMES,
) -> list[TermAverageRow]:
    stats: dict[int, list[float]] = {}

    for result in results:
        bucket = stats.setdefault(result.term_id, [0.0, 0])
        for score in result.scores:
            bucket[0] += score.total
            bucket[1] += 1

    return [
        TermAverageRow(
            term_id=term_id,
            label=names.term_name(term_id),
            average=round_half_up(total / count) if count else 0,
        )
        for term_id, (total, count) in stats.items()
    ]


def available_terms(results: Iterable[Result]) -> list[int]:
    return sorted({result.term_id for result in results})


def results_for_term(results: Iterable[Result], term_id: int) -> list[Result]:
    return [result for result in results if result.term_id == term_id]


def summarize(
    results: Sequence[Result],
    scale: GradeScale = DEFAULT_SCALE,
    names: NameTables = DEFAULT_NAMES,
) -> dict[str, list[dict[str, Any]]]:
    return {
        "gradeDistribution": [row.to_dict() for row in grade_distribution(results, scale)],
        "subjectAverages": [row.to_dict() for row in subject_averages(results, names)],
        "termAverages": [row.to_dict() for row in term_averages(results, names)],
    }
