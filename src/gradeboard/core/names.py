from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


SUBJECT_NAMES: Mapping[int, str] = MappingProxyType(
    {
        1: "Mathematics",
        2: "English",
        3: "Physics",
        4: "Biology",
        5: "Chemistry",
    }
)

TERM_NAMES: Mapping[int, str] = MappingProxyType(
    {
        1: "1st Term",
        2: "2nd Term",
        3: "3rd Term",
    }
)


@dataclass(frozen=True)
class NameTables:
    subjects: Mapping[int, str] = field(default_factory=lambda: SUBJECT_NAMES)
    terms: Mapping[int, str] = field(default_factory=lambda: TERM_NAMES)

    def subject_name(self, subject_id: int) -> str:
        return self.subjects.get(subject_id) or f"Subject {subject_id}"

    def term_name(self, term_id: int) -> str:
        return self.terms.get(term_id) or f"Term {term_id}"


DEFAULT_NAMES = NameTables()


def resolve_subject_name(subject_id: int, names: NameTables = DEFAULT_NAMES) -> str:
    return names.subject_name(subject_id)


def resolve_term_name(term_id: int, names: NameTables = DEFAULT_NAMES) -> str:
    return names.term_name(term_id)
