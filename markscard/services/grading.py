"""Grading engine: totals, percentage, letter grades, GPA and classification.

Everything in this module is pure. Marks are given as a mapping from
subject code to score; a subject that is absent (or None) counts as 0.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping

from markscard.core.subjects import MAX_TOTAL, SUBJECTS

Marks = Mapping[str, int | None]

TWO_PLACES = Decimal("0.01")

# Letter grade bands for a single subject score (inclusive lower bound).
SUBJECT_GRADE_BANDS: tuple[tuple[int, str], ...] = (
    (90, "A+"),
    (80, "A"),
    (70, "B+"),
    (60, "B"),
    (50, "C"),
)

# Percentage -> GPA lookup (inclusive lower bound). Printed on markscards,
# so values are looked up, never interpolated.
GPA_TABLE: tuple[tuple[Decimal, float], ...] = (
    (Decimal("97"), 4.0),
    (Decimal("94"), 3.9),
    (Decimal("90"), 3.8),
    (Decimal("87"), 3.7),
    (Decimal("84"), 3.6),
    (Decimal("81"), 3.5),
    (Decimal("79"), 3.4),
    (Decimal("77"), 3.3),
    (Decimal("75"), 3.2),
    (Decimal("73"), 3.1),
    (Decimal("71"), 3.0),
    (Decimal("69"), 2.9),
    (Decimal("67"), 2.8),
    (Decimal("65"), 2.7),
    (Decimal("63"), 2.6),
    (Decimal("61"), 2.5),
    (Decimal("59"), 2.4),
    (Decimal("57"), 2.3),
    (Decimal("55"), 2.2),
    (Decimal("53"), 2.1),
    (Decimal("51"), 2.0),
    (Decimal("49"), 1.9),
    (Decimal("47"), 1.8),
    (Decimal("45"), 1.7),
    (Decimal("43"), 1.6),
    (Decimal("41"), 1.5),
    (Decimal("39"), 1.4),
    (Decimal("37"), 1.3),
    (Decimal("35"), 1.2),
    (Decimal("33"), 1.1),
    (Decimal("31"), 1.0),
    (Decimal("29"), 0.9),
    (Decimal("27"), 0.8),
    (Decimal("25"), 0.7),
    (Decimal("23"), 0.6),
    (Decimal("21"), 0.5),
    (Decimal("19"), 0.4),
    (Decimal("17"), 0.3),
    (Decimal("15"), 0.2),
)

# GPA -> (overall grade, status), inclusive lower bound.
CLASSIFICATION_BANDS: tuple[tuple[float, str, str], ...] = (
    (3.8, "A+", "Distinction"),
    (3.5, "A", "First Class"),
    (3.0, "B+", "Second Class"),
    (2.5, "B", "Second Class"),
    (2.0, "C", "Pass"),
)


@dataclass(frozen=True)
class Classification:
    grade: str
    status: str


@dataclass(frozen=True)
class SubjectResult:
    code: str
    name: str
    credits: int
    score: int
    recorded: bool
    grade: str


@dataclass(frozen=True)
class GradedView:
    """Derived, never-persisted summary of a student's performance."""

    total_score: int
    max_total: int
    percentage: Decimal
    gpa: float
    subjects: tuple[SubjectResult, ...]
    overall_grade: str
    overall_status: str

    @property
    def per_subject_grade(self) -> dict[str, str]:
        return {s.code: s.grade for s in self.subjects}


def _score(marks: Marks, code: str) -> int:
    value = marks.get(code)
    return 0 if value is None else value


def total(marks: Marks) -> int:
    return sum(_score(marks, s.code) for s in SUBJECTS)


def percentage(marks: Marks) -> Decimal:
    value = Decimal(total(marks)) / Decimal(MAX_TOTAL) * 100
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def subject_grade(score: int) -> str:
    for minimum, grade in SUBJECT_GRADE_BANDS:
        if score >= minimum:
            return grade
    return "F"


def gpa(percent: Decimal | float | int) -> float:
    """Look up the GPA for a percentage; below the lowest band it is 0.0."""
    value = Decimal(str(percent))
    for minimum, points in GPA_TABLE:
        if value >= minimum:
            return points
    return 0.0


def overall_classification(gpa_value: float) -> Classification:
    for minimum, grade, status in CLASSIFICATION_BANDS:
        if gpa_value >= minimum:
            return Classification(grade=grade, status=status)
    return Classification(grade="F", status="Fail")


def grade_marks(marks: Marks) -> GradedView:
    """Compute the full graded view for a set of marks."""
    snapshot = dict(marks)
    subjects = tuple(
        SubjectResult(
            code=s.code,
            name=s.name,
            credits=s.credits,
            score=_score(snapshot, s.code),
            recorded=snapshot.get(s.code) is not None,
            grade=subject_grade(_score(snapshot, s.code)),
        )
        for s in SUBJECTS
    )
    percent = percentage(snapshot)
    gpa_value = gpa(percent)
    classification = overall_classification(gpa_value)

    return GradedView(
        total_score=total(snapshot),
        max_total=MAX_TOTAL,
        percentage=percent,
        gpa=gpa_value,
        subjects=subjects,
        overall_grade=classification.grade,
        overall_status=classification.status,
    )
