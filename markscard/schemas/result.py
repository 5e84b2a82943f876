"""Result (graded view) schemas."""

from datetime import date
from decimal import Decimal

from markscard.schemas.common import BaseSchema


class StudentCredentials(BaseSchema):
    """Student self-service credentials."""

    seat_number: str | None = None
    date_of_birth: str | date | None = None


class SubjectResultResponse(BaseSchema):
    """Per-subject result row."""

    code: str
    name: str
    credits: int
    score: int
    recorded: bool
    grade: str


class GradedViewResponse(BaseSchema):
    """Computed result summary."""

    total_score: int
    max_total: int
    percentage: Decimal
    gpa: float
    subjects: list[SubjectResultResponse]
    per_subject_grade: dict[str, str]
    overall_grade: str
    overall_status: str


class StudentIdentity(BaseSchema):
    """Identity block shown alongside results."""

    seat_number: str
    full_name: str
    date_of_birth: date


class StudentResultResponse(BaseSchema):
    """What a student sees after a successful lookup."""

    student: StudentIdentity
    result: GradedViewResponse
