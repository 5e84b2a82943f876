"""Input validation for student records and mark entries.

All functions here are pure: they either return normalized values or raise
a ValidationError subclass describing what the caller must fix.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping

from markscard.core.exceptions import MissingFieldError, OutOfRangeError, ValidationError
from markscard.core.subjects import MAX_SCORE, get_subject

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class StudentInput:
    """Normalized student identity fields."""

    seat_number: str
    full_name: str
    date_of_birth: date


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def normalize_seat_number(seat_number: str) -> str:
    """Trim and uppercase a seat number. The format itself is not checked."""
    if _is_blank(seat_number):
        raise MissingFieldError(["seat_number"])
    return str(seat_number).strip().upper()


def validate_full_name(full_name: str) -> str:
    if _is_blank(full_name):
        raise MissingFieldError(["full_name"])
    return str(full_name).strip()


def parse_date_of_birth(value: date | str) -> date:
    """Accept a date or an ISO ``YYYY-MM-DD`` string."""
    if _is_blank(value):
        raise MissingFieldError(["date_of_birth"])
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        if len(text) != 10:
            raise ValueError(text)
        return date.fromisoformat(text)
    except ValueError:
        raise ValidationError(
            "date_of_birth must be a valid date in YYYY-MM-DD format",
            details={"field": "date_of_birth", "value": text},
            code="INVALID_DATE",
        )


def validate_student_input(
    seat_number: str | None,
    full_name: str | None,
    date_of_birth: date | str | None,
) -> StudentInput:
    """Validate and normalize the identity fields of a student record."""
    missing = [
        name
        for name, value in (
            ("seat_number", seat_number),
            ("full_name", full_name),
            ("date_of_birth", date_of_birth),
        )
        if _is_blank(value)
    ]
    if missing:
        raise MissingFieldError(missing)

    return StudentInput(
        seat_number=normalize_seat_number(seat_number),
        full_name=validate_full_name(full_name),
        date_of_birth=parse_date_of_birth(date_of_birth),
    )


def coerce_score(raw: Any) -> int:
    """Coerce raw mark input to an integer.

    Unparsable input becomes 0. Strings contribute their leading integer
    part, so "85.7" is 85 and "12abc" is 12.
    """
    if raw is None or isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if raw != raw or raw in (float("inf"), float("-inf")):
            return 0
        return int(raw)
    match = _LEADING_INT.match(str(raw))
    if not match:
        return 0
    return int(match.group(1))


def validate_mark_input(raw: Any) -> int:
    """Coerce a mark and reject it if it falls outside 0-100."""
    score = coerce_score(raw)
    if score < 0 or score > MAX_SCORE:
        raise OutOfRangeError("score", score, 0, MAX_SCORE)
    return score


def validate_marks(marks: Mapping[str, Any] | None) -> dict[str, int]:
    """Validate a subject code -> raw score mapping."""
    validated: dict[str, int] = {}
    for code, raw in (marks or {}).items():
        subject = get_subject(code)
        validated[subject.code] = validate_mark_input(raw)
    return validated
