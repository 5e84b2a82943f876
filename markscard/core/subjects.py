"""Static catalog of the five graded subjects."""

from dataclasses import dataclass

from markscard.core.exceptions import ValidationError

MAX_SCORE = 100


@dataclass(frozen=True)
class Subject:
    code: str
    name: str
    credits: int


SUBJECTS: tuple[Subject, ...] = (
    Subject("DSA", "Data Structures & Algorithms", 4),
    Subject("ADA", "Analysis & Design of Algorithms", 4),
    Subject("DBMS", "Database Management Systems", 4),
    Subject("JAVA", "Java Programming", 4),
    Subject("OS", "Operating Systems", 4),
)

SUBJECT_CODES: tuple[str, ...] = tuple(s.code for s in SUBJECTS)

MAX_TOTAL = MAX_SCORE * len(SUBJECTS)

_BY_CODE = {s.code: s for s in SUBJECTS}


def is_known_subject(code: str) -> bool:
    return isinstance(code, str) and code.strip().upper() in _BY_CODE


def get_subject(code: str) -> Subject:
    """Look up a subject by code, case-insensitively."""
    subject = _BY_CODE.get(code.strip().upper()) if isinstance(code, str) else None
    if subject is None:
        raise ValidationError(
            f"Unknown subject code: {code}",
            details={"subject_code": code, "valid_codes": list(SUBJECT_CODES)},
            code="UNKNOWN_SUBJECT",
        )
    return subject
