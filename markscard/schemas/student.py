"""Student and mark schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal

from markscard.schemas.common import BaseSchema, PaginatedResponse
from markscard.schemas.result import GradedViewResponse

# Raw inputs are validated by markscard.services.validation, not by pydantic,
# so blank and unparsable values reach the record validator.


class StudentCreate(BaseSchema):
    """Student creation schema. Subjects without a mark start at 0."""

    seat_number: str | None = None
    full_name: str | None = None
    date_of_birth: str | date | None = None
    marks: dict[str, Any] | None = None


class StudentUpdate(BaseSchema):
    """Student update schema."""

    seat_number: str | None = None
    full_name: str | None = None
    date_of_birth: str | date | None = None


class MarkUpdate(BaseSchema):
    """Mark entry schema; non-numeric input is treated as 0."""

    score: Any = None


class MarkEntryResponse(BaseSchema):
    """Stored mark row."""

    subject_code: str
    score: int
    updated_at: datetime


class StudentResponse(BaseSchema):
    """Student response schema."""

    id: int
    seat_number: str
    full_name: str
    date_of_birth: date
    created_at: datetime
    updated_at: datetime


class StudentDetail(StudentResponse):
    """Student with stored marks and computed results."""

    marks: dict[str, int]
    result: GradedViewResponse


class StudentListItem(StudentResponse):
    """Student row in the admin list with a result summary."""

    marks: dict[str, int]
    total_score: int
    percentage: Decimal


class StudentFilter(BaseSchema):
    """Student filter options."""

    search: str | None = None  # Seat number substring
    order_by: Literal["seat_number", "full_name", "created_at"] = "seat_number"


class PaginatedStudentResponse(PaginatedResponse[StudentListItem]):
    """Paginated student list."""

    items: list[StudentListItem]


class StudentBulkUploadResult(BaseSchema):
    """Result of bulk student upload."""

    total_rows: int
    successful_rows: int
    failed_rows: int
    errors: list[dict] = []
    message: str
