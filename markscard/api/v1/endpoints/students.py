"""Student record management endpoints (administrator only)."""

from io import BytesIO
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from markscard.core.config import settings
from markscard.core.database import get_db
from markscard.core.dependencies import CurrentAdmin
from markscard.core.exceptions import UploadError
from markscard.schemas.common import MessageResponse
from markscard.schemas.student import (
    MarkEntryResponse,
    MarkUpdate,
    PaginatedStudentResponse,
    StudentBulkUploadResult,
    StudentCreate,
    StudentDetail,
    StudentFilter,
    StudentUpdate,
)
from markscard.services.markscard import content_disposition, markscard_filename
from markscard.services.result import ResultService
from markscard.services.student import StudentService

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.post("", response_model=StudentDetail, status_code=201)
def create_student(
    request: StudentCreate,
    admin: CurrentAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Create a student. Every subject gets a mark row; subjects not given
    in `marks` start at 0.
    """
    return StudentService(db).create_student(request)


@router.get("", response_model=PaginatedStudentResponse)
def list_students(
    admin: CurrentAdmin,
    db: Annotated[Session, Depends(get_db)],
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    search: str | None = None,
    order_by: Literal["seat_number", "full_name", "created_at"] = "seat_number",
):
    """List students, optionally searching by seat number."""
    filters = StudentFilter(search=search, order_by=order_by)
    return StudentService(db).list_students(filters, page, page_size)


@router.get("/template")
def download_student_template(admin: CurrentAdmin, db: Annotated[Session, Depends(get_db)]):
    """Download Excel template for student bulk upload."""
    content = StudentService(db).generate_template()

    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=students_template.xlsx"},
    )


@router.post("/upload", response_model=StudentBulkUploadResult)
def bulk_upload_students(
    admin: CurrentAdmin,
    db: Annotated[Session, Depends(get_db)],
    file: UploadFile = File(...),
):
    """
    Bulk upload students with marks from an Excel file.

    Download the template first to see the expected format.
    Partial success is allowed - invalid rows will be skipped.
    """
    if not file.filename:
        raise UploadError("No file provided")

    if not any(file.filename.lower().endswith(ext) for ext in settings.ALLOWED_EXTENSIONS):
        raise UploadError(
            f"Only {', '.join(settings.ALLOWED_EXTENSIONS)} files are allowed"
        )

    content = file.file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise UploadError(f"File size exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit")

    return StudentService(db).bulk_upload(content)


@router.get("/export")
def export_results(admin: CurrentAdmin, db: Annotated[Session, Depends(get_db)]):
    """Download every student's marks and results as an Excel register."""
    content = StudentService(db).export_results()

    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=results_register.xlsx"},
    )


@router.get("/{student_id}", response_model=StudentDetail)
def get_student(
    student_id: int,
    admin: CurrentAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """Get a student with marks and computed results."""
    return StudentService(db).get_student_detail(student_id)


@router.patch("/{student_id}", response_model=StudentDetail)
def update_student(
    student_id: int,
    request: StudentUpdate,
    admin: CurrentAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """Update a student's seat number, name or date of birth."""
    return StudentService(db).update_student(student_id, request)


@router.delete("/{student_id}", response_model=MessageResponse)
def delete_student(
    student_id: int,
    admin: CurrentAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a student and all of its marks."""
    StudentService(db).delete_student(student_id)
    return MessageResponse(message="Student deleted successfully")


@router.get("/{student_id}/marks", response_model=list[MarkEntryResponse])
def list_marks(
    student_id: int,
    admin: CurrentAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """List the stored mark rows of a student."""
    return StudentService(db).list_marks_for_student(student_id)


@router.put("/{student_id}/marks/{subject_code}", response_model=StudentDetail)
def set_mark(
    student_id: int,
    subject_code: str,
    request: MarkUpdate,
    admin: CurrentAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Set one subject's mark.
    Non-numeric input counts as 0; values outside 0-100 are rejected.
    """
    return StudentService(db).upsert_mark(student_id, subject_code, request.score)


@router.delete("/{student_id}/marks/{subject_code}", response_model=StudentDetail)
def clear_mark(
    student_id: int,
    subject_code: str,
    admin: CurrentAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """Remove one subject's mark so it is no longer recorded."""
    return StudentService(db).clear_mark(student_id, subject_code)


@router.get("/{student_id}/markscard")
def download_student_markscard(
    student_id: int,
    admin: CurrentAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """Download a student's markscard PDF."""
    student = StudentService(db).get_student(student_id)
    content = ResultService(db).markscard(student)

    return StreamingResponse(
        BytesIO(content),
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(markscard_filename(student.seat_number))},
    )
