"""Student record service: the repository for students and their marks."""

import logging
from datetime import date, datetime
from io import BytesIO
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from markscard.core.exceptions import DuplicateRecordError, NotFoundError, ValidationError
from markscard.core.subjects import SUBJECT_CODES, SUBJECTS, get_subject
from markscard.models.mark import MarkEntry
from markscard.models.student import Student
from markscard.schemas.result import GradedViewResponse
from markscard.schemas.student import (
    PaginatedStudentResponse,
    StudentBulkUploadResult,
    StudentCreate,
    StudentDetail,
    StudentFilter,
    StudentListItem,
    StudentUpdate,
)
from markscard.services.grading import grade_marks, percentage, total
from markscard.services.validation import (
    normalize_seat_number,
    parse_date_of_birth,
    validate_full_name,
    validate_mark_input,
    validate_marks,
    validate_student_input,
)

logger = logging.getLogger(__name__)


# Excel template columns for student upload: (key, header, required)
STUDENT_TEMPLATE_COLUMNS = [
    ("seat_number", "Seat Number", True),
    ("full_name", "Full Name", True),
    ("date_of_birth", "Date of Birth", True),
] + [(s.code, s.code, False) for s in SUBJECTS]

REGISTER_COLUMNS = (
    ["Seat Number", "Full Name", "Date of Birth"]
    + list(SUBJECT_CODES)
    + ["Total", "Percentage", "GPA", "Grade", "Status"]
)

ORDER_COLUMNS = {
    "seat_number": Student.seat_number,
    "full_name": Student.full_name,
    "created_at": Student.created_at,
}

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)
CENTER_ALIGN = Alignment(horizontal="center", vertical="center")


class StudentService:
    """Student management service."""

    def __init__(self, db: Session):
        self.db = db

    # ==========================================
    # Student records
    # ==========================================

    def _ensure_seat_available(self, seat_number: str, exclude_id: int | None = None) -> None:
        query = select(Student.id).where(Student.seat_number == seat_number)
        if exclude_id is not None:
            query = query.where(Student.id != exclude_id)
        if self.db.execute(query).first() is not None:
            raise DuplicateRecordError(
                f"Seat number {seat_number} is already registered",
                details={"seat_number": seat_number},
            )

    def _flush(self, seat_number: str) -> None:
        try:
            self.db.flush()
        except IntegrityError as e:
            raise DuplicateRecordError(
                f"Seat number {seat_number} is already registered",
                details={"seat_number": seat_number},
            ) from e

    def create_student(self, request: StudentCreate) -> StudentDetail:
        """Create a student together with a mark row for every subject."""
        data = validate_student_input(request.seat_number, request.full_name, request.date_of_birth)
        initial_marks = validate_marks(request.marks)
        self._ensure_seat_available(data.seat_number)

        student = Student(
            seat_number=data.seat_number,
            full_name=data.full_name,
            date_of_birth=data.date_of_birth,
        )
        self.db.add(student)
        # Mark rows reference the generated id, so the student is flushed first
        self._flush(data.seat_number)

        for code in SUBJECT_CODES:
            student.marks.append(
                MarkEntry(
                    student_id=student.id,
                    subject_code=code,
                    score=initial_marks.get(code, 0),
                )
            )
        self.db.flush()
        self.db.refresh(student)

        logger.info(f"Created student {student.seat_number} (id={student.id})")
        return self.to_detail(student)

    def get_student(self, student_id: int) -> Student:
        """Get student by ID."""
        result = self.db.execute(select(Student).where(Student.id == student_id))
        student = result.scalar_one_or_none()
        if not student:
            raise NotFoundError("Student", str(student_id))
        return student

    def get_student_detail(self, student_id: int) -> StudentDetail:
        return self.to_detail(self.get_student(student_id))

    def update_student(self, student_id: int, request: StudentUpdate) -> StudentDetail:
        """Update identity fields of a student."""
        student = self.get_student(student_id)
        update_data = request.model_dump(exclude_unset=True)

        if "seat_number" in update_data:
            seat_number = normalize_seat_number(update_data["seat_number"])
            if seat_number != student.seat_number:
                self._ensure_seat_available(seat_number, exclude_id=student.id)
            student.seat_number = seat_number
        if "full_name" in update_data:
            student.full_name = validate_full_name(update_data["full_name"])
        if "date_of_birth" in update_data:
            student.date_of_birth = parse_date_of_birth(update_data["date_of_birth"])

        self._flush(student.seat_number)
        self.db.refresh(student)
        return self.to_detail(student)

    def delete_student(self, student_id: int) -> None:
        """Delete a student and all of its marks."""
        student = self.get_student(student_id)
        seat_number = student.seat_number
        self.db.delete(student)
        self.db.flush()
        logger.info(f"Deleted student {seat_number} (id={student_id})")

    def find_student_by_credentials(
        self,
        seat_number: str,
        date_of_birth: date,
    ) -> Student | None:
        """Return the single student matching both fields, or None."""
        result = self.db.execute(
            select(Student).where(
                Student.seat_number == seat_number,
                Student.date_of_birth == date_of_birth,
            )
        )
        matches = result.scalars().all()
        if len(matches) != 1:
            return None
        return matches[0]

    def list_students(
        self,
        filters: StudentFilter | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedStudentResponse:
        """List students with seat number search and pagination."""
        filters = filters or StudentFilter()
        query = select(Student)

        if filters.search:
            term = filters.search.upper()
            for char in ("\\", "%", "_"):
                term = term.replace(char, "\\" + char)
            query = query.where(Student.seat_number.ilike(f"%{term}%", escape="\\"))

        count_query = select(func.count()).select_from(query.subquery())
        total_count = self.db.execute(count_query).scalar() or 0

        offset = (page - 1) * page_size
        query = query.order_by(ORDER_COLUMNS[filters.order_by], Student.id)
        query = query.offset(offset).limit(page_size)

        students = self.db.execute(query).scalars().all()

        return PaginatedStudentResponse(
            items=[self.to_list_item(s) for s in students],
            total=total_count,
            page=page,
            page_size=page_size,
            total_pages=(total_count + page_size - 1) // page_size,
        )

    # ==========================================
    # Marks
    # ==========================================

    def list_marks_for_student(self, student_id: int) -> list[MarkEntry]:
        self.get_student(student_id)
        result = self.db.execute(
            select(MarkEntry)
            .where(MarkEntry.student_id == student_id)
            .order_by(MarkEntry.id)
        )
        return list(result.scalars().all())

    def upsert_mark(self, student_id: int, subject_code: str, score: Any) -> StudentDetail:
        """Set one subject's score, creating the row if it is absent."""
        subject = get_subject(subject_code)
        value = validate_mark_input(score)
        student = self.get_student(student_id)

        entry = next((m for m in student.marks if m.subject_code == subject.code), None)
        if entry is None:
            student.marks.append(
                MarkEntry(student_id=student.id, subject_code=subject.code, score=value)
            )
        else:
            entry.score = value

        self.db.flush()
        return self.to_detail(student)

    def clear_mark(self, student_id: int, subject_code: str) -> StudentDetail:
        """Remove a subject's mark row; the subject then counts as absent."""
        subject = get_subject(subject_code)
        student = self.get_student(student_id)

        entry = next((m for m in student.marks if m.subject_code == subject.code), None)
        if entry is None:
            raise NotFoundError("Mark", f"{student.seat_number}/{subject.code}")
        student.marks.remove(entry)
        self.db.flush()
        return self.to_detail(student)

    # ==========================================
    # Views
    # ==========================================

    @staticmethod
    def to_detail(student: Student) -> StudentDetail:
        scores = student.scores()
        return StudentDetail(
            id=student.id,
            seat_number=student.seat_number,
            full_name=student.full_name,
            date_of_birth=student.date_of_birth,
            created_at=student.created_at,
            updated_at=student.updated_at,
            marks=scores,
            result=GradedViewResponse.model_validate(grade_marks(scores)),
        )

    @staticmethod
    def to_list_item(student: Student) -> StudentListItem:
        scores = student.scores()
        return StudentListItem(
            id=student.id,
            seat_number=student.seat_number,
            full_name=student.full_name,
            date_of_birth=student.date_of_birth,
            created_at=student.created_at,
            updated_at=student.updated_at,
            marks=scores,
            total_score=total(scores),
            percentage=percentage(scores),
        )

    # ==========================================
    # Excel template, upload and export
    # ==========================================

    def _write_header(self, ws, headers: list[str]) -> None:
        for col_idx, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col_idx, value=header)
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.border = THIN_BORDER
            cell.alignment = CENTER_ALIGN

    def generate_template(self) -> bytes:
        """Generate Excel template for student bulk upload."""
        wb = Workbook()
        ws = wb.active
        ws.title = "Students"

        self._write_header(ws, [col[1] for col in STUDENT_TEMPLATE_COLUMNS])

        sample_data = ["1BM20CS001", "John Doe", "2002-05-15", 85, 78, 92, 88, 81]
        for col_idx, value in enumerate(sample_data, start=1):
            ws.cell(row=2, column=col_idx, value=value).border = THIN_BORDER

        column_widths = [15, 25, 15] + [8] * len(SUBJECTS)
        for col_idx, width in enumerate(column_widths, start=1):
            ws.column_dimensions[chr(64 + col_idx)].width = width

        instructions_ws = wb.create_sheet("Instructions")
        instructions_ws.column_dimensions["A"].width = 20
        instructions_ws.column_dimensions["B"].width = 60
        instructions = [
            ("STUDENT UPLOAD INSTRUCTIONS", ""),
            ("", ""),
            ("Seat Number", "Required. Stored in uppercase; must be unique"),
            ("Full Name", "Required"),
            ("Date of Birth", "Required. YYYY-MM-DD (e.g., 2002-05-15)"),
            ("Subject columns", "Marks out of 100. Blank cells are recorded as 0"),
        ] + [(s.code, f"{s.name} ({s.credits} credits)") for s in SUBJECTS]

        for row_idx, (col1, col2) in enumerate(instructions, start=1):
            cell = instructions_ws.cell(row=row_idx, column=1, value=col1)
            instructions_ws.cell(row=row_idx, column=2, value=col2)
            if row_idx == 1:
                cell.font = Font(bold=True, size=14)

        output = BytesIO()
        wb.save(output)
        output.seek(0)
        return output.getvalue()

    def bulk_upload(self, file_content: bytes) -> StudentBulkUploadResult:
        """Create students with marks from an Excel workbook.

        Invalid rows are reported and skipped; valid rows are created.
        """
        logger.info(f"[STUDENT UPLOAD] Starting - file_size={len(file_content)} bytes")
        try:
            wb = load_workbook(BytesIO(file_content), data_only=True)
            ws = wb.active
        except Exception as e:
            logger.error(f"[STUDENT UPLOAD] Failed to load Excel: {str(e)}")
            raise ValidationError(f"Invalid Excel file: {str(e)}")

        rows = list(ws.iter_rows(min_row=2, values_only=True))
        if not rows:
            raise ValidationError("No data found in Excel file")

        existing = set(self.db.execute(select(Student.seat_number)).scalars().all())
        errors = []
        successful = 0

        for row_num, row in enumerate(rows, start=2):
            if not any(cell not in (None, "") for cell in row):
                continue
            cells = list(row) + [None] * (len(STUDENT_TEMPLATE_COLUMNS) - len(row))
            column = None
            try:
                dob = cells[2].date() if isinstance(cells[2], datetime) else cells[2]
                data = validate_student_input(
                    str(cells[0]) if cells[0] is not None else None,
                    str(cells[1]) if cells[1] is not None else None,
                    dob,
                )
                scores = {}
                for offset, code in enumerate(SUBJECT_CODES, start=3):
                    column = code
                    scores[code] = validate_mark_input(cells[offset])

                column = None
                if data.seat_number in existing:
                    raise DuplicateRecordError(
                        f"Seat number {data.seat_number} is already registered"
                    )

                student = Student(
                    seat_number=data.seat_number,
                    full_name=data.full_name,
                    date_of_birth=data.date_of_birth,
                    marks=[MarkEntry(subject_code=c, score=s) for c, s in scores.items()],
                )
                self.db.add(student)
                existing.add(data.seat_number)
                successful += 1

            except (ValidationError, DuplicateRecordError) as e:
                errors.append({
                    "row": row_num,
                    "column": column,
                    "message": e.message,
                    "details": e.details,
                })

        try:
            self.db.flush()
        except IntegrityError as e:
            logger.error(f"[STUDENT UPLOAD] Seat number conflict while saving: {str(e.orig)}")
            raise DuplicateRecordError("A seat number in this upload is already registered") from e

        total_rows = successful + len(errors)
        message = f"Uploaded {successful} of {total_rows} students."
        if errors:
            message += f" {len(errors)} rows failed."
        logger.info(f"[STUDENT UPLOAD] Completed - {message}")

        return StudentBulkUploadResult(
            total_rows=total_rows,
            successful_rows=successful,
            failed_rows=len(errors),
            errors=errors,
            message=message,
        )

    def export_results(self) -> bytes:
        """Export every student's marks and computed results to Excel."""
        wb = Workbook()
        ws = wb.active
        ws.title = "Results"

        self._write_header(ws, REGISTER_COLUMNS)

        students = self.db.execute(select(Student).order_by(Student.seat_number)).scalars().all()
        for row_idx, student in enumerate(students, start=2):
            scores = student.scores()
            view = grade_marks(scores)
            values = (
                [student.seat_number, student.full_name, student.date_of_birth.isoformat()]
                + [scores.get(code) for code in SUBJECT_CODES]
                + [
                    view.total_score,
                    float(view.percentage),
                    view.gpa,
                    view.overall_grade,
                    view.overall_status,
                ]
            )
            for col_idx, value in enumerate(values, start=1):
                ws.cell(row=row_idx, column=col_idx, value=value).border = THIN_BORDER

        ws.column_dimensions["A"].width = 15
        ws.column_dimensions["B"].width = 25
        ws.column_dimensions["C"].width = 15
        ws.freeze_panes = "A2"

        output = BytesIO()
        wb.save(output)
        output.seek(0)
        return output.getvalue()
