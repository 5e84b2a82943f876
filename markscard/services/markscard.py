"""Markscard PDF rendering."""

import re
from datetime import datetime, timezone
from io import BytesIO
from urllib.parse import quote

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from markscard.schemas.result import StudentIdentity
from markscard.services.grading import GradedView

# Subject table column x-positions: code, name, credits, score, grade
TABLE_COLUMNS = (50, 110, 360, 420, 480)


def markscard_filename(seat_number: str) -> str:
    return f"markscard_{seat_number}.pdf"


_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and an RFC 5987 UTF-8 name."""
    fallback = _UNSAFE_FILENAME_CHARS.sub("_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def render_markscard(
    identity: StudentIdentity,
    view: GradedView,
    institution_name: str,
    generated_at: datetime | None = None,
) -> bytes:
    """Render a one-page markscard PDF for a graded student record."""
    generated_at = generated_at or datetime.now(timezone.utc)

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4
    c.setTitle(f"Markscard - {identity.seat_number}")

    # Institution header
    y = height - 60
    c.setFont("Helvetica-Bold", 18)
    c.drawCentredString(width / 2, y, institution_name)
    y -= 22
    c.setFont("Helvetica", 12)
    c.drawCentredString(width / 2, y, "Statement of Marks")
    y -= 14
    c.line(50, y, width - 50, y)

    # Student identity
    y -= 28
    c.setFont("Helvetica-Bold", 12)
    c.drawString(50, y, "Student Information")
    c.setFont("Helvetica", 11)
    y -= 18
    c.drawString(50, y, f"Name: {identity.full_name}")
    y -= 16
    c.drawString(50, y, f"Seat Number (USN): {identity.seat_number}")
    y -= 16
    c.drawString(50, y, f"Date of Birth: {identity.date_of_birth.isoformat()}")

    # Subject table
    y -= 32
    c.setFont("Helvetica-Bold", 11)
    for x, header in zip(TABLE_COLUMNS, ("Code", "Subject", "Credits", "Marks", "Grade")):
        c.drawString(x, y, header)
    y -= 6
    c.line(50, y, width - 50, y)

    c.setFont("Helvetica", 11)
    for subject in view.subjects:
        y -= 18
        row = (
            subject.code,
            subject.name,
            str(subject.credits),
            f"{subject.score}/100",
            subject.grade,
        )
        for x, value in zip(TABLE_COLUMNS, row):
            c.drawString(x, y, value)
    y -= 8
    c.line(50, y, width - 50, y)

    # Summary
    y -= 28
    c.setFont("Helvetica-Bold", 12)
    c.drawString(50, y, "Overall Performance")
    c.setFont("Helvetica", 11)
    summary = (
        ("Total Marks", f"{view.total_score}/{view.max_total}"),
        ("Percentage", f"{view.percentage}%"),
        ("GPA", f"{view.gpa:.1f} / 4.0"),
        ("Overall Grade", view.overall_grade),
        ("Result", view.overall_status),
    )
    for label, value in summary:
        y -= 16
        c.drawString(50, y, f"{label}:")
        c.drawString(180, y, value)

    # Footer
    c.setFont("Helvetica", 9)
    c.drawString(50, 40, f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M UTC')}")

    c.showPage()
    c.save()
    buffer.seek(0)
    return buffer.getvalue()
