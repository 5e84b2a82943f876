from datetime import date, datetime, timezone
from io import BytesIO

import pytest
from openpyxl import Workbook, load_workbook

from markscard.core.exceptions import DuplicateRecordError
from markscard.models.student import Student
from markscard.schemas.result import StudentIdentity
from markscard.services.grading import grade_marks
from markscard.services.markscard import content_disposition, markscard_filename, render_markscard
from markscard.services.student import StudentService


def workbook_bytes(rows):
    wb = Workbook()
    ws = wb.active
    ws.append(["Seat Number", "Full Name", "Date of Birth", "DSA", "ADA", "DBMS", "JAVA", "OS"])
    for row in rows:
        ws.append(row)
    output = BytesIO()
    wb.save(output)
    return output.getvalue()


def upload(client, headers, content, filename="students.xlsx"):
    return client.post(
        "/api/v1/students/upload",
        files={"file": (filename, content, "application/octet-stream")},
        headers=headers,
    )


def test_render_markscard_produces_pdf():
    identity = StudentIdentity(
        seat_number="1BM20CS001",
        full_name="John Doe",
        date_of_birth=date(2002, 5, 15),
    )
    view = grade_marks({"DSA": 85, "ADA": 78, "DBMS": 92, "JAVA": 88, "OS": 81})

    content = render_markscard(
        identity,
        view,
        institution_name="Test Institute",
        generated_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )

    assert content.startswith(b"%PDF")
    assert len(content) > 500


def test_admin_markscard_download(client, auth_headers, john):
    response = client.get(f"/api/v1/students/{john['id']}/markscard", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_template_download(client, auth_headers):
    response = client.get("/api/v1/students/template", headers=auth_headers)

    assert response.status_code == 200
    wb = load_workbook(BytesIO(response.content))
    headers = [cell.value for cell in wb["Students"][1]]
    assert headers == ["Seat Number", "Full Name", "Date of Birth", "DSA", "ADA", "DBMS", "JAVA", "OS"]
    assert "Instructions" in wb.sheetnames


def test_bulk_upload_creates_valid_rows(client, auth_headers, john):
    content = workbook_bytes([
        ["1bm20cs002", "Jane Smith", "2002-03-22", 90, 85, 89, 94, 87],
        ["1BM20CS003", "Ravi Kumar", datetime(2002, 7, 1), 55, None, "60", 40, 70],
        ["1BM20CS001", "Duplicate", "2002-05-15", 10, 10, 10, 10, 10],
        ["1BM20CS004", "", "2002-01-01", 10, 10, 10, 10, 10],
        ["1BM20CS005", "Too High", "2002-01-01", 101, 10, 10, 10, 10],
        [None, None, None, None, None, None, None, None],
    ])

    response = upload(client, auth_headers, content)

    assert response.status_code == 200
    body = response.json()
    assert body["total_rows"] == 5
    assert body["successful_rows"] == 2
    assert body["failed_rows"] == 3
    assert [e["row"] for e in body["errors"]] == [4, 5, 6]
    assert body["errors"][2]["column"] == "DSA"

    students = client.get("/api/v1/students", headers=auth_headers).json()["items"]
    by_seat = {s["seat_number"]: s for s in students}
    assert set(by_seat) == {"1BM20CS001", "1BM20CS002", "1BM20CS003"}
    assert by_seat["1BM20CS002"]["total_score"] == 445
    assert by_seat["1BM20CS003"]["marks"] == {"DSA": 55, "ADA": 0, "DBMS": 60, "JAVA": 40, "OS": 70}
    assert by_seat["1BM20CS003"]["date_of_birth"] == "2002-07-01"


def test_bulk_upload_rejects_non_excel(client, auth_headers):
    response = upload(client, auth_headers, b"seat,name", filename="students.csv")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "UPLOAD_FAILED"


def test_bulk_upload_rejects_corrupt_workbook(client, auth_headers):
    response = upload(client, auth_headers, b"not really a workbook")

    assert response.status_code == 422


def test_export_results_register(client, auth_headers, john):
    client.post(
        "/api/v1/students",
        json={"seat_number": "1BM20CS000", "full_name": "Asha Rao", "date_of_birth": "2002-01-09"},
        headers=auth_headers,
    )

    response = client.get("/api/v1/students/export", headers=auth_headers)

    assert response.status_code == 200
    ws = load_workbook(BytesIO(response.content))["Results"]
    rows = list(ws.iter_rows(values_only=True))
    assert rows[0] == (
        "Seat Number", "Full Name", "Date of Birth", "DSA", "ADA", "DBMS", "JAVA", "OS",
        "Total", "Percentage", "GPA", "Grade", "Status",
    )
    assert rows[1][0] == "1BM20CS000"
    assert rows[1][8:] == (0, 0, 0.0, "F", "Fail")
    assert rows[2] == (
        "1BM20CS001", "John Doe", "2002-05-15", 85, 78, 92, 88, 81,
        424, 84.8, 3.6, "A", "First Class",
    )


def test_content_disposition_is_ascii_safe():
    header = content_disposition(markscard_filename("1BM20CS€01"))

    header.encode("latin-1")
    assert 'filename="markscard_1BM20CS_01.pdf"' in header
    assert "filename*=UTF-8''markscard_1BM20CS%E2%82%AC01.pdf" in header


def test_content_disposition_neutralizes_header_syntax():
    header = content_disposition(markscard_filename('A"; evil=1'))

    assert header.count('"') == 2
    assert header.count(";") == 2


def test_markscard_downloads_for_non_ascii_seat_number(client, auth_headers):
    created = client.post(
        "/api/v1/students",
        json={"seat_number": "1bm20cs€01", "full_name": "Euro Seat", "date_of_birth": "2002-01-01"},
        headers=auth_headers,
    ).json()

    admin_download = client.get(f"/api/v1/students/{created['id']}/markscard", headers=auth_headers)
    student_download = client.post(
        "/api/v1/results/markscard",
        json={"seat_number": "1bm20cs€01", "date_of_birth": "2002-01-01"},
    )

    for response in (admin_download, student_download):
        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")
        assert "%E2%82%AC" in response.headers["content-disposition"]


def test_bulk_upload_reports_seat_conflict_on_save(db):
    # Pending and unflushed, so the upload's seat lookup cannot see it
    db.add(Student(seat_number="1BM20CS002", full_name="Jane Smith", date_of_birth=date(2002, 3, 22)))
    content = workbook_bytes([["1BM20CS002", "Jane Again", "2002-03-22", 1, 2, 3, 4, 5]])

    with pytest.raises(DuplicateRecordError):
        StudentService(db).bulk_upload(content)
