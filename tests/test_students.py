from sqlalchemy import select

from markscard.models.mark import MarkEntry
from markscard.models.student import Student


def create(client, headers, **overrides):
    payload = {
        "seat_number": "1BM20CS002",
        "full_name": "Jane Smith",
        "date_of_birth": "2002-03-22",
    }
    payload.update(overrides)
    return client.post("/api/v1/students", json=payload, headers=headers)


def test_create_student_uppercases_seat_and_grades(john):
    assert john["seat_number"] == "1BM20CS001"
    assert john["marks"] == {"DSA": 85, "ADA": 78, "DBMS": 92, "JAVA": 88, "OS": 81}
    assert john["result"]["total_score"] == 424
    assert john["result"]["percentage"] == "84.80"
    assert john["result"]["overall_grade"] == "A"
    assert john["result"]["overall_status"] == "First Class"


def test_create_student_zero_fills_every_subject(client, auth_headers, db):
    response = create(client, auth_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["marks"] == {"DSA": 0, "ADA": 0, "DBMS": 0, "JAVA": 0, "OS": 0}
    assert all(s["recorded"] for s in body["result"]["subjects"])

    rows = db.execute(select(MarkEntry).where(MarkEntry.student_id == body["id"])).scalars().all()
    assert len(rows) == 5


def test_create_student_requires_fields(client, auth_headers):
    response = create(client, auth_headers, full_name="  ", date_of_birth="")

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "MISSING_FIELD"
    assert error["details"]["fields"] == ["full_name", "date_of_birth"]


def test_create_student_rejects_bad_date(client, auth_headers):
    response = create(client, auth_headers, date_of_birth="2002-02-31")

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "INVALID_DATE"


def test_create_student_rejects_out_of_range_mark(client, auth_headers, db):
    response = create(client, auth_headers, marks={"DSA": 101})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "OUT_OF_RANGE"
    assert db.execute(select(Student)).first() is None


def test_create_student_rejects_unknown_subject(client, auth_headers):
    response = create(client, auth_headers, marks={"PHYSICS": 50})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "UNKNOWN_SUBJECT"


def test_duplicate_seat_number_is_a_conflict(client, auth_headers, john):
    response = create(client, auth_headers, seat_number="1bm20CS001")

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "DUPLICATE_RECORD"


def test_list_students_with_search_and_summary(client, auth_headers, john):
    create(client, auth_headers)
    create(client, auth_headers, seat_number="1BM20EC010", full_name="Ravi Kumar")

    response = client.get("/api/v1/students", headers=auth_headers)
    body = response.json()
    assert body["total"] == 3
    assert [s["seat_number"] for s in body["items"]] == ["1BM20CS001", "1BM20CS002", "1BM20EC010"]
    assert body["items"][0]["total_score"] == 424
    assert body["items"][0]["percentage"] == "84.80"

    response = client.get("/api/v1/students", params={"search": "cs"}, headers=auth_headers)
    assert [s["seat_number"] for s in response.json()["items"]] == ["1BM20CS001", "1BM20CS002"]


def test_list_students_orders_by_name(client, auth_headers, john):
    create(client, auth_headers, seat_number="1BM20CS000", full_name="Zara Ali")

    response = client.get("/api/v1/students", params={"order_by": "full_name"}, headers=auth_headers)
    assert [s["full_name"] for s in response.json()["items"]] == ["John Doe", "Zara Ali"]


def test_list_students_paginates(client, auth_headers):
    for n in range(3):
        create(client, auth_headers, seat_number=f"1BM20CS10{n}")

    response = client.get("/api/v1/students", params={"page": 2, "page_size": 2}, headers=auth_headers)
    body = response.json()
    assert body["total"] == 3
    assert body["total_pages"] == 2
    assert [s["seat_number"] for s in body["items"]] == ["1BM20CS102"]


def test_get_student(client, auth_headers, john):
    response = client.get(f"/api/v1/students/{john['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["result"]["per_subject_grade"]["DBMS"] == "A+"


def test_unknown_student_is_not_found(client, auth_headers):
    response = client.get("/api/v1/students/999", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_update_student(client, auth_headers, john):
    response = client.patch(
        f"/api/v1/students/{john['id']}",
        json={"seat_number": "1bm20cs099", "full_name": "John Q. Doe"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["seat_number"] == "1BM20CS099"
    assert body["full_name"] == "John Q. Doe"
    assert body["date_of_birth"] == "2002-05-15"
    assert body["result"]["total_score"] == 424


def test_update_student_rejects_blank_name(client, auth_headers, john):
    response = client.patch(
        f"/api/v1/students/{john['id']}",
        json={"full_name": ""},
        headers=auth_headers,
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "MISSING_FIELD"


def test_update_student_rejects_taken_seat_number(client, auth_headers, john):
    other = create(client, auth_headers).json()

    response = client.patch(
        f"/api/v1/students/{other['id']}",
        json={"seat_number": "1BM20CS001"},
        headers=auth_headers,
    )

    assert response.status_code == 409


def test_update_deleted_student_is_not_found(client, auth_headers, john):
    client.delete(f"/api/v1/students/{john['id']}", headers=auth_headers)

    response = client.patch(
        f"/api/v1/students/{john['id']}",
        json={"full_name": "Ghost"},
        headers=auth_headers,
    )
    assert response.status_code == 404


def test_delete_student_removes_marks(client, auth_headers, john, db):
    response = client.delete(f"/api/v1/students/{john['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert db.execute(select(Student).where(Student.id == john["id"])).first() is None
    assert db.execute(select(MarkEntry).where(MarkEntry.student_id == john["id"])).first() is None
    assert client.get(f"/api/v1/students/{john['id']}/marks", headers=auth_headers).status_code == 404


def test_upsert_mark_updates_results(client, auth_headers, john):
    response = client.put(
        f"/api/v1/students/{john['id']}/marks/ada",
        json={"score": 98},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["marks"]["ADA"] == 98
    assert body["result"]["total_score"] == 444
    assert body["result"]["percentage"] == "88.80"


def test_upsert_mark_is_idempotent(client, auth_headers, john, db):
    url = f"/api/v1/students/{john['id']}/marks/DSA"
    first = client.put(url, json={"score": 70}, headers=auth_headers).json()
    second = client.put(url, json={"score": 70}, headers=auth_headers).json()

    assert first["result"] == second["result"]
    rows = db.execute(
        select(MarkEntry).where(MarkEntry.student_id == john["id"], MarkEntry.subject_code == "DSA")
    ).scalars().all()
    assert len(rows) == 1


def test_upsert_mark_coerces_non_numeric_to_zero(client, auth_headers, john):
    response = client.put(
        f"/api/v1/students/{john['id']}/marks/OS",
        json={"score": "absent"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["marks"]["OS"] == 0


def test_upsert_mark_rejects_out_of_range(client, auth_headers, john):
    response = client.put(
        f"/api/v1/students/{john['id']}/marks/OS",
        json={"score": 120},
        headers=auth_headers,
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "OUT_OF_RANGE"
    current = client.get(f"/api/v1/students/{john['id']}", headers=auth_headers).json()
    assert current["marks"]["OS"] == 81


def test_upsert_mark_rejects_unknown_subject(client, auth_headers, john):
    response = client.put(
        f"/api/v1/students/{john['id']}/marks/CHEM",
        json={"score": 50},
        headers=auth_headers,
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "UNKNOWN_SUBJECT"


def test_clear_mark_distinguishes_absent_from_zero(client, auth_headers, john):
    response = client.delete(f"/api/v1/students/{john['id']}/marks/JAVA", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert "JAVA" not in body["marks"]
    assert body["result"]["total_score"] == 336
    java = next(s for s in body["result"]["subjects"] if s["code"] == "JAVA")
    assert java == {
        "code": "JAVA",
        "name": "Java Programming",
        "credits": 4,
        "score": 0,
        "recorded": False,
        "grade": "F",
    }

    marks = client.get(f"/api/v1/students/{john['id']}/marks", headers=auth_headers).json()
    assert sorted(m["subject_code"] for m in marks) == ["ADA", "DBMS", "DSA", "OS"]

    again = client.delete(f"/api/v1/students/{john['id']}/marks/JAVA", headers=auth_headers)
    assert again.status_code == 404

    restored = client.put(
        f"/api/v1/students/{john['id']}/marks/JAVA",
        json={"score": 0},
        headers=auth_headers,
    ).json()
    assert restored["marks"]["JAVA"] == 0


def test_subjects_catalog_is_public(client):
    response = client.get("/api/v1/subjects")

    assert response.status_code == 200
    assert [s["code"] for s in response.json()] == ["DSA", "ADA", "DBMS", "JAVA", "OS"]
    assert all(s["credits"] == 4 for s in response.json())


def test_search_treats_wildcards_literally(client, auth_headers, john):
    create(client, auth_headers, seat_number="1BM20_CS5")

    underscore = client.get("/api/v1/students", params={"search": "_"}, headers=auth_headers)
    percent = client.get("/api/v1/students", params={"search": "%"}, headers=auth_headers)

    assert [s["seat_number"] for s in underscore.json()["items"]] == ["1BM20_CS5"]
    assert percent.json()["items"] == []
