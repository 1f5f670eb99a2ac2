import uuid
from decimal import Decimal

import pytest


QUARTER_BODY = {
    "academic_year": "2024-25",
    "quarter_name": "q2",
    "quarter_number": 2,
    "start_date": "2024-07-01",
    "end_date": "2024-09-30",
    "due_date": "2024-10-10",
}


@pytest.mark.asyncio
async def test_create_and_list_classes(client, db_session, auth_headers):
    admin = auth_headers("admin")

    r = await client.post(
        "/api/v1/classes", json={"class_name": "Grade 2", "display_order": 2, "quarterly_fee": "4500"}, headers=admin
    )
    dup = await client.post("/api/v1/classes", json={"class_name": "Grade 2"}, headers=admin)
    listed = await client.get("/api/v1/classes", headers=auth_headers("cashier"))

    assert r.status_code == 201, r.text
    assert dup.status_code == 409
    assert [c["class_name"] for c in listed.json()] == ["Grade 2"]


@pytest.mark.asyncio
async def test_cashier_cannot_create_class(client, db_session, auth_headers):
    r = await client.post("/api/v1/classes", json={"class_name": "Grade 3"}, headers=auth_headers("cashier"))
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_student_lifecycle(client, school, auth_headers):
    admin = auth_headers("admin")
    class_id = str(school.school_class.id)

    created = await client.post(
        "/api/v1/students",
        json={
            "admission_no": "adm010",
            "name": "Meera Das",
            "class_id": class_id,
            "parent_email": "meera.parent@example.com",
            "concession_percentage": "10",
        },
        headers=admin,
    )
    assert created.status_code == 201, created.text
    student = created.json()
    assert student["admission_no"] == "ADM010"
    assert student["class_name"] == "Grade 1"

    found = await client.get("/api/v1/students", params={"search": "meera"}, headers=auth_headers("cashier"))
    assert [s["id"] for s in found.json()] == [student["id"]]

    patched = await client.patch(
        f"/api/v1/students/{student['id']}", json={"concession_amount": "250"}, headers=admin
    )
    assert Decimal(patched.json()["concession_amount"]) == Decimal("250")

    removed = await client.delete(f"/api/v1/students/{student['id']}", headers=admin)
    assert removed.status_code == 200
    assert removed.json()["is_active"] is False

    active = await client.get("/api/v1/students", params={"search": "meera"}, headers=admin)
    assert active.json() == []


@pytest.mark.asyncio
async def test_duplicate_admission_number(client, school, auth_headers):
    body = {"admission_no": "ADM001", "name": "Someone Else", "class_id": str(school.school_class.id)}
    r = await client.post("/api/v1/students", json=body, headers=auth_headers("admin"))
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_student_with_unknown_class(client, db_session, auth_headers):
    body = {"admission_no": "ADM020", "name": "Nobody", "class_id": str(uuid.uuid4())}
    r = await client.post("/api/v1/students", json=body, headers=auth_headers("admin"))
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_quarter_create_and_late_fee_policy(client, db_session, auth_headers):
    admin = auth_headers("admin")

    created = await client.post(
        "/api/v1/quarters", json={**QUARTER_BODY, "late_fee_type": "percentage", "late_fee_percentage": "2"}, headers=admin
    )
    assert created.status_code == 201, created.text
    quarter = created.json()
    assert quarter["quarter_name"] == "Q2"
    assert quarter["late_fee_type"] == "percentage"
    assert quarter["max_late_fee"] is None

    patched = await client.patch(
        f"/api/v1/quarters/{quarter['id']}/late-fee",
        json={"apply_daily": True, "max_late_fee": "500"},
        headers=admin,
    )
    assert patched.status_code == 200, patched.text
    body = patched.json()
    assert body["apply_daily"] is True
    assert Decimal(body["max_late_fee"]) == Decimal("500")
    assert body["late_fee_type"] == "percentage"

    listed = await client.get(
        "/api/v1/quarters", params={"academic_year": "2024-25"}, headers=auth_headers("parent", student_ids=[])
    )
    assert [q["quarter_number"] for q in listed.json()] == [2]


@pytest.mark.asyncio
async def test_quarter_dates_must_be_ordered(client, db_session, auth_headers):
    body = {**QUARTER_BODY, "due_date": "2024-09-01"}
    r = await client.post("/api/v1/quarters", json=body, headers=auth_headers("admin"))
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_duplicate_quarter_number(client, db_session, auth_headers):
    admin = auth_headers("admin")
    first = await client.post("/api/v1/quarters", json=QUARTER_BODY, headers=admin)
    second = await client.post("/api/v1/quarters", json=QUARTER_BODY, headers=admin)
    assert first.status_code == 201
    assert second.status_code == 409


@pytest.mark.asyncio
async def test_fee_structure_total_is_derived(client, school, auth_headers):
    admin = auth_headers("admin")
    class_id = str(school.school_class.id)
    quarter = (await client.post("/api/v1/quarters", json=QUARTER_BODY, headers=admin)).json()

    r = await client.post(
        "/api/v1/fee-structures",
        json={
            "class_id": class_id,
            "quarter_id": quarter["id"],
            "tuition_fee": "4000",
            "transport_fee": "600",
            "activity_fee": "150.50",
        },
        headers=admin,
    )
    assert r.status_code == 201, r.text
    fs = r.json()
    assert Decimal(fs["total_fee"]) == Decimal("4750.50")

    patched = await client.patch(f"/api/v1/fee-structures/{fs['id']}", json={"transport_fee": "0"}, headers=admin)
    assert Decimal(patched.json()["total_fee"]) == Decimal("4150.50")

    listed = await client.get(
        "/api/v1/fee-structures", params={"quarter_id": quarter["id"]}, headers=auth_headers("cashier")
    )
    assert [f["id"] for f in listed.json()] == [fs["id"]]


@pytest.mark.asyncio
async def test_duplicate_fee_structure(client, school, auth_headers):
    body = {"class_id": str(school.school_class.id), "quarter_id": str(school.quarter.id), "tuition_fee": "1"}
    r = await client.post("/api/v1/fee-structures", json=body, headers=auth_headers("admin"))
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_extra_charge_scopes(client, school, auth_headers):
    admin = auth_headers("admin", user_id="admin-1")
    quarter_id = str(school.quarter.id)
    student_id = str(school.student.id)

    individual = await client.post(
        "/api/v1/extra-charges",
        json={"quarter_id": quarter_id, "scope": "INDIVIDUAL", "student_id": student_id, "title": "Library fine", "amount": "75"},
        headers=admin,
    )
    assert individual.status_code == 201, individual.text
    assert individual.json()["created_by"] == "admin-1"

    mismatched = await client.post(
        "/api/v1/extra-charges",
        json={"quarter_id": quarter_id, "scope": "SCHOOL", "student_id": student_id, "title": "Bad", "amount": "10"},
        headers=admin,
    )
    assert mismatched.status_code == 422

    listed = await client.get("/api/v1/extra-charges", params={"student_id": student_id}, headers=admin)
    assert [c["title"] for c in listed.json()] == ["Library fine"]

    fee = await client.get(
        f"/api/v1/balances/students/{student_id}", params={"as_of": "2024-07-01"}, headers=admin
    )
    assert Decimal(fee.json()["quarters"][0]["extra_charges_amount"]) == Decimal("75")

    deleted = await client.delete(f"/api/v1/extra-charges/{individual.json()['id']}", headers=admin)
    assert deleted.status_code == 204
    again = await client.delete(f"/api/v1/extra-charges/{individual.json()['id']}", headers=admin)
    assert again.status_code == 404
