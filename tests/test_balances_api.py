import io
import uuid
from datetime import date
from decimal import Decimal

import pytest
from openpyxl import load_workbook

from feedesk.core.models import ExtraCharge, Student, Transaction


@pytest.mark.asyncio
async def test_unpaid_student_after_due_date(client, school, auth_headers, observability):
    r = await client.get(
        f"/api/v1/balances/students/{school.student.id}",
        params={"as_of": "2024-07-15"},
        headers=auth_headers("cashier"),
    )
    assert r.status_code == 200, r.text
    body = r.json()
    q1 = body["quarters"][0]
    assert Decimal(q1["base_fee"]) == Decimal("5000")
    assert Decimal(q1["late_fee"]) == Decimal("100")
    assert Decimal(q1["total_due"]) == Decimal("5100")
    assert Decimal(q1["balance"]) == Decimal("5100")
    assert q1["is_overdue"] is True
    assert Decimal(body["totals"]["balance"]) == Decimal("5100")
    assert body["totals"]["overdue_quarters"] == 1
    assert "balance.compute.duration_ms" in [name for name, _, _ in observability.metrics]


@pytest.mark.asyncio
async def test_extra_charges_included(client, db_session, school, auth_headers):
    db_session.add_all(
        [
            ExtraCharge(
                quarter_id=school.quarter.id, scope="CLASS", class_id=school.school_class.id,
                title="Lab", amount=Decimal("300"),
            ),
            ExtraCharge(quarter_id=school.quarter.id, scope="SCHOOL", title="Annual day", amount=Decimal("50")),
        ]
    )
    await db_session.commit()

    r = await client.get(
        f"/api/v1/balances/students/{school.student.id}",
        params={"as_of": "2024-07-01"},
        headers=auth_headers("admin"),
    )
    q1 = r.json()["quarters"][0]
    assert Decimal(q1["extra_charges_amount"]) == Decimal("350")
    assert Decimal(q1["gross_due"]) == Decimal("5350")
    assert len(q1["extra_charges"]) == 2


@pytest.mark.asyncio
async def test_unknown_student_is_404(client, school, auth_headers):
    r = await client.get(f"/api/v1/balances/students/{uuid.uuid4()}", headers=auth_headers("admin"))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_parent_sees_only_linked_students(client, school, auth_headers):
    own = await client.get(
        f"/api/v1/balances/students/{school.student.id}",
        params={"as_of": "2024-07-15"},
        headers=auth_headers("parent", student_ids=[school.student.id]),
    )
    other = await client.get(
        f"/api/v1/balances/students/{school.student.id}",
        headers=auth_headers("parent", student_ids=[uuid.uuid4()]),
    )
    assert own.status_code == 200
    assert other.status_code == 403


@pytest.mark.asyncio
async def test_requires_token(client, school):
    r = await client.get(f"/api/v1/balances/students/{school.student.id}")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_defaulters_lists_students_with_balance(client, db_session, school, auth_headers):
    paid = Student(admission_no="ADM002", name="Ravi Kumar", class_id=school.school_class.id)
    db_session.add(paid)
    await db_session.flush()
    db_session.add(
        Transaction(
            student_id=paid.id, quarter_id=school.quarter.id, receipt_no="RCP-TEST-1", kind="PAYMENT",
            amount_paid=Decimal("5000"), payment_mode="cash", payment_date=date(2024, 7, 1), status="completed",
        )
    )
    await db_session.commit()

    r = await client.get(
        "/api/v1/balances/defaulters",
        params={"quarter_id": str(school.quarter.id), "as_of": "2024-07-15"},
        headers=auth_headers("cashier"),
    )
    assert r.status_code == 200, r.text
    items = r.json()
    assert [i["admission_no"] for i in items] == ["ADM001"]
    assert items[0]["parent_email"] == "parent@example.com"
    assert Decimal(items[0]["balance"]) == Decimal("5100")


@pytest.mark.asyncio
async def test_defaulters_forbidden_for_parents(client, school, auth_headers):
    r = await client.get(
        "/api/v1/balances/defaulters",
        params={"quarter_id": str(school.quarter.id)},
        headers=auth_headers("parent", student_ids=[school.student.id]),
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_defaulters_for_inactive_quarter_is_404(client, db_session, school, auth_headers):
    school.quarter.is_active = False
    await db_session.commit()

    r = await client.get(
        "/api/v1/balances/defaulters",
        params={"quarter_id": str(school.quarter.id), "as_of": "2024-07-15"},
        headers=auth_headers("cashier"),
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_collection_summary(client, db_session, school, auth_headers):
    db_session.add(
        Transaction(
            student_id=school.student.id, quarter_id=school.quarter.id, receipt_no="RCP-TEST-2", kind="PAYMENT",
            amount_paid=Decimal("2000"), payment_mode="upi", payment_date=date(2024, 7, 1), status="completed",
        )
    )
    await db_session.commit()

    r = await client.get("/api/v1/balances/summary", params={"as_of": "2024-07-15"}, headers=auth_headers("admin"))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["total_students"] == 1
    assert Decimal(body["total_collected"]) == Decimal("2000")
    assert Decimal(body["pending_amount"]) == Decimal("3100")
    assert Decimal(body["late_fees_outstanding"]) == Decimal("100")
    assert body["defaulter_count"] == 1
    assert body["online_payments"] == 1
    assert body["offline_payments"] == 0


@pytest.mark.asyncio
async def test_export_defaulters_as_excel(client, school, auth_headers):
    r = await client.get(
        "/api/v1/balances/defaulters/export",
        params={"quarter_id": str(school.quarter.id), "as_of": "2024-07-15"},
        headers=auth_headers("admin"),
    )
    assert r.status_code == 200, r.text
    assert "defaulters.xlsx" in r.headers["content-disposition"]

    ws = load_workbook(filename=io.BytesIO(r.content), read_only=True).active
    rows = list(ws.iter_rows(values_only=True))
    assert rows[0][0] == "admission_no"
    assert rows[1][0] == "ADM001"
    assert rows[1][7] == 5100
