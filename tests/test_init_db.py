from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from builders import DEFAULTS
from feedesk.billing.engine import BalanceEngine
from feedesk.core.models import Student
from feedesk.core.observability import NullObservability
from feedesk.db.init_db import seed_demo


@pytest.mark.asyncio
async def test_seed_demo_is_idempotent(db_session):
    await seed_demo(db_session)
    await seed_demo(db_session)

    count = (await db_session.execute(select(func.count()).select_from(Student))).scalar_one()
    assert count == 2


@pytest.mark.asyncio
async def test_seeded_concession_student_balance(db_session):
    await seed_demo(db_session)
    student = (
        await db_session.execute(select(Student).where(Student.admission_no == "ADM002"))
    ).scalar_one()

    engine = BalanceEngine(observability=NullObservability(), late_fee_defaults=DEFAULTS)
    details = await engine.compute_student_fee_details(db_session, student.id, as_of=date(2024, 7, 1))

    q1 = details.quarters[0]
    assert q1.base_fee == Decimal("5000.00")
    assert q1.concession_applied == Decimal("500.00")
    assert q1.balance == Decimal("4500.00")
