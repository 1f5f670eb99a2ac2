"""
Create the fee tables and, with --seed, a small demo data set (one class, one quarter, two students).

Usage:
    python -m feedesk.db.init_db [--seed]
"""

import argparse
import asyncio
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

import feedesk.core.models  # noqa: F401  (registers tables on Base.metadata)
from feedesk.billing.fee_structures import component_total
from feedesk.core.models import FeeStructure, Quarter, SchoolClass, Student
from feedesk.db.session import AsyncSessionLocal, Base, engine


async def create_tables(db_engine: AsyncEngine) -> None:
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_demo(db: AsyncSession) -> None:
    existing = (await db.execute(select(SchoolClass).where(SchoolClass.class_name == "Grade 1"))).scalar_one_or_none()
    if existing:
        print("Demo data already present; nothing to do.")
        return

    grade = SchoolClass(class_name="Grade 1", display_order=1, quarterly_fee=Decimal("5000"))
    q1 = Quarter(
        academic_year="2024-25",
        quarter_name="Q1",
        quarter_number=1,
        start_date=date(2024, 4, 1),
        end_date=date(2024, 6, 30),
        due_date=date(2024, 7, 10),
        late_fee_type="flat",
        late_fee_amount=Decimal("100"),
        grace_period_days=0,
    )
    db.add_all([grade, q1])
    await db.flush()

    components = {
        "tuition_fee": Decimal("3500"),
        "transport_fee": Decimal("800"),
        "activity_fee": Decimal("300"),
        "examination_fee": Decimal("400"),
        "other_fee": Decimal("0"),
    }
    db.add(FeeStructure(class_id=grade.id, quarter_id=q1.id, total_fee=component_total(**components), **components))
    db.add_all(
        [
            Student(admission_no="ADM001", name="Aarav Sharma", class_id=grade.id, section="A"),
            Student(
                admission_no="ADM002",
                name="Diya Patel",
                class_id=grade.id,
                section="A",
                concession_amount=Decimal("500"),
            ),
        ]
    )
    await db.commit()
    print("Seeded demo class, quarter, fee structure and students.")


async def main(seed: bool) -> None:
    await create_tables(engine)
    print("Tables created.")
    if seed:
        async with AsyncSessionLocal() as db:
            try:
                await seed_demo(db)
            except Exception as e:
                print(f"Error seeding demo data: {e}")
                await db.rollback()
                raise


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", action="store_true", help="insert demo data")
    args = parser.parse_args()
    asyncio.run(main(args.seed))
