import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from datetime import date  # noqa: E402
from decimal import Decimal  # noqa: E402
from types import SimpleNamespace  # noqa: E402
from typing import AsyncGenerator, Callable, Dict, Iterable  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from feedesk.auth.security import create_access_token  # noqa: E402
from feedesk.core.models import FeeStructure, Quarter, SchoolClass, Student  # noqa: E402
from feedesk.core.observability import NullObservability, get_observability  # noqa: E402
from feedesk.db.session import Base, build_engine, get_db  # noqa: E402
from feedesk.main import app  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test; overrides the FastAPI get_db dependency."""
    engine = build_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture()
def observability() -> NullObservability:
    obs = NullObservability()
    app.dependency_overrides[get_observability] = lambda: obs
    yield obs
    app.dependency_overrides.pop(get_observability, None)


@pytest.fixture()
async def client(db_session: AsyncSession, observability: NullObservability) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def auth_headers() -> Callable[..., Dict[str, str]]:
    """Bearer headers for a role; parents pass the student ids linked to their account."""

    def _headers(role: str = "admin", user_id: str = "user-1", student_ids: Iterable = ()) -> Dict[str, str]:
        claims = {"sub": user_id, "role": role}
        if student_ids:
            claims["student_ids"] = [str(s) for s in student_ids]
        return {"Authorization": f"Bearer {create_access_token(subject=claims)}"}

    return _headers


@pytest.fixture()
async def school(db_session: AsyncSession) -> SimpleNamespace:
    """Grade 1, quarter Q1 2024-25 due 2024-07-10 (flat 100 late fee, no grace), fee 5000, one student."""
    school_class = SchoolClass(class_name="Grade 1", display_order=1, quarterly_fee=Decimal("5000"))
    db_session.add(school_class)
    quarter = Quarter(
        academic_year="2024-25",
        quarter_name="Q1",
        quarter_number=1,
        start_date=date(2024, 4, 1),
        end_date=date(2024, 6, 30),
        due_date=date(2024, 7, 10),
        late_fee_type="flat",
        late_fee_amount=Decimal("100"),
        grace_period_days=0,
        apply_daily=False,
    )
    db_session.add(quarter)
    await db_session.flush()

    structure = FeeStructure(
        class_id=school_class.id,
        quarter_id=quarter.id,
        tuition_fee=Decimal("5000"),
        total_fee=Decimal("5000"),
    )
    student = Student(
        admission_no="ADM001",
        name="Asha Rao",
        class_id=school_class.id,
        section="A",
        parent_email="parent@example.com",
    )
    db_session.add_all([structure, student])
    await db_session.commit()
    return SimpleNamespace(school_class=school_class, quarter=quarter, structure=structure, student=student)
