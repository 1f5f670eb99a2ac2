"""Student records: lookup, search, create, update and soft delete."""

import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from feedesk.billing.money import to_money
from feedesk.core.exceptions import ConflictError, NotFoundError, ValidationFailed
from feedesk.core.models import SchoolClass, Student

from .schemas import StudentCreate, StudentResponse, StudentUpdate

logger = logging.getLogger(__name__)


def _student_to_response(s: Student, class_name: Optional[str] = None) -> StudentResponse:
    return StudentResponse(
        id=s.id,
        admission_no=s.admission_no,
        name=s.name,
        class_id=s.class_id,
        class_name=class_name,
        section=s.section,
        parent_contact=s.parent_contact,
        parent_email=s.parent_email,
        concession_amount=to_money(s.concession_amount),
        concession_percentage=Decimal(str(s.concession_percentage or 0)),
        is_active=s.is_active,
        created_at=s.created_at,
        updated_at=s.updated_at,
    )


async def _require_class(db: AsyncSession, class_id: UUID) -> SchoolClass:
    cl = await db.get(SchoolClass, class_id)
    if not cl or not cl.is_active:
        raise ValidationFailed("Invalid class")
    return cl


async def get_student(db: AsyncSession, student_id: UUID) -> StudentResponse:
    row = (
        await db.execute(
            select(Student, SchoolClass.class_name)
            .join(SchoolClass, Student.class_id == SchoolClass.id)
            .where(Student.id == student_id)
        )
    ).first()
    if not row:
        raise NotFoundError("Student not found")
    student, class_name = row
    return _student_to_response(student, class_name)


async def search_students(
    db: AsyncSession,
    search: Optional[str] = None,
    class_id: Optional[UUID] = None,
    active_only: bool = True,
) -> List[StudentResponse]:
    """Match by admission number or name (case-insensitive substring)."""
    stmt = select(Student, SchoolClass.class_name).join(SchoolClass, Student.class_id == SchoolClass.id)
    if active_only:
        stmt = stmt.where(Student.is_active.is_(True))
    if class_id is not None:
        stmt = stmt.where(Student.class_id == class_id)
    term = (search or "").strip()
    if term:
        pattern = f"%{term}%"
        stmt = stmt.where(or_(Student.name.ilike(pattern), Student.admission_no.ilike(pattern)))
    stmt = stmt.order_by(Student.admission_no)
    result = await db.execute(stmt)
    return [_student_to_response(s, cn) for s, cn in result.all()]


async def create_student(db: AsyncSession, payload: StudentCreate) -> StudentResponse:
    cl = await _require_class(db, payload.class_id)
    try:
        student = Student(
            admission_no=payload.admission_no.strip().upper(),
            name=payload.name.strip(),
            class_id=payload.class_id,
            section=(payload.section or "").strip() or None,
            parent_contact=(payload.parent_contact or "").strip() or None,
            parent_email=payload.parent_email,
            concession_amount=to_money(payload.concession_amount),
            concession_percentage=payload.concession_percentage,
            is_active=True,
        )
        db.add(student)
        await db.commit()
        await db.refresh(student)
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Admission number already exists")
    logger.info("Created student %s (%s)", student.admission_no, student.id)
    return _student_to_response(student, cl.class_name)


async def update_student(db: AsyncSession, student_id: UUID, payload: StudentUpdate) -> StudentResponse:
    student = await db.get(Student, student_id)
    if not student:
        raise NotFoundError("Student not found")
    data = payload.model_dump(exclude_unset=True)
    if data.get("class_id") is not None:
        await _require_class(db, data["class_id"])
    for field, value in data.items():
        if value is None and field in ("name", "class_id", "concession_amount", "concession_percentage"):
            continue
        if field == "concession_amount":
            value = to_money(value)
        setattr(student, field, value)
    await db.commit()
    return await get_student(db, student_id)


async def deactivate_student(db: AsyncSession, student_id: UUID) -> StudentResponse:
    """Soft delete: transactions keep referencing the student."""
    student = await db.get(Student, student_id)
    if not student:
        raise NotFoundError("Student not found")
    student.is_active = False
    await db.commit()
    logger.info("Deactivated student %s", student_id)
    return await get_student(db, student_id)
