"""Extra charge: additive supplemental fee for a quarter, scoped to a student, a class or the school."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship

from feedesk.db.session import Base


class ExtraCharge(Base):
    """
    scope is explicit; the foreign keys must agree with it:
    INDIVIDUAL -> student_id only, CLASS -> class_id only, SCHOOL -> neither.
    is_mandatory is informational; balance computation does not consult it.
    """

    __tablename__ = "extra_charges"
    __table_args__ = (
        CheckConstraint(
            "(scope = 'INDIVIDUAL' AND student_id IS NOT NULL AND class_id IS NULL)"
            " OR (scope = 'CLASS' AND class_id IS NOT NULL AND student_id IS NULL)"
            " OR (scope = 'SCHOOL' AND student_id IS NULL AND class_id IS NULL)",
            name="ck_extra_charge_scope",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    quarter_id = Column(Uuid, ForeignKey("quarters.id", ondelete="CASCADE"), nullable=False, index=True)
    scope = Column(String(20), nullable=False)  # INDIVIDUAL, CLASS, SCHOOL
    student_id = Column(Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=True)
    class_id = Column(Uuid, ForeignKey("classes.id", ondelete="CASCADE"), nullable=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    is_mandatory = Column(Boolean, nullable=False, default=True)
    created_by = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    quarter = relationship("Quarter", foreign_keys=[quarter_id])
