"""Fee structure: line-item base fee per class per quarter."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from feedesk.db.session import Base

COMPONENT_FIELDS = ("tuition_fee", "transport_fee", "activity_fee", "examination_fee", "other_fee")


class FeeStructure(Base):
    """Base fee for a (class, quarter) pair. total_fee is always the sum of the five components."""

    __tablename__ = "fee_structures"
    __table_args__ = (
        UniqueConstraint("class_id", "quarter_id", name="uq_fee_structure_class_quarter"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    class_id = Column(Uuid, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    quarter_id = Column(Uuid, ForeignKey("quarters.id", ondelete="CASCADE"), nullable=False)
    tuition_fee = Column(Numeric(12, 2), nullable=False, default=0)
    transport_fee = Column(Numeric(12, 2), nullable=False, default=0)
    activity_fee = Column(Numeric(12, 2), nullable=False, default=0)
    examination_fee = Column(Numeric(12, 2), nullable=False, default=0)
    other_fee = Column(Numeric(12, 2), nullable=False, default=0)
    total_fee = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    school_class = relationship("SchoolClass", foreign_keys=[class_id])
    quarter = relationship("Quarter", foreign_keys=[quarter_id])
