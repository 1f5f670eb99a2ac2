import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import relationship

from feedesk.db.session import Base


class Student(Base):
    """
    Student record. Soft delete via is_active so historical transactions keep their owner.
    Concession may be flat, percentage, or both.
    """

    __tablename__ = "students"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    admission_no = Column(String(30), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    class_id = Column(Uuid, ForeignKey("classes.id", ondelete="RESTRICT"), nullable=False, index=True)
    section = Column(String(10), nullable=True)
    parent_contact = Column(String(20), nullable=True)
    parent_email = Column(String(255), nullable=True)
    concession_amount = Column(Numeric(12, 2), nullable=False, default=0)
    concession_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    school_class = relationship("SchoolClass", foreign_keys=[class_id])
