"""School classes (Nursery, LKG, 1st, 10th). Model named SchoolClass to avoid Python 'class' keyword."""
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Uuid

from feedesk.db.session import Base


class SchoolClass(Base):
    """Class master. quarterly_fee is a coarse reporting figure, never used for per-student balances."""

    __tablename__ = "classes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    class_name = Column(String(50), nullable=False, unique=True)
    display_order = Column(Integer, nullable=True)
    quarterly_fee = Column(Numeric(12, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
