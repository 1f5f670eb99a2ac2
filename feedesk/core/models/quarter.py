import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, Numeric, String, UniqueConstraint, Uuid

from feedesk.db.session import Base


class Quarter(Base):
    """
    Billing period within an academic year (Q1..Q4).
    Late fee policy columns are nullable; unset fields fall back to the school-wide defaults in settings.
    """

    __tablename__ = "quarters"
    __table_args__ = (
        UniqueConstraint("academic_year", "quarter_number", name="uq_quarter_year_number"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    academic_year = Column(String(20), nullable=False)  # e.g. "2024-25"
    quarter_name = Column(String(20), nullable=False)  # Q1..Q4
    quarter_number = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    late_fee_type = Column(String(20), nullable=True)  # flat, percentage
    late_fee_amount = Column(Numeric(12, 2), nullable=True)
    late_fee_percentage = Column(Numeric(5, 2), nullable=True)
    grace_period_days = Column(Integer, nullable=True)
    apply_daily = Column(Boolean, nullable=True)
    max_late_fee = Column(Numeric(12, 2), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
