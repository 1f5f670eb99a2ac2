"""Transaction: immutable money movement for a (student, quarter) pair. Refunds are separate negative rows."""

import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship

from feedesk.db.session import Base


class Transaction(Base):
    """
    PAYMENT rows carry a positive amount_paid; REFUND rows a negative one and refund_of_id pointing at
    the payment they reverse. The reversed payment is only re-flagged status=refunded.
    The fee columns are a snapshot of the quarter balance at collection time, for receipts.
    """

    __tablename__ = "transactions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey("students.id", ondelete="RESTRICT"), nullable=False, index=True)
    quarter_id = Column(Uuid, ForeignKey("quarters.id", ondelete="RESTRICT"), nullable=False, index=True)
    receipt_no = Column(String(40), nullable=False, unique=True)
    kind = Column(String(10), nullable=False, default="PAYMENT")  # PAYMENT, REFUND
    refund_of_id = Column(Uuid, ForeignKey("transactions.id", ondelete="RESTRICT"), nullable=True)
    amount_paid = Column(Numeric(12, 2), nullable=False)
    payment_mode = Column(String(20), nullable=False)  # cash, upi, cheque, online
    payment_date = Column(Date, nullable=False)
    payment_reference = Column(String(100), nullable=True)
    cheque_number = Column(String(30), nullable=True)
    cheque_date = Column(Date, nullable=True)
    bank_name = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default="completed")  # completed, pending, failed, refunded
    notes = Column(Text, nullable=True)
    base_fee = Column(Numeric(12, 2), nullable=False, default=0)
    extra_charges = Column(Numeric(12, 2), nullable=False, default=0)
    late_fee = Column(Numeric(12, 2), nullable=False, default=0)
    concession_amount = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    balance_amount = Column(Numeric(12, 2), nullable=False, default=0)
    created_by = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    student = relationship("Student", foreign_keys=[student_id])
    quarter = relationship("Quarter", foreign_keys=[quarter_id])
    refund_of = relationship("Transaction", remote_side=[id], foreign_keys=[refund_of_id])
