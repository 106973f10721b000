"""Student payment: append-only ledger entry against an academic-year enrollment."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.dialects.postgresql import UUID

from college_admin.db.session import Base


class StudentPayment(Base):
    """Never updated or deleted; corrections are new offsetting entries."""

    __tablename__ = "student_payments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    academic_year_enrollment_id = Column(
        UUID(as_uuid=True),
        ForeignKey("student_academic_years.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    amount = Column(Numeric(12, 2), nullable=False)
    fees_type = Column(String(50), nullable=False)  # Tuition Fee, Scholarship, Exam Fee, ...
    payment_method = Column(String(50), nullable=True)  # Cash, Cheque, Online (UPI), ...
    reference = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
