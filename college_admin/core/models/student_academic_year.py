import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, Numeric, String, text
from sqlalchemy.dialects.postgresql import JSONB, UUID

from college_admin.core.enums import YearEnrollmentStatus
from college_admin.db.session import Base


class StudentAcademicYear(Base):
    """
    Student enrollment per academic-year attempt (course + named year + session).
    Promotion into a new year creates a NEW row; old row status -> Inactive.
    Branch transfer creates a NEW row on the target course; old row status -> Transferred.
    At most one row per student is Active. Rows are never deleted.
    net_payable_fee == total_fee - scholarship_amount; always write fees through apply_fees().
    """

    __tablename__ = "student_academic_years"
    __table_args__ = (
        Index(
            "uq_student_academic_year_one_active",
            "student_id",
            unique=True,
            postgresql_where=text("status = 'Active'"),
            sqlite_where=text("status = 'Active'"),
        ),
        CheckConstraint(
            "abs(net_payable_fee - (total_fee - scholarship_amount)) < 0.01",
            name="chk_student_academic_year_net_payable",
        ),
        CheckConstraint(
            "status IN ('Active','Inactive','Transferred')",
            name="chk_student_academic_year_status",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(UUID(as_uuid=True), ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False)
    academic_year_name = Column(String(50), nullable=False)  # e.g. "Second Year"
    academic_year_session = Column(String(20), nullable=False)  # e.g. "2025-2026"
    status = Column(String(20), nullable=False, default=YearEnrollmentStatus.ACTIVE.value)

    total_fee = Column(Numeric(12, 2), nullable=False, default=0)
    scholarship_name = Column(String(50), nullable=True)
    scholarship_amount = Column(Numeric(12, 2), nullable=False, default=0)
    net_payable_fee = Column(Numeric(12, 2), nullable=False, default=0)

    is_registered = Column(Boolean, nullable=False, default=False)
    payment_plan = Column(String(20), nullable=True)  # OneTime | Installment
    undertaking_ref = Column(String(255), nullable=True)
    registration_data = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    registered_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def apply_fees(self, total_fee, scholarship_amount) -> None:
        """Set fee figures and recompute net_payable_fee in one step."""
        self.total_fee = Decimal(str(total_fee or 0))
        self.scholarship_amount = Decimal(str(scholarship_amount or 0))
        self.net_payable_fee = self.total_fee - self.scholarship_amount
