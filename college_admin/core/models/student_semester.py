import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String, text
from sqlalchemy.dialects.postgresql import UUID

from college_admin.core.enums import PromotionStatus, SemesterEnrollmentStatus
from college_admin.db.session import Base


class StudentSemester(Base):
    """
    Student registration in one semester under a student_academic_years row.
    status: active -> inactive (promoted) | transferred (branch transfer); both terminal.
    At most one active row per academic-year enrollment.
    """

    __tablename__ = "student_semesters"
    __table_args__ = (
        Index(
            "uq_student_semester_one_active",
            "academic_year_enrollment_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
        CheckConstraint(
            "status IN ('active','inactive','transferred')",
            name="chk_student_semester_status",
        ),
        CheckConstraint(
            "promotion_status IN ('Eligible','NotEligible','YearDrop','Hold','Promoted')",
            name="chk_student_semester_promotion_status",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    semester_id = Column(UUID(as_uuid=True), ForeignKey("semesters.id", ondelete="RESTRICT"), nullable=False, index=True)
    academic_year_enrollment_id = Column(
        UUID(as_uuid=True),
        ForeignKey("student_academic_years.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    roll_number = Column(String(50), nullable=True)
    status = Column(String(20), nullable=False, default=SemesterEnrollmentStatus.ACTIVE.value)
    promotion_status = Column(String(20), nullable=False, default=PromotionStatus.ELIGIBLE.value)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
