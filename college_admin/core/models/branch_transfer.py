"""Branch transfer history: one immutable row per course change."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID

from college_admin.db.session import Base


class BranchTransfer(Base):
    __tablename__ = "branch_transfers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    from_course_id = Column(UUID(as_uuid=True), ForeignKey("courses.id"), nullable=False)
    to_course_id = Column(UUID(as_uuid=True), ForeignKey("courses.id"), nullable=False)
    from_semester_id = Column(UUID(as_uuid=True), ForeignKey("semesters.id"), nullable=False)
    to_semester_id = Column(UUID(as_uuid=True), ForeignKey("semesters.id"), nullable=False)
    from_enrollment_id = Column(UUID(as_uuid=True), ForeignKey("student_academic_years.id"), nullable=False)
    to_enrollment_id = Column(UUID(as_uuid=True), ForeignKey("student_academic_years.id"), nullable=False)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
