"""Course fee per admission category (Open, OBC, SC, ...)."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from college_admin.db.session import Base


class CourseFee(Base):
    """Fee amount for one (course, category). The "Open" category is the full course fee."""

    __tablename__ = "course_fees"
    __table_args__ = (
        UniqueConstraint("course_id", "category_name", name="uq_course_fee_course_category"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    course_id = Column(UUID(as_uuid=True), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    category_name = Column(String(50), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
