import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String
from sqlalchemy.dialects.postgresql import UUID

from college_admin.db.session import Base


class Student(Base):
    """
    Student master record. Course/year/semester are NOT stored here;
    read them from the active student_academic_years / student_semesters rows.
    """

    __tablename__ = "students"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    fullname = Column(String(255), nullable=False)
    roll_number = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    admission_category = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
