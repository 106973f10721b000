from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class YearEnrollmentResponse(BaseModel):
    id: UUID
    student_id: UUID
    course_id: UUID
    academic_year_name: str
    academic_year_session: str
    status: str
    is_registered: bool
    total_fee: Decimal
    scholarship_name: Optional[str] = None
    scholarship_amount: Decimal
    net_payable_fee: Decimal
    payment_plan: Optional[str] = None
    undertaking_ref: Optional[str] = None
    registration_data: Optional[dict] = None
    registered_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class SemesterEnrollmentResponse(BaseModel):
    id: UUID
    student_id: UUID
    semester_id: UUID
    academic_year_enrollment_id: UUID
    roll_number: Optional[str] = None
    status: str
    promotion_status: str
    created_at: datetime

    class Config:
        from_attributes = True


class ActiveEnrollmentResponse(BaseModel):
    """The student's current enrollment: active semester under the active academic year."""

    academic_year: YearEnrollmentResponse
    semester: SemesterEnrollmentResponse


class EnrollmentHistoryItem(BaseModel):
    academic_year: YearEnrollmentResponse
    semesters: List[SemesterEnrollmentResponse] = Field(default_factory=list)


class AdmissionCreate(BaseModel):
    """Admit a new student into the first (or given) semester of an academic year of a course."""

    fullname: str = Field(..., min_length=1, max_length=255)
    roll_number: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    course_id: UUID
    academic_year_id: UUID = Field(..., description="Academic-year template of the course, e.g. First Year")
    semester_id: Optional[UUID] = Field(None, description="Defaults to the first semester of the year")
    session: str = Field(..., description="e.g. 2025-2026")
    admission_category: str = Field(..., description="Fee category, e.g. Open, OBC, SC")


class StudentResponse(BaseModel):
    id: UUID
    fullname: str
    roll_number: Optional[str] = None
    email: Optional[str] = None
    admission_category: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AdmissionResponse(BaseModel):
    student: StudentResponse
    enrollment: ActiveEnrollmentResponse
