from decimal import Decimal
from typing import Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class StreamResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class CourseResponse(BaseModel):
    id: UUID
    stream_id: UUID
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class AcademicYearResponse(BaseModel):
    id: UUID
    course_id: UUID
    name: str
    rank: Optional[int] = None

    class Config:
        from_attributes = True


class SemesterResponse(BaseModel):
    id: UUID
    academic_year_id: UUID
    name: str
    rank: Optional[int] = None

    class Config:
        from_attributes = True


class SubjectResponse(BaseModel):
    id: UUID
    semester_id: UUID
    name: str
    subject_code: Optional[str] = None
    subject_type: Optional[str] = None
    is_optional: bool

    class Config:
        from_attributes = True


class FeeAmountResponse(BaseModel):
    course_id: UUID
    category_name: str
    amount: Decimal


class CourseFeesResponse(BaseModel):
    """Fee per admission category (Open, OBC, SC, ...) for a course."""

    course_id: UUID
    fees: Dict[str, Decimal] = Field(default_factory=dict)


class CourseFeesUpdate(BaseModel):
    fees: Dict[str, Decimal] = Field(..., description="category_name -> amount; existing categories are updated")
