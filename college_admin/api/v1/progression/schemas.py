from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from college_admin.core.enums import PromotionStatus


class PromotionTargetOut(BaseModel):
    academic_year_id: UUID
    academic_year_name: str
    semester_id: UUID
    semester_name: str
    is_new_year: bool


class PromotionTargetResponse(BaseModel):
    """Next (academic year, semester) for a student, or end_of_course with a reason."""

    student_id: UUID
    current_semester_id: UUID
    current_academic_year_name: str
    end_of_course: bool
    reason: Optional[str] = None
    target: Optional[PromotionTargetOut] = None


class PromoteRequest(BaseModel):
    new_year_session: Optional[str] = Field(
        None,
        description="Session for the new academic year (e.g. 2025-2026). Required when the target starts a new year.",
    )
    expected_semester_id: Optional[UUID] = Field(
        None,
        description="Target semester the caller saw; promotion fails if the computed target differs.",
    )


class BranchTransferRequest(BaseModel):
    target_course_id: UUID
    target_academic_year_id: UUID
    target_semester_id: UUID
    new_session: str = Field(..., description="Session for the new academic-year enrollment, e.g. 2025-2026")
    reason: Optional[str] = Field(None, description="Defaults to 'Branch change requested by administration.'")


class BranchTransferResponse(BaseModel):
    id: UUID
    student_id: UUID
    from_course_id: UUID
    to_course_id: UUID
    from_semester_id: UUID
    to_semester_id: UUID
    from_enrollment_id: UUID
    to_enrollment_id: UUID
    reason: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class BulkPromoteRequest(BaseModel):
    """Promote every student active in semester_id (optionally only student_ids)."""

    semester_id: UUID
    student_ids: List[UUID] = Field(default_factory=list, description="Empty = all active students of the semester")
    new_year_session: Optional[str] = None


class PromotionAction(BaseModel):
    """Single promotion action for preview/result."""

    student_id: UUID
    action: str = Field(..., description="PROMOTED or SKIPPED")
    from_semester_id: UUID
    to_semester_id: Optional[UUID] = None
    is_new_year: Optional[bool] = None
    reason: Optional[str] = None


class BulkPromoteResult(BaseModel):
    promoted_count: int
    promoted_ids: List[UUID] = Field(default_factory=list)
    skipped: List[dict] = Field(
        default_factory=list,
        description="Students skipped: {student_id, reason}",
    )
    actions: Optional[List[PromotionAction]] = Field(
        None,
        description="Per-student actions (included when preview=true)",
    )


class PromotionStatusUpdate(BaseModel):
    semester_id: UUID
    student_ids: List[UUID] = Field(..., min_length=1)
    promotion_status: PromotionStatus


class PromotionStatusUpdateResult(BaseModel):
    updated_count: int
    updated_ids: List[UUID] = Field(default_factory=list)
    skipped: List[dict] = Field(default_factory=list)
