from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from college_admin.core.enums import PaymentPlan


class RegistrationRequest(BaseModel):
    """Register an academic-year enrollment: subject selection, payment plan, optional scholarship override."""

    selected_subject_ids: List[UUID] = Field(default_factory=list)
    payment_plan: PaymentPlan
    scholarship_category: Optional[str] = Field(
        None,
        description="Admission category whose fee becomes the payable fee; scholarship = total_fee - that fee",
    )
    undertaking_ref: Optional[str] = Field(
        None,
        max_length=255,
        description="Reference to the signed undertaking; required for Installment",
    )


class PendingRegistrationItem(BaseModel):
    year_enrollment_id: UUID
    student_id: UUID
    fullname: Optional[str] = None
    roll_number: Optional[str] = None
    course_id: UUID
    academic_year_name: str
    academic_year_session: str
    net_payable_fee: Decimal
