from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class YearFinancialsResponse(BaseModel):
    year_enrollment_id: UUID
    academic_year_name: str
    academic_year_session: str
    course_id: UUID
    status: str
    is_registered: bool
    total_fee: Decimal
    scholarship_name: Optional[str] = None
    scholarship_amount: Decimal
    net_payable_fee: Decimal
    tuition_paid: Decimal
    scholarship_used: Decimal
    other_fees_paid: Decimal
    remaining_due: Decimal = Field(..., description="net_payable_fee - tuition_paid; negative when overpaid")
    remaining_scholarship: Decimal


class StudentLedgerResponse(BaseModel):
    """Totals over registered years only; `years` lists every year for reference."""

    student_id: UUID
    total_net_payable: Decimal
    total_paid: Decimal
    total_scholarship: Decimal
    total_remaining_due: Decimal
    years: List[YearFinancialsResponse] = Field(default_factory=list)


class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., description="Must be greater than zero")
    fees_type: str = Field(..., description="Tuition Fee, Scholarship, Exam Fee, ...")
    payment_method: str = Field(..., description="Cash, Cheque, Online (UPI), Bank Transfer (NEFT/RTGS), Trust, ...")
    reference: Optional[str] = Field(None, max_length=100, description="Cheque number / UTR / transaction id")


class PaymentResponse(BaseModel):
    id: UUID
    student_id: UUID
    academic_year_enrollment_id: UUID
    amount: Decimal
    fees_type: str
    payment_method: Optional[str] = None
    reference: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
