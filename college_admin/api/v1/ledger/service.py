"""Ledger service: per-year fee figures, student-wide summary, payment recording."""

import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from college_admin.core.exceptions import NotFound, ValidationError
from college_admin.core.models import StudentAcademicYear, StudentPayment
from college_admin.core.store import EnrollmentStore

from .calculator import YearFinancials, global_summary, group_payments, year_financials
from .schemas import PaymentCreate, PaymentResponse, StudentLedgerResponse, YearFinancialsResponse

logger = logging.getLogger(__name__)


def _year_to_response(year: StudentAcademicYear, fin: YearFinancials) -> YearFinancialsResponse:
    return YearFinancialsResponse(
        year_enrollment_id=year.id,
        academic_year_name=year.academic_year_name,
        academic_year_session=year.academic_year_session,
        course_id=year.course_id,
        status=year.status,
        is_registered=bool(year.is_registered),
        total_fee=fin.total_fee,
        scholarship_name=year.scholarship_name,
        scholarship_amount=fin.scholarship_amount,
        net_payable_fee=fin.net_payable_fee,
        tuition_paid=fin.tuition_paid,
        scholarship_used=fin.scholarship_used,
        other_fees_paid=fin.other_fees_paid,
        remaining_due=fin.remaining_due,
        remaining_scholarship=fin.remaining_scholarship,
    )


async def get_year_financials(db: AsyncSession, year_enrollment_id: UUID) -> YearFinancialsResponse:
    store = EnrollmentStore(db)
    year = await store.get_year_enrollment(year_enrollment_id)
    if not year:
        raise NotFound("Academic year enrollment not found")
    payments = await store.get_payments(year.student_id, year.id)
    return _year_to_response(year, year_financials(year, payments))


async def get_student_ledger(db: AsyncSession, student_id: UUID) -> StudentLedgerResponse:
    """Totals across registered years plus a row per academic-year enrollment."""
    store = EnrollmentStore(db)
    if not await store.get_student(student_id):
        raise NotFound("Student not found")
    years = await store.list_year_enrollments(student_id)
    payments = await store.get_payments(student_id)

    summary = global_summary(years, payments)
    by_year = group_payments(payments)
    return StudentLedgerResponse(
        student_id=student_id,
        total_net_payable=summary.total_net_payable,
        total_paid=summary.total_paid,
        total_scholarship=summary.total_scholarship,
        total_remaining_due=summary.total_remaining_due,
        years=[_year_to_response(y, year_financials(y, by_year.get(y.id, []))) for y in years],
    )


async def record_payment(db: AsyncSession, year_enrollment_id: UUID, payload: PaymentCreate) -> PaymentResponse:
    if payload.amount is None or payload.amount <= Decimal("0"):
        raise ValidationError("Payment amount must be greater than zero")
    fees_type = (payload.fees_type or "").strip()
    if not fees_type:
        raise ValidationError("Fees type is required")
    payment_method = (payload.payment_method or "").strip()
    if not payment_method:
        raise ValidationError("Payment method is required")

    store = EnrollmentStore(db)
    async with store.run_transaction():
        year = await store.get_year_enrollment(year_enrollment_id)
        if not year:
            raise NotFound("Academic year enrollment not found")
        payment = await store.insert_payment(
            StudentPayment(
                student_id=year.student_id,
                academic_year_enrollment_id=year.id,
                amount=payload.amount,
                fees_type=fees_type,
                payment_method=payment_method,
                reference=(payload.reference or "").strip() or None,
            )
        )
        response = PaymentResponse.model_validate(payment)

    logger.info(
        "Recorded %s payment of %s (%s) for student %s, year enrollment %s",
        fees_type, payload.amount, payment_method, response.student_id, year_enrollment_id,
    )
    return response


async def list_payments(
    db: AsyncSession,
    student_id: UUID,
    year_enrollment_id: Optional[UUID] = None,
) -> List[PaymentResponse]:
    rows = await EnrollmentStore(db).get_payments(student_id, year_enrollment_id)
    return [PaymentResponse.model_validate(r) for r in rows]
