from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from college_admin.core.exceptions import ServiceError
from college_admin.db.session import get_db

from .schemas import PaymentCreate, PaymentResponse, StudentLedgerResponse, YearFinancialsResponse
from . import service

router = APIRouter(prefix="/api/v1/ledger", tags=["ledger"])


@router.get("/year-enrollments/{year_enrollment_id}", response_model=YearFinancialsResponse)
async def get_year_financials(
    year_enrollment_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> YearFinancialsResponse:
    try:
        return await service.get_year_financials(db, year_enrollment_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.post(
    "/year-enrollments/{year_enrollment_id}/payments",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_payment(
    year_enrollment_id: UUID,
    payload: PaymentCreate,
    db: AsyncSession = Depends(get_db),
) -> PaymentResponse:
    """Append a payment. Tuition Fee counts against net payable; Scholarship against the allocation."""
    try:
        return await service.record_payment(db, year_enrollment_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("/students/{student_id}", response_model=StudentLedgerResponse)
async def get_student_ledger(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> StudentLedgerResponse:
    try:
        return await service.get_student_ledger(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("/students/{student_id}/payments", response_model=List[PaymentResponse])
async def list_payments(
    student_id: UUID,
    year_enrollment_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> List[PaymentResponse]:
    return await service.list_payments(db, student_id, year_enrollment_id)
