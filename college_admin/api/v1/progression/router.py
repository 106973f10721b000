from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from college_admin.api.v1.enrollments.schemas import ActiveEnrollmentResponse
from college_admin.core.exceptions import ServiceError
from college_admin.db.session import get_db

from .schemas import (
    BranchTransferRequest,
    BranchTransferResponse,
    BulkPromoteRequest,
    BulkPromoteResult,
    PromoteRequest,
    PromotionStatusUpdate,
    PromotionStatusUpdateResult,
    PromotionTargetResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/progression", tags=["progression"])


@router.get("/students/{student_id}/target", response_model=PromotionTargetResponse)
async def get_promotion_target(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> PromotionTargetResponse:
    """Next semester/year the student would be promoted into, or end_of_course."""
    try:
        return await service.get_promotion_target(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.post("/students/{student_id}/promote", response_model=ActiveEnrollmentResponse)
async def promote_student(
    student_id: UUID,
    payload: PromoteRequest,
    db: AsyncSession = Depends(get_db),
) -> ActiveEnrollmentResponse:
    """Promote one student. Requires promotion_status=Eligible; new_year_session when entering a new year."""
    try:
        return await service.promote(db, student_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.post("/students/{student_id}/transfer", response_model=ActiveEnrollmentResponse)
async def transfer_branch(
    student_id: UUID,
    payload: BranchTransferRequest,
    db: AsyncSession = Depends(get_db),
) -> ActiveEnrollmentResponse:
    """Transfer the student to a different course (branch)."""
    try:
        return await service.transfer_branch(db, student_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("/students/{student_id}/transfers", response_model=List[BranchTransferResponse])
async def get_transfer_history(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[BranchTransferResponse]:
    return await service.get_transfer_history(db, student_id)


@router.post("/promote-bulk", response_model=BulkPromoteResult)
async def promote_bulk(
    payload: BulkPromoteRequest,
    preview: bool = Query(False, description="Return per-student actions without promoting"),
    db: AsyncSession = Depends(get_db),
) -> BulkPromoteResult:
    """Promote all (or the selected) students active in a semester; each student commits independently."""
    try:
        return await service.promote_bulk(db, payload, preview=preview)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.post("/promotion-status", response_model=PromotionStatusUpdateResult)
async def set_promotion_status(
    payload: PromotionStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> PromotionStatusUpdateResult:
    """Set Eligible / NotEligible / YearDrop / Hold for students in a semester."""
    try:
        return await service.set_promotion_status(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
