from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from college_admin.api.v1.enrollments.schemas import YearEnrollmentResponse
from college_admin.core.exceptions import ServiceError
from college_admin.db.session import get_db

from .schemas import PendingRegistrationItem, RegistrationRequest
from . import service

router = APIRouter(prefix="/api/v1/registration", tags=["registration"])


@router.post("/year-enrollments/{year_enrollment_id}", response_model=YearEnrollmentResponse)
async def register(
    year_enrollment_id: UUID,
    payload: RegistrationRequest,
    db: AsyncSession = Depends(get_db),
) -> YearEnrollmentResponse:
    """Register an Active academic year. Installment requires an undertaking reference."""
    try:
        return await service.register(db, year_enrollment_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("/pending", response_model=List[PendingRegistrationItem])
async def list_pending_registrations(
    course_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> List[PendingRegistrationItem]:
    return await service.list_pending_registrations(db, course_id)
