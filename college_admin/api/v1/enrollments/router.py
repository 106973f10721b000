from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from college_admin.core.exceptions import ServiceError
from college_admin.db.session import get_db

from .schemas import ActiveEnrollmentResponse, AdmissionCreate, AdmissionResponse, EnrollmentHistoryItem
from . import service

router = APIRouter(prefix="/api/v1/students", tags=["enrollments"])


@router.post(
    "/admissions",
    response_model=AdmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def admit_student(
    payload: AdmissionCreate,
    db: AsyncSession = Depends(get_db),
) -> AdmissionResponse:
    """Admit a student: creates the student, an Active academic-year enrollment and its first semester."""
    try:
        return await service.admit_student(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("/{student_id}/enrollment", response_model=ActiveEnrollmentResponse)
async def get_active_enrollment(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ActiveEnrollmentResponse:
    """Current enrollment: the active semester under the active academic year."""
    try:
        return await service.get_active_enrollment(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("/{student_id}/enrollments", response_model=List[EnrollmentHistoryItem])
async def get_enrollment_history(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[EnrollmentHistoryItem]:
    """Every academic-year enrollment of the student, oldest first, with nested semesters."""
    try:
        return await service.get_enrollment_history(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
