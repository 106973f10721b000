from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from college_admin.core.exceptions import ServiceError
from college_admin.db.session import get_db

from .schemas import (
    AcademicYearResponse,
    CourseFeesResponse,
    CourseFeesUpdate,
    CourseResponse,
    FeeAmountResponse,
    SemesterResponse,
    StreamResponse,
    SubjectResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/catalog", tags=["catalog"])


@router.get("/streams", response_model=List[StreamResponse])
async def list_streams(db: AsyncSession = Depends(get_db)) -> List[StreamResponse]:
    return await service.list_streams(db)


@router.get("/streams/{stream_id}/courses", response_model=List[CourseResponse])
async def courses_by_stream(
    stream_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[CourseResponse]:
    try:
        return await service.courses_by_stream(db, stream_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("/courses/{course_id}/academic-years", response_model=List[AcademicYearResponse])
async def academic_years_by_course(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[AcademicYearResponse]:
    try:
        return await service.academic_years_by_course(db, course_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("/academic-years/{academic_year_id}/semesters", response_model=List[SemesterResponse])
async def semesters_by_academic_year(
    academic_year_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[SemesterResponse]:
    try:
        return await service.semesters_by_academic_year(db, academic_year_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("/semesters/{semester_id}/subjects", response_model=List[SubjectResponse])
async def subjects_by_semester(
    semester_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[SubjectResponse]:
    try:
        return await service.subjects_by_semester(db, semester_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("/courses/{course_id}/fees", response_model=CourseFeesResponse)
async def get_course_fees(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> CourseFeesResponse:
    try:
        return await service.get_course_fees(db, course_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("/courses/{course_id}/fee", response_model=FeeAmountResponse)
async def fee_amount(
    course_id: UUID,
    category: str = Query(..., min_length=1, description="Admission category, e.g. Open"),
    db: AsyncSession = Depends(get_db),
) -> FeeAmountResponse:
    try:
        return await service.fee_amount(db, course_id, category)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.put("/courses/{course_id}/fees", response_model=CourseFeesResponse)
async def set_course_fees(
    course_id: UUID,
    payload: CourseFeesUpdate,
    db: AsyncSession = Depends(get_db),
) -> CourseFeesResponse:
    """Create or update the fee of each category for the course."""
    try:
        return await service.set_course_fees(db, course_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
