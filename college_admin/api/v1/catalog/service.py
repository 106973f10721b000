"""Academic catalog reads and the course fee structure."""

import logging
from decimal import Decimal
from typing import Dict, List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from college_admin.core.exceptions import NotFound, ValidationError
from college_admin.core.store import CatalogStore, EnrollmentStore

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

logger = logging.getLogger(__name__)


async def list_streams(db: AsyncSession) -> List[StreamResponse]:
    return [StreamResponse.model_validate(s) for s in await CatalogStore(db).list_streams()]


async def courses_by_stream(db: AsyncSession, stream_id: UUID) -> List[CourseResponse]:
    catalog = CatalogStore(db)
    if not await catalog.get_stream(stream_id):
        raise NotFound("Stream not found")
    return [CourseResponse.model_validate(c) for c in await catalog.courses_by_stream(stream_id)]


async def academic_years_by_course(db: AsyncSession, course_id: UUID) -> List[AcademicYearResponse]:
    """Years in progression order (rank, then named-year order, then natural name order)."""
    catalog = CatalogStore(db)
    if not await catalog.get_course(course_id):
        raise NotFound("Course not found")
    return [AcademicYearResponse.model_validate(y) for y in await catalog.academic_years_by_course(course_id)]


async def semesters_by_academic_year(db: AsyncSession, academic_year_id: UUID) -> List[SemesterResponse]:
    catalog = CatalogStore(db)
    if not await catalog.get_academic_year(academic_year_id):
        raise NotFound("Academic year not found")
    return [SemesterResponse.model_validate(s) for s in await catalog.semesters_by_academic_year(academic_year_id)]


async def subjects_by_semester(db: AsyncSession, semester_id: UUID) -> List[SubjectResponse]:
    catalog = CatalogStore(db)
    if not await catalog.get_semester(semester_id):
        raise NotFound("Semester not found")
    return [SubjectResponse.model_validate(s) for s in await catalog.subjects_by_semester(semester_id)]


async def fee_amount(db: AsyncSession, course_id: UUID, category_name: str) -> FeeAmountResponse:
    amount = await CatalogStore(db).fee_amount(course_id, category_name)
    return FeeAmountResponse(course_id=course_id, category_name=category_name, amount=amount)


async def get_course_fees(db: AsyncSession, course_id: UUID) -> CourseFeesResponse:
    catalog = CatalogStore(db)
    if not await catalog.get_course(course_id):
        raise NotFound("Course not found")
    fees = await catalog.course_fees(course_id)
    return CourseFeesResponse(course_id=course_id, fees={f.category_name: Decimal(str(f.amount)) for f in fees})


async def set_course_fees(db: AsyncSession, course_id: UUID, payload: CourseFeesUpdate) -> CourseFeesResponse:
    """Upsert the fee of each given category; categories not in the payload are left alone."""
    fees: Dict[str, Decimal] = {}
    for category, amount in payload.fees.items():
        name = (category or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        if amount is None or amount < 0:
            raise ValidationError(f"Fee for category '{name}' must be zero or more")
        fees[name] = amount

    catalog = CatalogStore(db)
    if not await catalog.get_course(course_id):
        raise NotFound("Course not found")
    async with EnrollmentStore(db).run_transaction():
        for name, amount in fees.items():
            await catalog.upsert_course_fee(course_id, name, amount)

    logger.info("Updated fee structure of course %s: %s", course_id, ", ".join(sorted(fees)))
    return await get_course_fees(db, course_id)
