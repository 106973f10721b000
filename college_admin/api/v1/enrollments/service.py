"""Admissions and enrollment reads: initial enrollment, current enrollment, history."""

import logging
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from college_admin.core.config import settings
from college_admin.core.enums import PromotionStatus, SemesterEnrollmentStatus, YearEnrollmentStatus
from college_admin.core.exceptions import NotFound, ValidationError
from college_admin.core.models import Student, StudentAcademicYear, StudentSemester
from college_admin.core.store import CatalogStore, EnrollmentStore

from .schemas import (
    ActiveEnrollmentResponse,
    AdmissionCreate,
    AdmissionResponse,
    EnrollmentHistoryItem,
    SemesterEnrollmentResponse,
    StudentResponse,
    YearEnrollmentResponse,
)

logger = logging.getLogger(__name__)


def year_to_response(year: StudentAcademicYear) -> YearEnrollmentResponse:
    return YearEnrollmentResponse.model_validate(year)


def semester_to_response(sem: StudentSemester) -> SemesterEnrollmentResponse:
    return SemesterEnrollmentResponse.model_validate(sem)


def active_to_response(year: StudentAcademicYear, sem: StudentSemester) -> ActiveEnrollmentResponse:
    return ActiveEnrollmentResponse(academic_year=year_to_response(year), semester=semester_to_response(sem))


async def admit_student(db: AsyncSession, payload: AdmissionCreate) -> AdmissionResponse:
    """
    Create the student with an Active academic-year enrollment and its first semester enrollment.
    total_fee is the Open-category fee; scholarship = Open fee - admission-category fee.
    """
    catalog = CatalogStore(db)
    store = EnrollmentStore(db)

    session_name = (payload.session or "").strip()
    if not session_name:
        raise ValidationError("Academic session is required (e.g. 2025-2026)")
    category = (payload.admission_category or "").strip()
    if not category:
        raise ValidationError("Admission category is required")

    course = await catalog.get_course(payload.course_id)
    if not course:
        raise NotFound("Course not found")
    year_tpl = await catalog.get_academic_year(payload.academic_year_id)
    if not year_tpl:
        raise NotFound("Academic year not found")
    if year_tpl.course_id != course.id:
        raise ValidationError("Academic year does not belong to the selected course")

    semesters = await catalog.semesters_by_academic_year(year_tpl.id)
    if payload.semester_id is not None:
        semester = next((s for s in semesters if s.id == payload.semester_id), None)
        if semester is None:
            raise ValidationError("Semester does not belong to the selected academic year")
    elif semesters:
        semester = semesters[0]
    else:
        raise ValidationError(f"{year_tpl.name} has no semesters defined")

    payable = await catalog.fee_amount(course.id, category)
    try:
        open_fee = await catalog.fee_amount(course.id, settings.open_fee_category)
    except NotFound:
        logger.warning("No '%s' fee for course %s; scholarship will be 0", settings.open_fee_category, course.id)
        open_fee = payable
    scholarship = open_fee - payable
    if scholarship < 0:
        raise ValidationError(
            f"Fee for category '{category}' exceeds the {settings.open_fee_category} fee for this course"
        )

    async with store.run_transaction():
        student = await store.insert_student(
            Student(
                fullname=payload.fullname.strip(),
                roll_number=(payload.roll_number or "").strip() or None,
                email=(payload.email or "").strip() or None,
                admission_category=category,
            )
        )
        year = StudentAcademicYear(
            student_id=student.id,
            course_id=course.id,
            academic_year_name=year_tpl.name,
            academic_year_session=session_name,
            status=YearEnrollmentStatus.ACTIVE.value,
            is_registered=False,
            scholarship_name=category,
        )
        year.apply_fees(open_fee, scholarship)
        await store.insert_academic_year_enrollment(year)
        sem = await store.insert_semester_enrollment(
            StudentSemester(
                student_id=student.id,
                semester_id=semester.id,
                academic_year_enrollment_id=year.id,
                roll_number=student.roll_number,
                status=SemesterEnrollmentStatus.ACTIVE.value,
                promotion_status=PromotionStatus.ELIGIBLE.value,
            )
        )

    logger.info(
        "Admitted student %s into %s / %s (%s), total_fee=%s scholarship=%s",
        student.id, year_tpl.name, semester.name, session_name, year.total_fee, year.scholarship_amount,
    )
    return AdmissionResponse(
        student=StudentResponse.model_validate(student),
        enrollment=active_to_response(year, sem),
    )


async def get_active_enrollment(db: AsyncSession, student_id: UUID) -> ActiveEnrollmentResponse:
    active = await EnrollmentStore(db).get_active_enrollment(student_id)
    if not active:
        raise NotFound("No active enrollment found for this student")
    return active_to_response(*active)


async def get_enrollment_history(db: AsyncSession, student_id: UUID) -> List[EnrollmentHistoryItem]:
    store = EnrollmentStore(db)
    if not await store.get_student(student_id):
        raise NotFound("Student not found")
    history = await store.get_enrollment_history(student_id)
    return [
        EnrollmentHistoryItem(
            academic_year=year_to_response(year),
            semesters=[semester_to_response(s) for s in sems],
        )
        for year, sems in history
    ]
