"""
Progression engine: promotion to the next semester/year and branch transfer.
Every mutation runs inside EnrollmentStore.run_transaction(): either all rows change or none.
"""

import logging
from decimal import Decimal
from typing import List, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from college_admin.api.v1.enrollments.service import active_to_response
from college_admin.api.v1.enrollments.schemas import ActiveEnrollmentResponse
from college_admin.core.config import settings
from college_admin.core.enums import PromotionStatus, SemesterEnrollmentStatus, YearEnrollmentStatus
from college_admin.core.exceptions import (
    CourseCompleted,
    NotFound,
    PromotionBlocked,
    SameCourseTransfer,
    ServiceError,
    ValidationError,
)
from college_admin.core.models import BranchTransfer, Semester, StudentAcademicYear, StudentSemester
from college_admin.core.store import CatalogStore, EnrollmentStore

from .planner import EndOfCourse, PlannerResult, compute_promotion_target
from .schemas import (
    BranchTransferRequest,
    BranchTransferResponse,
    BulkPromoteRequest,
    BulkPromoteResult,
    PromoteRequest,
    PromotionAction,
    PromotionStatusUpdate,
    PromotionStatusUpdateResult,
    PromotionTargetOut,
    PromotionTargetResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_TRANSFER_REASON = "Branch change requested by administration."


async def _plan(
    catalog: CatalogStore,
    year: StudentAcademicYear,
    sem: StudentSemester,
) -> Tuple[Semester, PlannerResult]:
    current = await catalog.get_semester(sem.semester_id)
    if not current:
        raise NotFound("Current semester not found in the catalog")
    years = await catalog.academic_years_by_course(year.course_id)
    semesters_by_year = await catalog.semesters_by_course(year.course_id)
    try:
        return current, compute_promotion_target(current, years, semesters_by_year)
    except ValueError:
        raise ValidationError("Current semester is not part of the enrolled course's catalog")


async def get_promotion_target(db: AsyncSession, student_id: UUID) -> PromotionTargetResponse:
    """Next (year, semester) for the student's current enrollment. Read-only."""
    active = await EnrollmentStore(db).get_active_enrollment(student_id)
    if not active:
        raise NotFound("No active enrollment found for this student")
    year, sem = active
    current, result = await _plan(CatalogStore(db), year, sem)
    response = PromotionTargetResponse(
        student_id=student_id,
        current_semester_id=current.id,
        current_academic_year_name=year.academic_year_name,
        end_of_course=isinstance(result, EndOfCourse),
    )
    if isinstance(result, EndOfCourse):
        response.reason = result.reason
    else:
        response.target = PromotionTargetOut(
            academic_year_id=result.academic_year_id,
            academic_year_name=result.academic_year_name,
            semester_id=result.semester_id,
            semester_name=result.semester_name,
            is_new_year=result.is_new_year,
        )
    return response


async def promote(db: AsyncSession, student_id: UUID, payload: PromoteRequest) -> ActiveEnrollmentResponse:
    """
    Promote the student to the next semester (same year) or to the first semester of the next year.
    Old semester row -> inactive/Promoted; for a new year the old year row -> Inactive and a new
    Active year row carries the scholarship forward with the course's Open fee.
    """
    catalog = CatalogStore(db)
    store = EnrollmentStore(db)

    async with store.run_transaction():
        # Live re-read under lock; never trust a status cached in the session
        active = await store.get_active_enrollment(student_id, for_update=True)
        if not active:
            raise NotFound("No active enrollment found for this student")
        year, sem = active
        if sem.promotion_status != PromotionStatus.ELIGIBLE.value:
            logger.warning("Promotion of student %s blocked: status %s", student_id, sem.promotion_status)
            raise PromotionBlocked(sem.promotion_status)

        current, result = await _plan(catalog, year, sem)
        if isinstance(result, EndOfCourse):
            raise CourseCompleted(result.reason)
        if payload.expected_semester_id is not None and payload.expected_semester_id != result.semester_id:
            raise ValidationError("Promotion target has changed; fetch the current target and retry")

        session_name = (payload.new_year_session or "").strip()
        if result.is_new_year and not session_name:
            raise ValidationError(
                f"Academic session is required to promote into {result.academic_year_name} (e.g. 2025-2026)"
            )

        await store.update_semester_enrollment(
            sem,
            status=SemesterEnrollmentStatus.INACTIVE.value,
            promotion_status=PromotionStatus.PROMOTED.value,
        )

        target_year = year
        if result.is_new_year:
            try:
                open_fee = await catalog.fee_amount(year.course_id, settings.open_fee_category)
            except NotFound:
                open_fee = year.total_fee
            await store.update_academic_year_enrollment(year, status=YearEnrollmentStatus.INACTIVE.value)
            target_year = StudentAcademicYear(
                student_id=student_id,
                course_id=year.course_id,
                academic_year_name=result.academic_year_name,
                academic_year_session=session_name,
                status=YearEnrollmentStatus.ACTIVE.value,
                is_registered=False,
                scholarship_name=year.scholarship_name,
            )
            target_year.apply_fees(open_fee, year.scholarship_amount)
            await store.insert_academic_year_enrollment(target_year)

        new_sem = await store.insert_semester_enrollment(
            StudentSemester(
                student_id=student_id,
                semester_id=result.semester_id,
                academic_year_enrollment_id=target_year.id,
                roll_number=sem.roll_number,
                status=SemesterEnrollmentStatus.ACTIVE.value,
                promotion_status=PromotionStatus.ELIGIBLE.value,
            )
        )

    logger.info(
        "Promoted student %s from %s to %s / %s (new year: %s)",
        student_id, current.name, result.academic_year_name, result.semester_name, result.is_new_year,
    )
    return active_to_response(target_year, new_sem)


async def transfer_branch(
    db: AsyncSession,
    student_id: UUID,
    payload: BranchTransferRequest,
) -> ActiveEnrollmentResponse:
    """
    Move the student to another course. Old semester row -> transferred/Hold, old year row ->
    Transferred; a new Active year row on the target course carries the scholarship forward.
    promotion_status is not checked: transfer is an administrative action.
    """
    session_name = (payload.new_session or "").strip()
    if not session_name:
        raise ValidationError("Academic session is required for the new branch (e.g. 2025-2026)")

    catalog = CatalogStore(db)
    store = EnrollmentStore(db)

    async with store.run_transaction():
        active = await store.get_active_enrollment(student_id, for_update=True)
        if not active:
            raise NotFound("No active enrollment found for this student")
        year, sem = active
        if payload.target_course_id == year.course_id:
            raise SameCourseTransfer()

        course = await catalog.get_course(payload.target_course_id)
        if not course:
            raise NotFound("Target course not found")
        target_year_tpl = await catalog.get_academic_year(payload.target_academic_year_id)
        if not target_year_tpl:
            raise NotFound("Target academic year not found")
        if target_year_tpl.course_id != course.id:
            raise ValidationError("Target academic year does not belong to the target course")
        target_sem = await catalog.get_semester(payload.target_semester_id)
        if not target_sem:
            raise NotFound("Target semester not found")
        if target_sem.academic_year_id != target_year_tpl.id:
            raise ValidationError("Target semester does not belong to the target academic year")

        try:
            open_fee = await catalog.fee_amount(course.id, settings.open_fee_category)
        except NotFound:
            open_fee = Decimal("0")

        if sem.promotion_status != PromotionStatus.ELIGIBLE.value:
            logger.info(
                "Transferring student %s with promotion status %s (administrative override)",
                student_id, sem.promotion_status,
            )

        from_course_id, from_semester_id, from_enrollment_id = year.course_id, sem.semester_id, year.id
        await store.update_semester_enrollment(
            sem,
            status=SemesterEnrollmentStatus.TRANSFERRED.value,
            promotion_status=PromotionStatus.HOLD.value,
        )
        await store.update_academic_year_enrollment(year, status=YearEnrollmentStatus.TRANSFERRED.value)

        new_year = StudentAcademicYear(
            student_id=student_id,
            course_id=course.id,
            academic_year_name=target_year_tpl.name,
            academic_year_session=session_name,
            status=YearEnrollmentStatus.ACTIVE.value,
            is_registered=False,
            scholarship_name=year.scholarship_name,
        )
        new_year.apply_fees(open_fee, year.scholarship_amount)
        await store.insert_academic_year_enrollment(new_year)
        new_sem = await store.insert_semester_enrollment(
            StudentSemester(
                student_id=student_id,
                semester_id=target_sem.id,
                academic_year_enrollment_id=new_year.id,
                roll_number=sem.roll_number,
                status=SemesterEnrollmentStatus.ACTIVE.value,
                promotion_status=PromotionStatus.ELIGIBLE.value,
            )
        )
        await store.insert_branch_transfer(
            BranchTransfer(
                student_id=student_id,
                from_course_id=from_course_id,
                to_course_id=course.id,
                from_semester_id=from_semester_id,
                to_semester_id=target_sem.id,
                from_enrollment_id=from_enrollment_id,
                to_enrollment_id=new_year.id,
                reason=(payload.reason or "").strip() or DEFAULT_TRANSFER_REASON,
            )
        )

    logger.info(
        "Transferred student %s from course %s to %s (%s / %s)",
        student_id, from_course_id, course.id, target_year_tpl.name, target_sem.name,
    )
    return active_to_response(new_year, new_sem)


async def get_transfer_history(db: AsyncSession, student_id: UUID) -> List[BranchTransferResponse]:
    rows = await EnrollmentStore(db).list_branch_transfers(student_id)
    return [BranchTransferResponse.model_validate(r) for r in rows]


async def promote_bulk(
    db: AsyncSession,
    payload: BulkPromoteRequest,
    preview: bool = False,
) -> BulkPromoteResult:
    """
    Promote students active in a semester. Each student is promoted in its own transaction,
    so one student's failure is reported in `skipped` without affecting the others.
    preview=true returns per-student actions without mutating anything.
    """
    catalog = CatalogStore(db)
    store = EnrollmentStore(db)

    rows = await store.active_semester_enrollments(payload.semester_id, payload.student_ids)
    found = {r.student_id for r in rows}
    skipped: List[dict] = [
        {"student_id": str(sid), "reason": "No active enrollment in this semester"}
        for sid in payload.student_ids
        if sid not in found
    ]
    session_name = (payload.new_year_session or "").strip()

    if preview:
        actions: List[PromotionAction] = []
        for r in rows:
            reason = None
            result = None
            if r.promotion_status != PromotionStatus.ELIGIBLE.value:
                reason = PromotionBlocked(r.promotion_status).message
            else:
                year = await store.get_year_enrollment(r.academic_year_enrollment_id)
                try:
                    _, result = await _plan(catalog, year, r)
                except ServiceError as e:
                    reason = e.message
                else:
                    if isinstance(result, EndOfCourse):
                        reason = result.reason
                    elif result.is_new_year and not session_name:
                        reason = f"Academic session is required to promote into {result.academic_year_name}"
            if reason:
                skipped.append({"student_id": str(r.student_id), "reason": reason})
                actions.append(
                    PromotionAction(student_id=r.student_id, action="SKIPPED", from_semester_id=r.semester_id, reason=reason)
                )
            else:
                actions.append(
                    PromotionAction(
                        student_id=r.student_id,
                        action="PROMOTED",
                        from_semester_id=r.semester_id,
                        to_semester_id=result.semester_id,
                        is_new_year=result.is_new_year,
                    )
                )
        promoted_ids = [a.student_id for a in actions if a.action == "PROMOTED"]
        return BulkPromoteResult(
            promoted_count=len(promoted_ids),
            promoted_ids=promoted_ids,
            skipped=skipped,
            actions=actions,
        )

    # Capture ids up front: a rollback expires the loaded rows
    student_ids = [r.student_id for r in rows]
    promoted_ids: List[UUID] = []
    for sid in student_ids:
        try:
            await promote(db, sid, PromoteRequest(new_year_session=payload.new_year_session))
            promoted_ids.append(sid)
        except ServiceError as e:
            skipped.append({"student_id": str(sid), "reason": e.message})

    logger.info("Bulk promotion for semester %s: %d promoted, %d skipped", payload.semester_id, len(promoted_ids), len(skipped))
    return BulkPromoteResult(promoted_count=len(promoted_ids), promoted_ids=promoted_ids, skipped=skipped)


async def set_promotion_status(db: AsyncSession, payload: PromotionStatusUpdate) -> PromotionStatusUpdateResult:
    """Set promotion_status on the active semester rows of the given students (grading outcome)."""
    if payload.promotion_status == PromotionStatus.PROMOTED:
        raise ValidationError("'Promoted' is set only by promotion; choose Eligible, NotEligible, YearDrop or Hold")

    store = EnrollmentStore(db)
    async with store.run_transaction():
        rows = await store.active_semester_enrollments(payload.semester_id, payload.student_ids)
        updated_ids = []
        for r in rows:
            await store.update_semester_enrollment(r, promotion_status=payload.promotion_status.value)
            updated_ids.append(r.student_id)

    skipped = [
        {"student_id": str(sid), "reason": "No active enrollment in this semester"}
        for sid in payload.student_ids
        if sid not in set(updated_ids)
    ]
    logger.info(
        "Set promotion status %s for %d students in semester %s",
        payload.promotion_status.value, len(updated_ids), payload.semester_id,
    )
    return PromotionStatusUpdateResult(updated_count=len(updated_ids), updated_ids=updated_ids, skipped=skipped)
