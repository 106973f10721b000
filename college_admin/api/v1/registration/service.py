"""
Registration gate: finalizes an academic-year enrollment (subjects, payment plan,
scholarship override). A year can be registered exactly once.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from college_admin.api.v1.enrollments.schemas import YearEnrollmentResponse
from college_admin.api.v1.enrollments.service import year_to_response
from college_admin.core.enums import PaymentPlan, YearEnrollmentStatus
from college_admin.core.exceptions import AlreadyRegistered, MissingUndertaking, NotFound, ValidationError
from college_admin.core.store import CatalogStore, EnrollmentStore

from .schemas import PendingRegistrationItem, RegistrationRequest

logger = logging.getLogger(__name__)


async def register(db: AsyncSession, year_enrollment_id: UUID, payload: RegistrationRequest) -> YearEnrollmentResponse:
    catalog = CatalogStore(db)
    store = EnrollmentStore(db)

    async with store.run_transaction():
        year = await store.get_year_enrollment(year_enrollment_id, for_update=True)
        if not year:
            raise NotFound("Academic year enrollment not found")
        if year.is_registered:
            logger.warning("Registration of year enrollment %s rejected: already registered", year.id)
            raise AlreadyRegistered()
        if year.status != YearEnrollmentStatus.ACTIVE.value:
            raise ValidationError(f"Only an Active academic year can be registered (status is '{year.status}')")
        if not payload.selected_subject_ids:
            raise ValidationError("Select at least one subject")
        undertaking_ref = (payload.undertaking_ref or "").strip() or None
        if payload.payment_plan == PaymentPlan.INSTALLMENT and not undertaking_ref:
            raise MissingUndertaking()

        sem = await store.get_active_semester(year.id)
        if not sem:
            raise ValidationError("No active semester found for this academic year")
        semester = await catalog.get_semester(sem.semester_id)
        subjects = await catalog.subjects_by_semester(sem.semester_id)
        offered = {s.id for s in subjects}
        unknown = [str(sid) for sid in payload.selected_subject_ids if sid not in offered]
        if unknown:
            raise ValidationError(f"Subjects not offered in {semester.name}: {', '.join(unknown)}")

        values = {}
        category = (payload.scholarship_category or "").strip()
        if category:
            category_fee = await catalog.fee_amount(year.course_id, category)
            scholarship = year.total_fee - category_fee
            if scholarship < 0:
                raise ValidationError(
                    f"Fee for category '{category}' exceeds the total fee of this academic year"
                )
            values["scholarship_name"] = category
            values["scholarship_amount"] = scholarship

        # Compulsory subjects are always part of the registration
        chosen = set(payload.selected_subject_ids)
        selected = [s for s in subjects if s.id in chosen or not s.is_optional]
        registered_at = datetime.utcnow()
        await store.update_registration(
            year,
            is_registered=True,
            payment_plan=payload.payment_plan.value,
            undertaking_ref=undertaking_ref,
            registered_at=registered_at,
            registration_data={
                "registered_at": registered_at.isoformat(),
                "semester_id": str(semester.id),
                "semester_name": semester.name,
                "selected_subjects": [
                    {
                        "id": str(s.id),
                        "name": s.name,
                        "subject_code": s.subject_code,
                        "is_optional": bool(s.is_optional),
                    }
                    for s in selected
                ],
            },
            **values,
        )
        response = year_to_response(year)

    logger.info(
        "Registered year enrollment %s (%s, %d subjects, plan %s, net payable %s)",
        year_enrollment_id, response.academic_year_name, len(selected),
        payload.payment_plan.value, response.net_payable_fee,
    )
    return response


async def list_pending_registrations(
    db: AsyncSession,
    course_id: Optional[UUID] = None,
) -> List[PendingRegistrationItem]:
    """Active academic-year enrollments that have not been registered yet."""
    store = EnrollmentStore(db)
    years = await store.list_pending_registrations(course_id)
    students = await store.get_students([y.student_id for y in years])
    items = []
    for y in years:
        student = students.get(y.student_id)
        items.append(
            PendingRegistrationItem(
                year_enrollment_id=y.id,
                student_id=y.student_id,
                fullname=student.fullname if student else None,
                roll_number=student.roll_number if student else None,
                course_id=y.course_id,
                academic_year_name=y.academic_year_name,
                academic_year_session=y.academic_year_session,
                net_payable_fee=y.net_payable_fee,
            )
        )
    return items
