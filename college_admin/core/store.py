"""
Data-access layer consumed by the progression, ledger and registration services.

Stores wrap the request's AsyncSession (injected via Depends(get_db)); nothing here is a
module-level client. Mutating helpers only stage and flush; committing is owned by
EnrollmentStore.run_transaction().
"""

import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from college_admin.core.enums import SemesterEnrollmentStatus, YearEnrollmentStatus
from college_admin.core.exceptions import NotFound
from college_admin.core.models import (
    AcademicYear,
    BranchTransfer,
    Course,
    CourseFee,
    Semester,
    Stream,
    Student,
    StudentAcademicYear,
    StudentPayment,
    StudentSemester,
    Subject,
)
from college_admin.core.ordering import natural_key, sort_catalog

logger = logging.getLogger(__name__)

ActiveEnrollment = Tuple[StudentAcademicYear, StudentSemester]


class CatalogStore:
    """Read access to streams, courses, year/semester templates, subjects and course fees."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_streams(self) -> List[Stream]:
        result = await self.db.execute(select(Stream))
        return sorted(result.scalars().all(), key=lambda s: natural_key(s.name))

    async def get_stream(self, stream_id: UUID) -> Optional[Stream]:
        return await self.db.get(Stream, stream_id)

    async def get_course(self, course_id: UUID) -> Optional[Course]:
        return await self.db.get(Course, course_id)

    async def get_academic_year(self, academic_year_id: UUID) -> Optional[AcademicYear]:
        return await self.db.get(AcademicYear, academic_year_id)

    async def get_semester(self, semester_id: UUID) -> Optional[Semester]:
        return await self.db.get(Semester, semester_id)

    async def courses_by_stream(self, stream_id: UUID) -> List[Course]:
        result = await self.db.execute(select(Course).where(Course.stream_id == stream_id))
        return sorted(result.scalars().all(), key=lambda c: natural_key(c.name))

    async def academic_years_by_course(self, course_id: UUID) -> List[AcademicYear]:
        result = await self.db.execute(select(AcademicYear).where(AcademicYear.course_id == course_id))
        return sort_catalog(result.scalars().all())

    async def semesters_by_academic_year(self, academic_year_id: UUID) -> List[Semester]:
        result = await self.db.execute(select(Semester).where(Semester.academic_year_id == academic_year_id))
        return sort_catalog(result.scalars().all())

    async def semesters_by_course(self, course_id: UUID) -> Dict[UUID, List[Semester]]:
        """All semesters of a course grouped by academic-year template id (each list sorted)."""
        result = await self.db.execute(
            select(Semester)
            .join(AcademicYear, Semester.academic_year_id == AcademicYear.id)
            .where(AcademicYear.course_id == course_id)
        )
        grouped: Dict[UUID, List[Semester]] = {}
        for sem in result.scalars().all():
            grouped.setdefault(sem.academic_year_id, []).append(sem)
        return {year_id: sort_catalog(sems) for year_id, sems in grouped.items()}

    async def subjects_by_semester(self, semester_id: UUID) -> List[Subject]:
        result = await self.db.execute(
            select(Subject).where(Subject.semester_id == semester_id).order_by(Subject.name)
        )
        return list(result.scalars().all())

    async def fee_amount(self, course_id: UUID, category_name: str) -> Decimal:
        """Fee for (course, category). Raises NotFound; callers decide any fallback."""
        result = await self.db.execute(
            select(CourseFee.amount).where(
                CourseFee.course_id == course_id,
                CourseFee.category_name == category_name,
            )
        )
        amount = result.scalar_one_or_none()
        if amount is None:
            raise NotFound(f"No fee structure found for this course and category: {category_name}")
        return Decimal(str(amount))

    async def course_fees(self, course_id: UUID) -> List[CourseFee]:
        result = await self.db.execute(
            select(CourseFee).where(CourseFee.course_id == course_id).order_by(CourseFee.category_name)
        )
        return list(result.scalars().all())

    async def upsert_course_fee(self, course_id: UUID, category_name: str, amount: Decimal) -> CourseFee:
        result = await self.db.execute(
            select(CourseFee).where(
                CourseFee.course_id == course_id,
                CourseFee.category_name == category_name,
            )
        )
        fee = result.scalar_one_or_none()
        if fee:
            fee.amount = amount
        else:
            fee = CourseFee(course_id=course_id, category_name=category_name, amount=amount)
            self.db.add(fee)
        await self.db.flush()
        return fee


class EnrollmentStore:
    """Student enrollments, payments and transfer history, plus the unit-of-work primitive."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @asynccontextmanager
    async def run_transaction(self) -> AsyncIterator["EnrollmentStore"]:
        """Commit everything staged inside the block, or roll it all back and re-raise unchanged."""
        try:
            yield self
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.debug("Transaction rolled back", exc_info=True)
            raise

    # --- Reads ---
    async def get_student(self, student_id: UUID) -> Optional[Student]:
        return await self.db.get(Student, student_id)

    async def get_students(self, student_ids: Sequence[UUID]) -> Dict[UUID, Student]:
        if not student_ids:
            return {}
        result = await self.db.execute(select(Student).where(Student.id.in_(list(student_ids))))
        return {s.id: s for s in result.scalars().all()}

    async def get_active_enrollment(self, student_id: UUID, for_update: bool = False) -> Optional[ActiveEnrollment]:
        """
        Active (year, semester) pair for a student, or None.
        for_update=True locks both rows and re-reads them from the database, ignoring any
        cached state in the session.
        """
        year_stmt = select(StudentAcademicYear).where(
            StudentAcademicYear.student_id == student_id,
            StudentAcademicYear.status == YearEnrollmentStatus.ACTIVE.value,
        )
        if for_update:
            year_stmt = year_stmt.with_for_update().execution_options(populate_existing=True)
        year = (await self.db.execute(year_stmt)).scalar_one_or_none()
        if not year:
            return None
        sem_stmt = select(StudentSemester).where(
            StudentSemester.academic_year_enrollment_id == year.id,
            StudentSemester.status == SemesterEnrollmentStatus.ACTIVE.value,
        )
        if for_update:
            sem_stmt = sem_stmt.with_for_update().execution_options(populate_existing=True)
        sem = (await self.db.execute(sem_stmt)).scalar_one_or_none()
        if not sem:
            return None
        return year, sem

    async def get_year_enrollment(self, year_enrollment_id: UUID, for_update: bool = False) -> Optional[StudentAcademicYear]:
        stmt = select(StudentAcademicYear).where(StudentAcademicYear.id == year_enrollment_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def get_active_semester(self, year_enrollment_id: UUID) -> Optional[StudentSemester]:
        result = await self.db.execute(
            select(StudentSemester).where(
                StudentSemester.academic_year_enrollment_id == year_enrollment_id,
                StudentSemester.status == SemesterEnrollmentStatus.ACTIVE.value,
            )
        )
        return result.scalar_one_or_none()

    async def list_year_enrollments(self, student_id: UUID) -> List[StudentAcademicYear]:
        result = await self.db.execute(
            select(StudentAcademicYear)
            .where(StudentAcademicYear.student_id == student_id)
            .order_by(StudentAcademicYear.created_at, StudentAcademicYear.id)
        )
        return list(result.scalars().all())

    async def get_enrollment_history(self, student_id: UUID) -> List[Tuple[StudentAcademicYear, List[StudentSemester]]]:
        """Every academic-year enrollment of the student (oldest first) with its semester rows."""
        years = await self.list_year_enrollments(student_id)
        result = await self.db.execute(
            select(StudentSemester)
            .where(StudentSemester.student_id == student_id)
            .order_by(StudentSemester.created_at, StudentSemester.id)
        )
        by_year: Dict[UUID, List[StudentSemester]] = {}
        for sem in result.scalars().all():
            by_year.setdefault(sem.academic_year_enrollment_id, []).append(sem)
        return [(y, by_year.get(y.id, [])) for y in years]

    async def get_payments(self, student_id: UUID, year_enrollment_id: Optional[UUID] = None) -> List[StudentPayment]:
        stmt = select(StudentPayment).where(StudentPayment.student_id == student_id)
        if year_enrollment_id is not None:
            stmt = stmt.where(StudentPayment.academic_year_enrollment_id == year_enrollment_id)
        stmt = stmt.order_by(StudentPayment.created_at, StudentPayment.id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def active_semester_enrollments(
        self,
        semester_id: UUID,
        student_ids: Optional[Sequence[UUID]] = None,
    ) -> List[StudentSemester]:
        """Active semester rows for a catalog semester whose parent year is also Active."""
        stmt = (
            select(StudentSemester)
            .join(StudentAcademicYear, StudentSemester.academic_year_enrollment_id == StudentAcademicYear.id)
            .where(
                StudentSemester.semester_id == semester_id,
                StudentSemester.status == SemesterEnrollmentStatus.ACTIVE.value,
                StudentAcademicYear.status == YearEnrollmentStatus.ACTIVE.value,
            )
        )
        if student_ids:
            stmt = stmt.where(StudentSemester.student_id.in_(list(student_ids)))
        result = await self.db.execute(stmt.order_by(StudentSemester.roll_number, StudentSemester.student_id))
        return list(result.scalars().all())

    async def list_pending_registrations(self, course_id: Optional[UUID] = None) -> List[StudentAcademicYear]:
        stmt = select(StudentAcademicYear).where(
            StudentAcademicYear.status == YearEnrollmentStatus.ACTIVE.value,
            StudentAcademicYear.is_registered.is_(False),
        )
        if course_id is not None:
            stmt = stmt.where(StudentAcademicYear.course_id == course_id)
        result = await self.db.execute(stmt.order_by(StudentAcademicYear.created_at))
        return list(result.scalars().all())

    async def list_branch_transfers(self, student_id: UUID) -> List[BranchTransfer]:
        result = await self.db.execute(
            select(BranchTransfer)
            .where(BranchTransfer.student_id == student_id)
            .order_by(BranchTransfer.created_at, BranchTransfer.id)
        )
        return list(result.scalars().all())

    # --- Writes (flush only) ---
    async def insert_student(self, student: Student) -> Student:
        self.db.add(student)
        await self.db.flush()
        return student

    async def insert_academic_year_enrollment(self, row: StudentAcademicYear) -> StudentAcademicYear:
        self.db.add(row)
        await self.db.flush()
        return row

    async def update_academic_year_enrollment(self, row: StudentAcademicYear, **values) -> StudentAcademicYear:
        for key, value in values.items():
            setattr(row, key, value)
        await self.db.flush()
        return row

    async def insert_semester_enrollment(self, row: StudentSemester) -> StudentSemester:
        self.db.add(row)
        await self.db.flush()
        return row

    async def update_semester_enrollment(self, row: StudentSemester, **values) -> StudentSemester:
        for key, value in values.items():
            setattr(row, key, value)
        await self.db.flush()
        return row

    async def update_registration(self, row: StudentAcademicYear, **values) -> StudentAcademicYear:
        """Registration writes; fee figures go through apply_fees() so net_payable_fee stays derived."""
        total_fee = values.pop("total_fee", row.total_fee)
        scholarship_amount = values.pop("scholarship_amount", row.scholarship_amount)
        row.apply_fees(total_fee, scholarship_amount)
        return await self.update_academic_year_enrollment(row, **values)

    async def insert_payment(self, payment: StudentPayment) -> StudentPayment:
        self.db.add(payment)
        await self.db.flush()
        return payment

    async def insert_branch_transfer(self, row: BranchTransfer) -> BranchTransfer:
        self.db.add(row)
        await self.db.flush()
        return row
