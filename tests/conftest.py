import os
from dataclasses import dataclass
from decimal import Decimal
from typing import AsyncGenerator, Awaitable, Callable, Dict, Optional
from uuid import UUID

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from college_admin.api.v1.enrollments.schemas import AdmissionCreate, AdmissionResponse
from college_admin.api.v1.enrollments.service import admit_student
from college_admin.core.enums import PromotionStatus
from college_admin.core.models import (
    AcademicYear,
    Course,
    CourseFee,
    Semester,
    Stream,
    StudentAcademicYear,
    StudentSemester,
    Subject,
)
from college_admin.db.session import Base, get_db
from college_admin.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """One in-memory database per test; StaticPool keeps every session on the same connection."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a test and override FastAPI dependency."""
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@dataclass
class Catalog:
    stream_id: UUID
    course_id: UUID
    years: Dict[str, UUID]
    # (year name, semester name) -> semester id
    semesters: Dict[tuple, UUID]
    subjects: Dict[str, UUID]
    other_course_id: UUID
    other_year_id: UUID
    other_semester_id: UUID


@pytest.fixture()
async def catalog(db_session: AsyncSession) -> Catalog:
    """
    B.Sc Computer Science: First Year / Second Year, each with Semester 1 and Semester 2.
    Fees: Open 50000, OBC 30000, SC 0. Semester 1 of First Year offers two compulsory
    subjects and one optional subject.
    B.Sc Physics (transfer target): First Year / Semester 1, Open 40000.
    """
    stream = Stream(name="Science")
    db_session.add(stream)
    await db_session.flush()

    course = Course(stream_id=stream.id, name="B.Sc Computer Science")
    other = Course(stream_id=stream.id, name="B.Sc Physics")
    db_session.add_all([course, other])
    await db_session.flush()

    years: Dict[str, UUID] = {}
    semesters: Dict[tuple, UUID] = {}
    for year_name in ("First Year", "Second Year"):
        year = AcademicYear(course_id=course.id, name=year_name)
        db_session.add(year)
        await db_session.flush()
        years[year_name] = year.id
        for sem_name in ("Semester 1", "Semester 2"):
            sem = Semester(academic_year_id=year.id, name=sem_name)
            db_session.add(sem)
            await db_session.flush()
            semesters[(year_name, sem_name)] = sem.id

    first_sem = semesters[("First Year", "Semester 1")]
    subjects: Dict[str, UUID] = {}
    for name, code, optional in (
        ("Programming in C", "CS101", False),
        ("Discrete Mathematics", "MA101", False),
        ("Environmental Studies", "EV101", True),
    ):
        subject = Subject(semester_id=first_sem, name=name, subject_code=code, subject_type="Theory", is_optional=optional)
        db_session.add(subject)
        await db_session.flush()
        subjects[code] = subject.id

    db_session.add_all(
        [
            CourseFee(course_id=course.id, category_name="Open", amount=Decimal("50000")),
            CourseFee(course_id=course.id, category_name="OBC", amount=Decimal("30000")),
            CourseFee(course_id=course.id, category_name="SC", amount=Decimal("0")),
            CourseFee(course_id=other.id, category_name="Open", amount=Decimal("40000")),
        ]
    )

    other_year = AcademicYear(course_id=other.id, name="First Year")
    db_session.add(other_year)
    await db_session.flush()
    other_sem = Semester(academic_year_id=other_year.id, name="Semester 1")
    db_session.add(other_sem)
    await db_session.commit()

    return Catalog(
        stream_id=stream.id,
        course_id=course.id,
        years=years,
        semesters=semesters,
        subjects=subjects,
        other_course_id=other.id,
        other_year_id=other_year.id,
        other_semester_id=other_sem.id,
    )


AdmitFn = Callable[..., Awaitable[AdmissionResponse]]


@pytest.fixture()
def admit(db_session: AsyncSession, catalog: Catalog) -> AdmitFn:
    """Admit a student into the given (year, semester) of the Computer Science course."""
    counter = {"n": 0}

    async def _admit(
        year: str = "First Year",
        semester: Optional[str] = "Semester 1",
        category: str = "OBC",
        promotion_status: Optional[PromotionStatus] = None,
    ) -> AdmissionResponse:
        counter["n"] += 1
        admission = await admit_student(
            db_session,
            AdmissionCreate(
                fullname=f"Student {counter['n']}",
                roll_number=f"CS-{counter['n']:03d}",
                course_id=catalog.course_id,
                academic_year_id=catalog.years[year],
                semester_id=catalog.semesters[(year, semester)] if semester else None,
                session="2024-2025",
                admission_category=category,
            ),
        )
        if promotion_status is not None:
            sem = await db_session.get(StudentSemester, admission.enrollment.semester.id)
            sem.promotion_status = promotion_status.value
            await db_session.commit()
        return admission

    return _admit


async def load_years(db: AsyncSession, student_id: UUID):
    result = await db.execute(
        select(StudentAcademicYear)
        .where(StudentAcademicYear.student_id == student_id)
        .order_by(StudentAcademicYear.created_at, StudentAcademicYear.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def load_semesters(db: AsyncSession, student_id: UUID):
    result = await db.execute(
        select(StudentSemester)
        .where(StudentSemester.student_id == student_id)
        .order_by(StudentSemester.created_at, StudentSemester.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())
