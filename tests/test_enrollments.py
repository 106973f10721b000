import uuid
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from college_admin.api.v1.enrollments import service
from college_admin.api.v1.enrollments.schemas import AdmissionCreate
from college_admin.core.exceptions import NotFound, ValidationError
from college_admin.core.models import AcademicYear, Course, CourseFee, Semester


@pytest.mark.asyncio
async def test_admission_computes_scholarship_from_category(db_session: AsyncSession, admit, catalog) -> None:
    admission = await admit(category="OBC", semester=None)

    year = admission.enrollment.academic_year
    assert year.status == "Active"
    assert year.is_registered is False
    assert year.total_fee == Decimal("50000")
    assert year.scholarship_name == "OBC"
    assert year.scholarship_amount == Decimal("20000")
    assert year.net_payable_fee == Decimal("30000")
    # No semester given: first semester of the year by catalog order
    assert admission.enrollment.semester.semester_id == catalog.semesters[("First Year", "Semester 1")]
    assert admission.enrollment.semester.promotion_status == "Eligible"


@pytest.mark.asyncio
async def test_admission_rejections(db_session: AsyncSession, catalog) -> None:
    base = dict(
        fullname="Asha Patil",
        course_id=catalog.course_id,
        academic_year_id=catalog.years["First Year"],
        session="2024-2025",
        admission_category="OBC",
    )

    with pytest.raises(NotFound):
        await service.admit_student(db_session, AdmissionCreate(**{**base, "admission_category": "VJ-A"}))
    with pytest.raises(ValidationError):
        await service.admit_student(
            db_session, AdmissionCreate(**{**base, "academic_year_id": catalog.other_year_id})
        )
    with pytest.raises(ValidationError):
        await service.admit_student(
            db_session,
            AdmissionCreate(**{**base, "semester_id": catalog.semesters[("Second Year", "Semester 1")]}),
        )
    with pytest.raises(ValidationError):
        await service.admit_student(db_session, AdmissionCreate(**{**base, "session": " "}))


@pytest.mark.asyncio
async def test_admission_without_open_fee_has_no_scholarship(db_session: AsyncSession, catalog) -> None:
    course = Course(stream_id=catalog.stream_id, name="B.Voc Tourism")
    db_session.add(course)
    await db_session.flush()
    year = AcademicYear(course_id=course.id, name="First Year")
    db_session.add(year)
    await db_session.flush()
    db_session.add(Semester(academic_year_id=year.id, name="Semester 1"))
    db_session.add(CourseFee(course_id=course.id, category_name="OBC", amount=Decimal("25000")))
    await db_session.commit()

    admission = await service.admit_student(
        db_session,
        AdmissionCreate(
            fullname="Ravi Kale",
            course_id=course.id,
            academic_year_id=year.id,
            session="2024-2025",
            admission_category="OBC",
        ),
    )
    enrolled = admission.enrollment.academic_year
    assert enrolled.total_fee == Decimal("25000")
    assert enrolled.scholarship_amount == Decimal("0")
    assert enrolled.net_payable_fee == Decimal("25000")


@pytest.mark.asyncio
async def test_enrollment_endpoints(client: AsyncClient, catalog) -> None:
    response = await client.post(
        "/api/v1/students/admissions",
        json={
            "fullname": "Meera Joshi",
            "roll_number": "CS-101",
            "course_id": str(catalog.course_id),
            "academic_year_id": str(catalog.years["First Year"]),
            "session": "2024-2025",
            "admission_category": "SC",
        },
    )
    assert response.status_code == 201
    data = response.json()
    student_id = data["student"]["id"]
    assert Decimal(data["enrollment"]["academic_year"]["net_payable_fee"]) == Decimal("0")

    response = await client.get(f"/api/v1/students/{student_id}/enrollment")
    assert response.status_code == 200
    assert response.json()["semester"]["roll_number"] == "CS-101"

    response = await client.get(f"/api/v1/students/{student_id}/enrollments")
    assert response.status_code == 200
    history = response.json()
    assert len(history) == 1
    assert len(history[0]["semesters"]) == 1

    response = await client.get(f"/api/v1/students/{uuid.uuid4()}/enrollment")
    assert response.status_code == 404
    assert response.json()["detail"] == {
        "code": "NotFound",
        "message": "No active enrollment found for this student",
    }
