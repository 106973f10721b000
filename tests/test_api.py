import pytest
from httpx import AsyncClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import load_semesters, load_years
from college_admin.core.enums import PromotionStatus
from college_admin.core.store import EnrollmentStore


@pytest.mark.asyncio
async def test_promotion_errors_carry_codes(client: AsyncClient, admit, catalog) -> None:
    held = await admit(promotion_status=PromotionStatus.HOLD)
    response = await client.post(f"/api/v1/progression/students/{held.student.id}/promote", json={})
    assert response.status_code == 409
    assert response.json()["detail"] == {
        "code": "PromotionBlocked",
        "message": "Promotion blocked: current promotion status is 'Hold', must be 'Eligible'",
    }

    finished = await admit("Second Year", "Semester 2")
    response = await client.post(f"/api/v1/progression/students/{finished.student.id}/promote", json={})
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "EndOfCourse"

    response = await client.post(
        f"/api/v1/progression/students/{finished.student.id}/transfer",
        json={
            "target_course_id": str(catalog.course_id),
            "target_academic_year_id": str(catalog.years["First Year"]),
            "target_semester_id": str(catalog.semesters[("First Year", "Semester 1")]),
            "new_session": "2025-2026",
        },
    )
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "SameCourseTransfer"


@pytest.mark.asyncio
async def test_new_year_promotion_over_http(client: AsyncClient, admit, catalog) -> None:
    admission = await admit("First Year", "Semester 2")
    student_id = admission.student.id

    response = await client.get(f"/api/v1/progression/students/{student_id}/target")
    assert response.status_code == 200
    target = response.json()["target"]
    assert target["is_new_year"] is True

    response = await client.post(f"/api/v1/progression/students/{student_id}/promote", json={})
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "ValidationError"

    response = await client.post(
        f"/api/v1/progression/students/{student_id}/promote",
        json={"new_year_session": "2025-2026", "expected_semester_id": target["semester_id"]},
    )
    assert response.status_code == 200
    assert response.json()["academic_year"]["academic_year_name"] == "Second Year"


@pytest.mark.asyncio
async def test_store_failure_rolls_back_and_maps_to_500(
    client: AsyncClient,
    db_session: AsyncSession,
    admit,
    monkeypatch,
) -> None:
    admission = await admit("First Year", "Semester 2")
    student_id = admission.student.id

    async def failing_insert(self, row):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(EnrollmentStore, "insert_semester_enrollment", failing_insert)

    response = await client.post(
        f"/api/v1/progression/students/{student_id}/promote",
        json={"new_year_session": "2025-2026"},
    )
    assert response.status_code == 500
    assert response.json()["detail"]["code"] == "TransactionFailure"

    # The old year row was marked Inactive and a new year inserted before the failure; both undone
    years = await load_years(db_session, student_id)
    assert [(y.academic_year_name, y.status) for y in years] == [("First Year", "Active")]


@pytest.mark.asyncio
async def test_failed_transfer_keeps_old_enrollment_active(
    client: AsyncClient,
    db_session: AsyncSession,
    admit,
    catalog,
    monkeypatch,
) -> None:
    admission = await admit()
    student_id = admission.student.id

    async def failing_insert(self, row):
        raise SQLAlchemyError("connection reset")

    monkeypatch.setattr(EnrollmentStore, "insert_branch_transfer", failing_insert)

    response = await client.post(
        f"/api/v1/progression/students/{student_id}/transfer",
        json={
            "target_course_id": str(catalog.other_course_id),
            "target_academic_year_id": str(catalog.other_year_id),
            "target_semester_id": str(catalog.other_semester_id),
            "new_session": "2024-2025",
        },
    )
    assert response.status_code == 500
    assert response.json()["detail"]["code"] == "TransactionFailure"

    years = await load_years(db_session, student_id)
    assert [(y.course_id, y.status) for y in years] == [(catalog.course_id, "Active")]
    sems = await load_semesters(db_session, student_id)
    assert [(s.semester_id, s.status) for s in sems] == [(catalog.semesters[("First Year", "Semester 1")], "active")]


@pytest.mark.asyncio
async def test_failed_registration_is_undone(
    client: AsyncClient,
    db_session: AsyncSession,
    admit,
    catalog,
    monkeypatch,
) -> None:
    admission = await admit()
    year_id = admission.enrollment.academic_year.id
    original = EnrollmentStore.update_registration

    async def failing_update(self, row, **values):
        # The registration is flushed before the failure
        await original(self, row, **values)
        raise SQLAlchemyError("connection reset")

    monkeypatch.setattr(EnrollmentStore, "update_registration", failing_update)

    response = await client.post(
        f"/api/v1/registration/year-enrollments/{year_id}",
        json={"selected_subject_ids": [str(catalog.subjects["CS101"])], "payment_plan": "OneTime"},
    )
    assert response.status_code == 500
    assert response.json()["detail"]["code"] == "TransactionFailure"

    (year,) = await load_years(db_session, admission.student.id)
    assert year.is_registered is False
    assert year.registered_at is None
    assert year.registration_data is None

    monkeypatch.undo()
    response = await client.post(
        f"/api/v1/registration/year-enrollments/{year_id}",
        json={"selected_subject_ids": [str(catalog.subjects["CS101"])], "payment_plan": "OneTime"},
    )
    assert response.status_code == 200
    assert response.json()["is_registered"] is True
