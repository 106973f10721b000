import uuid
from decimal import Decimal
from types import SimpleNamespace

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from college_admin.api.v1.ledger import service
from college_admin.api.v1.ledger.calculator import global_summary, year_financials
from college_admin.api.v1.ledger.schemas import PaymentCreate
from college_admin.core.exceptions import NotFound, ValidationError


def make_year(net_payable, scholarship="0", registered=True):
    scholarship = Decimal(scholarship)
    net_payable = Decimal(net_payable)
    return SimpleNamespace(
        id=uuid.uuid4(),
        total_fee=net_payable + scholarship,
        scholarship_amount=scholarship,
        net_payable_fee=net_payable,
        is_registered=registered,
    )


def pay(year, amount, fees_type="Tuition Fee"):
    return SimpleNamespace(academic_year_enrollment_id=year.id, amount=Decimal(amount), fees_type=fees_type)


def test_year_financials_splits_payment_types() -> None:
    year = make_year("60000", scholarship="40000")
    payments = [pay(year, "20000"), pay(year, "15000", "Scholarship"), pay(year, "5000", "Exam Fee")]

    fin = year_financials(year, payments)

    assert fin.total_fee == Decimal("100000")
    assert fin.tuition_paid == Decimal("20000")
    assert fin.scholarship_used == Decimal("15000")
    assert fin.other_fees_paid == Decimal("5000")
    assert fin.remaining_due == Decimal("40000")
    assert fin.remaining_scholarship == Decimal("25000")


def test_overpayment_is_not_clamped() -> None:
    year = make_year("1000")
    fin = year_financials(year, [pay(year, "1500")])
    assert fin.remaining_due == Decimal("-500")


def test_global_summary_counts_registered_years_only() -> None:
    unregistered = make_year("50000", registered=False)
    registered = make_year("60000")
    payments = [pay(unregistered, "10000"), pay(registered, "60000")]

    summary = global_summary([unregistered, registered], payments)

    assert summary.total_net_payable == Decimal("60000")
    assert summary.total_paid == Decimal("60000")
    assert summary.total_remaining_due == Decimal("0")
    assert summary.registered_year_ids == [registered.id]


@pytest.mark.asyncio
async def test_record_payment_and_ledger(db_session: AsyncSession, admit) -> None:
    admission = await admit(category="OBC")
    year_id = admission.enrollment.academic_year.id

    await service.record_payment(
        db_session, year_id, PaymentCreate(amount=Decimal("12000"), fees_type="Tuition Fee", payment_method="Cash")
    )
    await service.record_payment(
        db_session,
        year_id,
        PaymentCreate(amount=Decimal("500"), fees_type="Exam Fee", payment_method="Online (UPI)", reference="UTR123"),
    )

    fin = await service.get_year_financials(db_session, year_id)
    assert fin.net_payable_fee == Decimal("30000")
    assert fin.tuition_paid == Decimal("12000")
    assert fin.other_fees_paid == Decimal("500")
    assert fin.remaining_due == Decimal("18000")

    ledger = await service.get_student_ledger(db_session, admission.student.id)
    # Not registered yet: listed but not counted
    assert ledger.total_net_payable == Decimal("0")
    assert len(ledger.years) == 1
    assert ledger.years[0].is_registered is False

    payments = await service.list_payments(db_session, admission.student.id)
    assert sorted(p.fees_type for p in payments) == ["Exam Fee", "Tuition Fee"]


@pytest.mark.asyncio
async def test_record_payment_validation(db_session: AsyncSession, admit) -> None:
    admission = await admit()
    year_id = admission.enrollment.academic_year.id

    with pytest.raises(ValidationError):
        await service.record_payment(
            db_session, year_id, PaymentCreate(amount=Decimal("0"), fees_type="Tuition Fee", payment_method="Cash")
        )
    with pytest.raises(ValidationError):
        await service.record_payment(
            db_session, year_id, PaymentCreate(amount=Decimal("10"), fees_type=" ", payment_method="Cash")
        )
    with pytest.raises(ValidationError):
        await service.record_payment(
            db_session, year_id, PaymentCreate(amount=Decimal("10"), fees_type="Tuition Fee", payment_method="")
        )
    with pytest.raises(NotFound):
        await service.record_payment(
            db_session, uuid.uuid4(), PaymentCreate(amount=Decimal("10"), fees_type="Tuition Fee", payment_method="Cash")
        )


@pytest.mark.asyncio
async def test_ledger_api(client: AsyncClient, admit) -> None:
    admission = await admit(category="SC")
    year_id = str(admission.enrollment.academic_year.id)

    response = await client.post(
        f"/api/v1/ledger/year-enrollments/{year_id}/payments",
        json={"amount": "2500", "fees_type": "Scholarship", "payment_method": "Trust"},
    )
    assert response.status_code == 201

    response = await client.get(f"/api/v1/ledger/year-enrollments/{year_id}")
    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["scholarship_amount"]) == Decimal("50000")
    assert Decimal(data["remaining_scholarship"]) == Decimal("47500")

    response = await client.get(f"/api/v1/ledger/students/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "NotFound"
