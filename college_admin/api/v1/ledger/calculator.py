"""
Fee ledger arithmetic over academic-year enrollments and payments. No I/O.

Only tuition payments count against net_payable_fee; scholarship disbursements and
other fees are tracked separately.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from college_admin.core.config import settings


def _to_decimal(val) -> Decimal:
    if val is None:
        return Decimal("0")
    return val if isinstance(val, Decimal) else Decimal(str(val))


@dataclass
class YearFinancials:
    year_enrollment_id: Optional[UUID]
    total_fee: Decimal
    scholarship_amount: Decimal
    net_payable_fee: Decimal
    tuition_paid: Decimal
    scholarship_used: Decimal
    other_fees_paid: Decimal
    remaining_due: Decimal  # negative when overpaid
    remaining_scholarship: Decimal


@dataclass
class GlobalSummary:
    total_net_payable: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")
    total_scholarship: Decimal = Decimal("0")
    total_remaining_due: Decimal = Decimal("0")
    registered_year_ids: List[UUID] = field(default_factory=list)


def year_financials(
    year,
    payments: Iterable,
    tuition_type: Optional[str] = None,
    scholarship_type: Optional[str] = None,
) -> YearFinancials:
    """Aggregate the payments recorded against one academic-year enrollment."""
    tuition_type = tuition_type or settings.tuition_fee_type
    scholarship_type = scholarship_type or settings.scholarship_fee_type

    tuition = Decimal("0")
    scholarship = Decimal("0")
    other = Decimal("0")
    for p in payments:
        amount = _to_decimal(p.amount)
        if p.fees_type == tuition_type:
            tuition += amount
        elif p.fees_type == scholarship_type:
            scholarship += amount
        else:
            other += amount

    net_payable = _to_decimal(year.net_payable_fee)
    allocated = _to_decimal(year.scholarship_amount)
    return YearFinancials(
        year_enrollment_id=getattr(year, "id", None),
        total_fee=_to_decimal(year.total_fee),
        scholarship_amount=allocated,
        net_payable_fee=net_payable,
        tuition_paid=tuition,
        scholarship_used=scholarship,
        other_fees_paid=other,
        remaining_due=net_payable - tuition,
        remaining_scholarship=allocated - scholarship,
    )


def group_payments(payments: Iterable) -> Dict[UUID, List]:
    grouped: Dict[UUID, List] = {}
    for p in payments:
        grouped.setdefault(p.academic_year_enrollment_id, []).append(p)
    return grouped


def global_summary(years: Iterable, payments: Iterable) -> GlobalSummary:
    """
    Totals across the student's REGISTERED academic years only. Unregistered years are
    informational and never contribute, even if payments exist against them.
    """
    by_year = group_payments(payments)
    summary = GlobalSummary()
    for year in years:
        if not year.is_registered:
            continue
        fin = year_financials(year, by_year.get(year.id, []))
        summary.total_net_payable += fin.net_payable_fee
        summary.total_paid += fin.tuition_paid
        summary.total_scholarship += fin.scholarship_amount
        summary.registered_year_ids.append(year.id)
    summary.total_remaining_due = summary.total_net_payable - summary.total_paid
    return summary
