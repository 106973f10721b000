"""
Promotion target computation. Pure: depends only on the catalog and the current semester,
so calling it twice without a mutation in between yields the same answer.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence, Union
from uuid import UUID

from college_admin.core.ordering import sort_catalog


@dataclass(frozen=True)
class PromotionTarget:
    academic_year_id: UUID
    academic_year_name: str
    semester_id: UUID
    semester_name: str
    is_new_year: bool


@dataclass(frozen=True)
class EndOfCourse:
    """Terminal state: there is no further semester to promote into."""

    reason: str


PlannerResult = Union[PromotionTarget, EndOfCourse]


def _index_of(nodes: List, node_id: UUID) -> int:
    for i, node in enumerate(nodes):
        if node.id == node_id:
            return i
    raise ValueError(f"{node_id} is not part of the catalog list")


def compute_promotion_target(
    current_semester,
    course_years: Sequence,
    semesters_by_year: Dict[UUID, Sequence],
) -> PlannerResult:
    """
    current_semester: catalog Semester the student is active in.
    course_years: academic-year templates of the student's course (any order).
    semesters_by_year: academic_year_id -> semesters of that year (any order).
    """
    years = sort_catalog(course_years)
    year_idx = _index_of(years, current_semester.academic_year_id)
    current_year = years[year_idx]

    semesters = sort_catalog(semesters_by_year.get(current_year.id, []))
    sem_idx = _index_of(semesters, current_semester.id)
    if sem_idx + 1 < len(semesters):
        nxt = semesters[sem_idx + 1]
        return PromotionTarget(
            academic_year_id=current_year.id,
            academic_year_name=current_year.name,
            semester_id=nxt.id,
            semester_name=nxt.name,
            is_new_year=False,
        )

    if year_idx + 1 >= len(years):
        return EndOfCourse(f"{current_semester.name} of {current_year.name} is the last semester of the course")

    next_year = years[year_idx + 1]
    next_semesters = sort_catalog(semesters_by_year.get(next_year.id, []))
    if not next_semesters:
        return EndOfCourse(f"{next_year.name} has no semesters defined")
    first = next_semesters[0]
    return PromotionTarget(
        academic_year_id=next_year.id,
        academic_year_name=next_year.name,
        semester_id=first.id,
        semester_name=first.name,
        is_new_year=True,
    )
