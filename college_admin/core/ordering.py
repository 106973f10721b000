"""
Catalog ordering shared by every place that needs "next" academic year or semester.

Order of precedence:
1. explicit rank (rows with a rank come first, ascending);
2. legacy named years ("First Year" .. "Final Year"), case-insensitive;
3. natural, numeric-aware name order ("Semester 2" before "Semester 10").
Ties fall back to natural name order, then id.
"""

import re
from typing import Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")

NAMED_YEAR_RANKS = {
    "first year": 1,
    "second year": 2,
    "third year": 3,
    "fourth year": 4,
    "final year": 5,
}

_DIGITS = re.compile(r"(\d+)")


def natural_key(name: Optional[str]) -> Tuple:
    """Split a name into text and integer chunks so embedded numbers compare numerically."""
    parts = _DIGITS.split((name or "").strip().lower())
    return tuple((0, int(p), "") if p.isdigit() else (1, 0, p) for p in parts if p != "")


def named_year_rank(name: Optional[str]) -> Optional[int]:
    return NAMED_YEAR_RANKS.get(" ".join((name or "").lower().split()))


def catalog_sort_key(node) -> Tuple:
    """Sort key for AcademicYear / Semester rows (anything with name, optional rank and id)."""
    name = getattr(node, "name", None)
    rank = getattr(node, "rank", None)
    tiebreak = (natural_key(name), str(getattr(node, "id", "")))
    if rank is not None:
        return (0, rank) + tiebreak
    legacy = named_year_rank(name)
    if legacy is not None:
        return (1, legacy) + tiebreak
    return (2, 0) + tiebreak


def sort_catalog(nodes: Iterable[T]) -> List[T]:
    return sorted(nodes, key=catalog_sort_key)
