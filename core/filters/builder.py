#!/usr/bin/env python3
"""
Query/Filter Builder - loosely typed query parameters to SQL conditions.

Rules:
- Every filter is optional; None, "" and "All"/"all" mean "no constraint".
- Text filters are case-insensitive substring matches with LIKE wildcards
  escaped, OR-ed across the columns of one group.
- Groups are AND-ed together.
- Salary ranges match by overlap: posting.max >= min AND posting.min <= max.

Usage:
    builder = FilterBuilder()
    builder.text_group([Job.job_title, Job.job_description], params.search)
    builder.equals(Job.job_type, params.job_type)
    stmt = select(Job).where(*builder.conditions)
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from sqlalchemy import and_, exists, or_, select, true
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.sql.functions import FunctionElement

from core.utils import escape_like

logger = logging.getLogger(__name__)

LIKE_ESCAPE = '\\'
ALL_SENTINEL = 'all'


def is_unset(value: Any) -> bool:
    """True when a filter value should impose no constraint."""
    if value is None:
        return True
    if isinstance(value, str):
        stripped = value.strip()
        return stripped == '' or stripped.lower() == ALL_SENTINEL
    if isinstance(value, (list, tuple, set)):
        return all(is_unset(item) for item in value)
    return False


def contains(column: ColumnElement, term: str) -> ColumnElement:
    """Case-insensitive substring match with wildcards escaped."""
    pattern = f"%{escape_like(term.strip(), LIKE_ESCAPE)}%"
    return column.ilike(pattern, escape=LIKE_ESCAPE)


def contains_any(columns: Iterable[ColumnElement], term: str) -> ColumnElement:
    return or_(*[contains(column, term) for column in columns])


class json_array_elements(FunctionElement):
    """Text elements of a JSON array column, one row per element."""
    name = 'json_array_elements'
    inherit_cache = True


@compiles(json_array_elements)
def _compile_json_each(element, compiler, **kw):
    return f"json_each({compiler.process(element.clauses, **kw)})"


@compiles(json_array_elements, 'postgresql')
def _compile_jsonb_elements(element, compiler, **kw):
    return f"jsonb_array_elements_text({compiler.process(element.clauses, **kw)})"


def element_contains(column: ColumnElement, term: str) -> ColumnElement:
    """True when any element of a JSON array column contains the term."""
    elements = json_array_elements(column).table_valued('value')
    return exists(
        select(elements.c.value).select_from(elements).where(contains(elements.c.value, term))
    )


class FilterBuilder:
    """Accumulates AND-ed filter conditions, skipping unset values."""

    def __init__(self, base: Optional[Sequence[ColumnElement]] = None):
        self._conditions: List[ColumnElement] = list(base or [])

    @property
    def conditions(self) -> List[ColumnElement]:
        return list(self._conditions)

    def build(self) -> ColumnElement:
        return and_(*self._conditions) if self._conditions else true()

    def where(self, condition: Optional[ColumnElement]) -> "FilterBuilder":
        if condition is not None:
            self._conditions.append(condition)
        return self

    def equals(self, column: ColumnElement, value: Any) -> "FilterBuilder":
        if not is_unset(value):
            self._conditions.append(column == value)
        return self

    def text(self, column: ColumnElement, term: Optional[str]) -> "FilterBuilder":
        if not is_unset(term):
            self._conditions.append(contains(column, term))
        return self

    def text_group(self, columns: Sequence[ColumnElement], term: Optional[str]) -> "FilterBuilder":
        """One search term matched against several columns (OR within the group)."""
        if not is_unset(term):
            self._conditions.append(contains_any(columns, term))
        return self

    def any_term(
        self,
        column: ColumnElement,
        terms: Optional[Iterable[str]],
        match: Callable[[ColumnElement, str], ColumnElement] = contains
    ) -> "FilterBuilder":
        """Several terms against one column, any of which may match."""
        cleaned = [t for t in (terms or []) if not is_unset(t)]
        if cleaned:
            self._conditions.append(or_(*[match(column, t) for t in cleaned]))
        return self

    def at_least(self, column: ColumnElement, value: Optional[float]) -> "FilterBuilder":
        if value is not None and value > 0:
            self._conditions.append(column >= value)
        return self

    def flag(self, column: ColumnElement, value: Optional[bool]) -> "FilterBuilder":
        """Only a true flag constrains; false means "don't care"."""
        if value:
            self._conditions.append(column.is_(True))
        return self

    def range_overlap(
        self,
        min_column: ColumnElement,
        max_column: ColumnElement,
        low: Optional[float],
        high: Optional[float]
    ) -> "FilterBuilder":
        """Posting [min_column, max_column] overlaps the requested [low, high]."""
        if low is not None and low > 0:
            self._conditions.append(max_column >= low)
        if high is not None and high > 0:
            self._conditions.append(min_column <= high)
        return self


# === Pagination ===

@dataclass(frozen=True)
class PageRequest:
    """1-indexed page window."""
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def build(
        cls,
        page: Optional[int],
        limit: Optional[int],
        default_limit: int = 10,
        max_limit: int = 100
    ) -> "PageRequest":
        page = page if page and page > 0 else 1
        limit = limit if limit and limit > 0 else default_limit
        return cls(page=page, limit=min(limit, max_limit))


@dataclass(frozen=True)
class PageInfo:
    current_page: int
    total_pages: int
    total_items: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, request: PageRequest, total_items: int) -> "PageInfo":
        total_pages = math.ceil(total_items / request.limit) if request.limit else 0
        return cls(
            current_page=request.page,
            total_pages=total_pages,
            total_items=total_items,
            has_next_page=request.page < total_pages,
            has_prev_page=request.page > 1,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'currentPage': self.current_page,
            'totalPages': self.total_pages,
            'totalItems': self.total_items,
            'hasNextPage': self.has_next_page,
            'hasPrevPage': self.has_prev_page,
        }


# === Sorting ===

# A sortable field maps to one or more columns. A column may pin its own
# direction (e.g. "featured first") regardless of the requested order.
SortColumn = Union[ColumnElement, Tuple[ColumnElement, str]]


def resolve_sort(
    sort_by: Optional[str],
    sort_order: Optional[str],
    allowed: Mapping[str, Sequence[SortColumn]],
    default: str
) -> List[ColumnElement]:
    """
    Translate a client sort request into ORDER BY clauses.

    Args:
        sort_by: Requested field name
        sort_order: "asc" or anything else for descending
        allowed: Allowlist of field name -> columns
        default: Field used when sort_by is missing or not allowlisted

    Returns:
        List of order_by clauses
    """
    field_name = sort_by or default
    if field_name not in allowed:
        logger.warning(f"Ignoring unsupported sort field '{sort_by}', using '{default}'")
        field_name = default

    ascending = (sort_order or 'desc').lower() == 'asc'
    clauses = []
    for entry in allowed[field_name]:
        if isinstance(entry, tuple):
            column, pinned = entry
            clauses.append(column.asc() if pinned == 'asc' else column.desc())
        else:
            clauses.append(entry.asc() if ascending else entry.desc())
    return clauses
