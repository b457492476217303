"""
Tenant-scoped query composition.

``ScopedQuery`` collects filter criteria as SQLAlchemy expressions, so every
value reaches the database as a bound parameter. The tenant and doctor
predicates from an ``AccessDecision`` are added at construction and cannot
be skipped; optional filters are added only when their value is present.
The count and the page are computed from the same criteria.
"""
from typing import Any, Callable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query

from .pagination import Page, PageParams, build_meta
from .permissions import AccessDecision

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user text only matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


class ScopedQuery:
    """
    Builder for queries restricted by an access decision.

    Args:
        query: Base ORM query, including any joins the criteria need
        decision: Access decision for the current principal and action
        tenant_column: Column holding the owning hospital id
        doctor_column: Column holding the doctor id, required when the
            decision narrows by doctor
    """

    def __init__(
        self,
        query: Query,
        decision: AccessDecision,
        tenant_column,
        doctor_column=None
    ):
        self._query = query
        self._criteria: List[Any] = []
        self._ordering: List[Any] = []

        if decision.tenant_filter is not None:
            self._criteria.append(tenant_column == decision.tenant_filter)

        if decision.doctor_filter is not None:
            if doctor_column is None:
                raise ValueError("doctor_column is required for doctor-scoped decisions")
            self._criteria.append(doctor_column == decision.doctor_filter)

    @property
    def criteria(self) -> List[Any]:
        return list(self._criteria)

    def filter(self, *criteria) -> "ScopedQuery":
        """Add mandatory criteria."""
        self._criteria.extend(criteria)
        return self

    def filter_if(self, value: Any, build: Callable[[Any], Any]) -> "ScopedQuery":
        """
        Add the criterion ``build(value)`` only when ``value`` is present.

        Args:
            value: Optional filter value from the request
            build: Callable turning the value into a SQLAlchemy expression
        """
        if _is_present(value):
            self._criteria.append(build(value))
        return self

    def search(self, text: Optional[str], *columns) -> "ScopedQuery":
        """
        Case-insensitive substring match of ``text`` against any of ``columns``.
        """
        if _is_present(text):
            pattern = f"%{escape_like(text.strip())}%"
            self._criteria.append(
                or_(*(column.ilike(pattern, escape=LIKE_ESCAPE) for column in columns))
            )
        return self

    def order_by(self, *clauses) -> "ScopedQuery":
        self._ordering = list(clauses)
        return self

    def filtered(self) -> Query:
        """The base query with every criterion applied, unordered and unpaginated."""
        return self._query.filter(*self._criteria)

    def ordered(self) -> Query:
        return self.filtered().order_by(*self._ordering)

    def statement(self):
        """Select statement for inspection; values stay bound parameters."""
        return self.ordered().statement

    def count(self) -> int:
        return self.filtered().count()

    def first(self):
        return self.ordered().first()

    def all(self) -> list:
        return self.ordered().all()

    def page(self, page_params: PageParams) -> Page:
        """
        Fetch one page and the total count for the same criteria.

        Args:
            page_params: Page number and size

        Returns:
            Page: Items of the requested page with pagination metadata
        """
        total = self.count()
        items = (
            self.ordered()
            .offset(page_params.offset)
            .limit(page_params.limit)
            .all()
        )
        return Page(items=items, meta=build_meta(page_params, total))
