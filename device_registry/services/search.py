"""Filtering, search suggestions and dashboard counts over enriched records.

Everything here is a pure function of its arguments: the routers fetch and
enrich the collection, then hand it to these helpers.
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from pydantic import BaseModel, field_validator

from ..core.config import settings
from ..core.warranty import EXPIRED, VALID, WARNING
from ..schemas.computer import DashboardStats

ALL = "all"

PHASE_IDLE = "idle"
PHASE_SUGGESTING = "suggesting"
PHASE_SHOWING_RESULTS = "showing_results"


def normalize_query(query: str | None) -> str:
    return (query or "").strip().lower()


class FilterCriteria(BaseModel):
    query: str = ""
    department: str = ALL
    warranty_status: str = ALL
    status: str = ALL

    @field_validator("query", mode="before")
    @classmethod
    def _query(cls, value: Any) -> str:
        return value or ""

    @field_validator("department", "warranty_status", "status", mode="before")
    @classmethod
    def _category(cls, value: Any) -> str:
        if value is None:
            return ALL
        value = str(value).strip()
        return value or ALL


def _matches_query(record: Any, query: str) -> bool:
    if not query:
        return True
    name = (record.device_name or "").lower()
    serial = (record.serial_number or "").lower()
    return query in name or query in serial


def matches(record: Any, criteria: FilterCriteria) -> bool:
    """True when ``record`` passes every active criterion."""

    if not _matches_query(record, normalize_query(criteria.query)):
        return False
    if criteria.department != ALL and (record.user_name or "").strip() != criteria.department:
        return False
    if criteria.warranty_status != ALL and record.warranty_status != criteria.warranty_status:
        return False
    if criteria.status != ALL and record.status != criteria.status:
        return False
    return True


def filter_records(records: Iterable[Any], criteria: FilterCriteria) -> list[Any]:
    return [record for record in records if matches(record, criteria)]


def search_records(records: Iterable[Any], query: str | None) -> list[Any]:
    """Public-page lookup. Nothing is listed until there is a query."""

    needle = normalize_query(query)
    if not needle:
        return []
    return [record for record in records if _matches_query(record, needle)]


def suggest_names(records: Iterable[Any], query: str | None, limit: int | None = None) -> list[str]:
    """Up to ``limit`` distinct device names starting with ``query``."""

    limit = settings.SUGGESTION_LIMIT if limit is None else limit
    prefix = normalize_query(query)
    if not prefix or limit <= 0:
        return []
    seen: set[str] = set()
    names: list[str] = []
    for record in records:
        name = record.device_name or ""
        if name in seen or not name.lower().startswith(prefix):
            continue
        seen.add(name)
        names.append(name)
        if len(names) >= limit:
            break
    return names


def compute_stats(records: Sequence[Any]) -> DashboardStats:
    stats = DashboardStats(total=len(records))
    for record in records:
        if record.status == "active":
            stats.active += 1
        elif record.status == "repair":
            stats.repair += 1
        elif record.status == "retired":
            stats.retired += 1

        if record.warranty_status == WARNING:
            stats.warning += 1
        elif record.warranty_status == EXPIRED:
            stats.expired += 1
        elif record.warranty_status == VALID:
            stats.valid += 1
    return stats


def department_options(records: Iterable[Any]) -> list[str]:
    return sorted({(record.user_name or "").strip() for record in records} - {""})


class SearchState:
    """Phase of the public search box.

    ``idle`` until something is typed, ``suggesting`` while typing, and
    ``showing_results`` after a submit. Clearing the box always returns to
    ``idle``; typing again after a submit goes back to ``suggesting``.
    """

    def __init__(self) -> None:
        self.phase = PHASE_IDLE
        self.query = ""

    @classmethod
    def from_request(cls, query: str | None, submitted: bool) -> "SearchState":
        state = cls()
        state.type(query)
        if submitted:
            state.submit()
        return state

    def type(self, query: str | None) -> str:
        self.query = query or ""
        self.phase = PHASE_SUGGESTING if self.query.strip() else PHASE_IDLE
        return self.phase

    def submit(self) -> str:
        if self.query.strip():
            self.phase = PHASE_SHOWING_RESULTS
        return self.phase

    def clear(self) -> str:
        self.query = ""
        self.phase = PHASE_IDLE
        return self.phase
