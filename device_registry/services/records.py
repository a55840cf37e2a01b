"""Turn stored computers into warranty-enriched records for display."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from sqlalchemy.orm import Session

from ..core.warranty import classify, current_date
from ..crud.computers import list_computers
from ..models.computer import Computer
from ..schemas.computer import ComputerOut, EnrichedComputer


def enrich(computer: Computer, today: date | None = None) -> EnrichedComputer:
    info = classify(computer.warranty_expiry, today=today)
    base = ComputerOut.model_validate(computer).model_dump()
    return EnrichedComputer(
        **base,
        warranty_status=info.status,
        days_until_expiry=info.days_until_expiry,
        expiry_date=info.expiry_date,
    )


def enrich_all(computers: Iterable[Computer], today: date | None = None) -> list[EnrichedComputer]:
    """Enrich a whole collection against a single reference day."""

    reference = today or current_date()
    return [enrich(computer, today=reference) for computer in computers]


def load_enriched(db: Session, today: date | None = None) -> list[EnrichedComputer]:
    """Fetch every computer and enrich it. Raises ``BackendRequestError``."""

    return enrich_all(list_computers(db), today=today)
