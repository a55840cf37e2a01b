from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..crud.computers import create_computer, delete_computers, get_computer, list_computers, update_computer
from ..db.session import get_db
from ..deps.auth import require_admin_or_api_key
from ..schemas.computer import (
    BulkDeleteRequest,
    BulkDeleteResult,
    ComputerCreate,
    ComputerUpdate,
    DashboardStats,
    EnrichedComputer,
)
from ..services.records import enrich, load_enriched
from ..services.search import ALL, FilterCriteria, compute_stats, filter_records, suggest_names

router = APIRouter(
    prefix="/api/v1/computers",
    tags=["computers"],
    dependencies=[Depends(require_admin_or_api_key)],
)

# Columns that may not be cleared through PATCH.
REQUIRED_FIELDS = ("device_name", "serial_number")


@router.get("", response_model=list[EnrichedComputer])
def api_list(
    q: str = "",
    department: str = ALL,
    warranty: str = ALL,
    status: str = ALL,
    db: Session = Depends(get_db),
):
    criteria = FilterCriteria(query=q, department=department, warranty_status=warranty, status=status)
    return filter_records(load_enriched(db), criteria)


@router.get("/stats", response_model=DashboardStats)
def api_stats(db: Session = Depends(get_db)):
    return compute_stats(load_enriched(db))


@router.get("/suggestions", response_model=list[str])
def api_suggestions(q: str = "", db: Session = Depends(get_db)):
    return suggest_names(list_computers(db), q)


@router.get("/{computer_id}", response_model=EnrichedComputer)
def api_get(computer_id: int, db: Session = Depends(get_db)):
    computer = get_computer(db, computer_id)
    if not computer:
        raise HTTPException(404, "Not found")
    return enrich(computer)


@router.post("", response_model=EnrichedComputer, status_code=201)
def api_create(payload: ComputerCreate, db: Session = Depends(get_db)):
    return enrich(create_computer(db, payload.model_dump()))


@router.patch("/{computer_id}", response_model=EnrichedComputer)
def api_update(computer_id: int, payload: ComputerUpdate, db: Session = Depends(get_db)):
    computer = get_computer(db, computer_id)
    if not computer:
        raise HTTPException(404, "Not found")
    data = payload.model_dump(exclude_unset=True)
    for key in REQUIRED_FIELDS:
        if key in data and data[key] is None:
            data.pop(key)
    return enrich(update_computer(db, computer, data))


@router.delete("/{computer_id}")
def api_delete(computer_id: int, db: Session = Depends(get_db)):
    if not get_computer(db, computer_id):
        raise HTTPException(404, "Not found")
    delete_computers(db, [computer_id])
    return {"status": "deleted"}


@router.post("/bulk-delete", response_model=BulkDeleteResult)
def api_bulk_delete(payload: BulkDeleteRequest, db: Session = Depends(get_db)):
    return BulkDeleteResult(deleted=delete_computers(db, payload.ids))
