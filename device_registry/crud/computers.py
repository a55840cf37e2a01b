from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import BackendRequestError
from ..models.computer import Computer

logger = logging.getLogger(__name__)

# Columns a payload may set. ``id`` and the timestamps are owned by this module.
EDITABLE_FIELDS = (
    "device_name",
    "serial_number",
    "model",
    "user_name",
    "status",
    "warranty_expiry",
    "notes",
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def _editable(payload: dict) -> dict:
    return {k: v for k, v in payload.items() if k in EDITABLE_FIELDS}


def _fail(db: Session, action: str, exc: SQLAlchemyError) -> BackendRequestError:
    db.rollback()
    logger.error("computers.%s failed", action, exc_info=exc, extra={"extra_data": {"action": action}})
    return BackendRequestError(action, str(exc.__class__.__name__))


def list_computers(db: Session) -> list[Computer]:
    """
    Return every computer, oldest first, so table rows keep a stable order.
    """
    stmt = select(Computer).order_by(Computer.id)
    try:
        return list(db.execute(stmt).scalars().all())
    except SQLAlchemyError as exc:
        raise _fail(db, "list", exc) from exc


def get_computer(db: Session, computer_id: int) -> Computer | None:
    try:
        return db.get(Computer, computer_id)
    except SQLAlchemyError as exc:
        raise _fail(db, "get", exc) from exc


def create_computer(db: Session, payload: dict) -> Computer:
    """
    Insert a computer from already-validated fields.
    """
    data = _editable(payload)
    now = _now_iso()
    obj = Computer(**data, created_at=now, updated_at=now)
    try:
        db.add(obj)
        db.commit()
        db.refresh(obj)
    except SQLAlchemyError as exc:
        raise _fail(db, "insert", exc) from exc
    logger.info("computers.created", extra={"extra_data": {"computer_id": obj.id}})
    return obj


def update_computer(db: Session, item: Computer, payload: dict) -> Computer:
    """
    Apply validated fields to ``item``. Keys outside ``EDITABLE_FIELDS``
    (including ``id``) are ignored.
    """
    data = _editable(payload)
    if not data:
        return item
    for key, value in data.items():
        setattr(item, key, value)
    item.updated_at = _now_iso()
    try:
        db.commit()
        db.refresh(item)
    except SQLAlchemyError as exc:
        raise _fail(db, "update", exc) from exc
    logger.info(
        "computers.updated",
        extra={"extra_data": {"computer_id": item.id, "fields": sorted(data)}},
    )
    return item


def delete_computers(db: Session, ids: Iterable[int]) -> int:
    """
    Delete every computer whose id is in ``ids`` and return how many went.
    """
    id_list = sorted({int(i) for i in ids})
    if not id_list:
        return 0
    stmt = delete(Computer).where(Computer.id.in_(id_list))
    try:
        result = db.execute(stmt)
        db.commit()
    except SQLAlchemyError as exc:
        raise _fail(db, "delete", exc) from exc
    deleted = result.rowcount or 0
    logger.info("computers.deleted", extra={"extra_data": {"requested": len(id_list), "deleted": deleted}})
    return deleted
