from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..core.warranty import WarrantyStatus, parse_expiry

COMPUTER_STATUSES = ("active", "repair", "retired")
MAX_TEXT_LENGTH = 100


def _clean_required(value: Any, message: str) -> Any:
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    value = value.strip()
    if not value:
        raise ValueError(message)
    if len(value) > MAX_TEXT_LENGTH:
        raise ValueError(f"ต้องไม่เกิน {MAX_TEXT_LENGTH} ตัวอักษร")
    return value


class ComputerUpdate(BaseModel):
    """Fields accepted when editing a record; every field is optional."""

    device_name: Optional[str] = None
    serial_number: Optional[str] = None
    model: Optional[str] = None
    user_name: Optional[str] = None
    status: Optional[str] = None
    warranty_expiry: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("device_name", mode="before")
    @classmethod
    def _device_name(cls, value: Any) -> Any:
        return _clean_required(value, "กรุณากรอกชื่ออุปกรณ์")

    @field_validator("serial_number", mode="before")
    @classmethod
    def _serial_number(cls, value: Any) -> Any:
        return _clean_required(value, "กรุณากรอกซีเรียลนัมเบอร์")

    @field_validator("model", "user_name", "notes", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> Any:
        if value is None:
            return None
        cleaned = str(value).strip().lower()
        if cleaned not in COMPUTER_STATUSES:
            raise ValueError("กรุณาเลือกสถานะ")
        return cleaned

    @field_validator("warranty_expiry", mode="before")
    @classmethod
    def _warranty_expiry(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, date):
            return value.isoformat()
        cleaned = str(value).strip()
        if not cleaned:
            raise ValueError("กรุณาเลือกวันหมดประกัน")
        if parse_expiry(cleaned) is None:
            raise ValueError("รูปแบบวันที่ไม่ถูกต้อง")
        return cleaned


class ComputerCreate(ComputerUpdate):
    device_name: str
    serial_number: str
    status: str = "active"
    warranty_expiry: str


class ComputerOut(BaseModel):
    id: int
    device_name: str
    serial_number: str
    model: Optional[str] = None
    user_name: Optional[str] = None
    status: Optional[str] = None
    warranty_expiry: Optional[str] = None
    notes: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None

    model_config = {"from_attributes": True}


class EnrichedComputer(ComputerOut):
    """A stored record plus its warranty band, valid only for the day it was built."""

    warranty_status: WarrantyStatus
    days_until_expiry: int
    expiry_date: Optional[date] = None


class DashboardStats(BaseModel):
    total: int = 0
    active: int = 0
    repair: int = 0
    retired: int = 0
    warning: int = 0
    expired: int = 0
    valid: int = 0


class BulkDeleteRequest(BaseModel):
    ids: list[int] = Field(..., min_length=1)


class BulkDeleteResult(BaseModel):
    deleted: int


def field_errors(exc: ValidationError) -> dict[str, str]:
    """Flatten a pydantic error into ``{field: message}`` for inline form display."""

    errors: dict[str, str] = {}
    for err in exc.errors():
        loc = err.get("loc") or ("__all__",)
        field = str(loc[0])
        ctx_error = (err.get("ctx") or {}).get("error")
        message = str(ctx_error) if ctx_error else err.get("msg", "ข้อมูลไม่ถูกต้อง")
        errors.setdefault(field, message)
    return errors
