"""Admin dashboard: statistics, filters and add/edit/delete forms.

Every mutation commits first and then answers with a 303 back to the
dashboard, so the refreshed table is always read after the write went
through.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..core.errors import BackendRequestError
from ..core.jinja import get_templates
from ..core.notices import pop_notices, push_notice
from ..core.warranty import WARRANTY_STATUSES
from ..crud.computers import create_computer, delete_computers, get_computer, update_computer
from ..db.session import get_db
from ..deps.ui_auth import require_admin_session
from ..schemas.computer import COMPUTER_STATUSES, ComputerCreate, field_errors
from ..services.records import load_enriched
from ..services.search import ALL, FilterCriteria, compute_stats, department_options, filter_records

router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin_session)])
templates = get_templates()

LOAD_FAILED = "โหลดข้อมูลไม่สำเร็จ กรุณาลองใหม่อีกครั้ง"
SAVE_FAILED = "เกิดข้อผิดพลาด: ไม่สามารถบันทึกข้อมูลได้ กรุณาลองใหม่อีกครั้ง"
DELETE_FAILED = "เกิดข้อผิดพลาดในการลบข้อมูล"
NOT_FOUND = "ไม่พบคอมพิวเตอร์ที่ต้องการแก้ไข อาจถูกลบไปแล้ว"

FORM_FIELDS = ("device_name", "serial_number", "model", "user_name", "status", "warranty_expiry", "notes")


def _render_form(
    request: Request,
    *,
    values: dict,
    computer_id: int | None = None,
    errors: dict | None = None,
    notices: list | None = None,
    timestamps: dict | None = None,
    status_code: int = 200,
):
    context = {
        "values": values,
        "computer_id": computer_id,
        "editing": computer_id is not None,
        "errors": errors or {},
        "notices": notices or [],
        "statuses": COMPUTER_STATUSES,
        "timestamps": timestamps,
    }
    return templates.TemplateResponse(request, "computer_form.html", context, status_code=status_code)


def _back_to_dashboard(request: Request, message: str) -> RedirectResponse:
    push_notice(request, message, "error")
    return RedirectResponse(url="/admin", status_code=303)


def _submitted_values(**fields: str) -> dict:
    return {name: fields.get(name, "") for name in FORM_FIELDS}


@router.get("", response_class=HTMLResponse)
def dashboard(
    request: Request,
    q: str = "",
    department: str = ALL,
    warranty: str = ALL,
    status: str = ALL,
    db: Session = Depends(get_db),
):
    notices = pop_notices(request)
    try:
        records = load_enriched(db)
    except BackendRequestError:
        notices.append({"kind": "error", "message": LOAD_FAILED})
        records = []

    criteria = FilterCriteria(query=q, department=department, warranty_status=warranty, status=status)
    context = {
        "records": filter_records(records, criteria),
        "total": len(records),
        "stats": compute_stats(records),
        "criteria": criteria,
        "departments": department_options(records),
        "warranty_statuses": WARRANTY_STATUSES,
        "statuses": COMPUTER_STATUSES,
        "notices": notices,
    }
    return templates.TemplateResponse(request, "admin.html", context)


@router.get("/computers/new", response_class=HTMLResponse)
def new_computer_form(request: Request):
    return _render_form(request, values=_submitted_values(status="active"))


@router.post("/computers/new", response_class=HTMLResponse)
def create_computer_submit(
    request: Request,
    device_name: str = Form(""),
    serial_number: str = Form(""),
    model: str = Form(""),
    user_name: str = Form(""),
    status: str = Form("active"),
    warranty_expiry: str = Form(""),
    notes: str = Form(""),
    db: Session = Depends(get_db),
):
    values = _submitted_values(
        device_name=device_name,
        serial_number=serial_number,
        model=model,
        user_name=user_name,
        status=status,
        warranty_expiry=warranty_expiry,
        notes=notes,
    )
    try:
        payload = ComputerCreate(**values)
    except ValidationError as exc:
        return _render_form(request, values=values, errors=field_errors(exc), status_code=422)
    try:
        create_computer(db, payload.model_dump())
    except BackendRequestError:
        notices = [{"kind": "error", "message": SAVE_FAILED}]
        return _render_form(request, values=values, notices=notices, status_code=503)
    push_notice(request, "เพิ่มคอมพิวเตอร์สำเร็จ", "success")
    return RedirectResponse(url="/admin", status_code=303)


@router.get("/computers/{computer_id}/edit", response_class=HTMLResponse)
def edit_computer_form(request: Request, computer_id: int, db: Session = Depends(get_db)):
    try:
        computer = get_computer(db, computer_id)
    except BackendRequestError:
        return _back_to_dashboard(request, LOAD_FAILED)
    if not computer:
        return _back_to_dashboard(request, NOT_FOUND)
    values = {name: getattr(computer, name) or "" for name in FORM_FIELDS}
    timestamps = {"created_at": computer.created_at, "updated_at": computer.updated_at}
    return _render_form(request, values=values, computer_id=computer.id, timestamps=timestamps)


@router.post("/computers/{computer_id}/edit", response_class=HTMLResponse)
def edit_computer_submit(
    request: Request,
    computer_id: int,
    device_name: str = Form(""),
    serial_number: str = Form(""),
    model: str = Form(""),
    user_name: str = Form(""),
    status: str = Form("active"),
    warranty_expiry: str = Form(""),
    notes: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        computer = get_computer(db, computer_id)
    except BackendRequestError:
        return _back_to_dashboard(request, LOAD_FAILED)
    if not computer:
        return _back_to_dashboard(request, NOT_FOUND)
    values = _submitted_values(
        device_name=device_name,
        serial_number=serial_number,
        model=model,
        user_name=user_name,
        status=status,
        warranty_expiry=warranty_expiry,
        notes=notes,
    )
    try:
        payload = ComputerCreate(**values)
    except ValidationError as exc:
        return _render_form(
            request, values=values, computer_id=computer_id, errors=field_errors(exc), status_code=422
        )
    try:
        update_computer(db, computer, payload.model_dump())
    except BackendRequestError:
        notices = [{"kind": "error", "message": SAVE_FAILED}]
        return _render_form(request, values=values, computer_id=computer_id, notices=notices, status_code=503)
    push_notice(request, "อัปเดตข้อมูลสำเร็จ", "success")
    return RedirectResponse(url="/admin", status_code=303)


@router.post("/computers/delete")
def delete_computers_submit(
    request: Request,
    ids: list[int] = Form(default=[]),
    db: Session = Depends(get_db),
):
    if not ids:
        push_notice(request, "กรุณาเลือกรายการที่ต้องการลบ", "error")
        return RedirectResponse(url="/admin", status_code=303)
    try:
        deleted = delete_computers(db, ids)
    except BackendRequestError:
        push_notice(request, DELETE_FAILED, "error")
    else:
        push_notice(request, f"ลบคอมพิวเตอร์ {deleted} รายการสำเร็จ", "success")
    return RedirectResponse(url="/admin", status_code=303)
