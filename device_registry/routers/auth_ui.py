from __future__ import annotations

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ..core.jinja import get_templates
from ..deps.ui_auth import AdminGate, verify_admin_password

router = APIRouter(prefix="/admin")
templates = get_templates()

WRONG_PASSWORD = "รหัสผ่านไม่ถูกต้อง กรุณาลองใหม่อีกครั้ง"


def _safe_next(target: str | None) -> str:
    # Only same-site paths; "//host" would leave the site.
    if not target or not target.startswith("/") or target.startswith("//"):
        return "/admin"
    return target


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, next: str = "/admin"):
    if AdminGate.is_authenticated(request):
        return RedirectResponse(url=_safe_next(next), status_code=302)
    return templates.TemplateResponse(request, "login.html", {"next": _safe_next(next), "error": ""})


@router.post("/login", response_class=HTMLResponse)
def login_submit(request: Request, password: str = Form(""), next: str = Form("/admin")):
    if not password or not verify_admin_password(password):
        return templates.TemplateResponse(
            request,
            "login.html",
            {"next": _safe_next(next), "error": WRONG_PASSWORD},
            status_code=401,
        )
    AdminGate.login(request)
    return RedirectResponse(url=_safe_next(next), status_code=303)


@router.get("/logout")
def logout(request: Request):
    AdminGate.logout(request)
    return RedirectResponse(url="/", status_code=302)
