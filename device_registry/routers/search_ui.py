"""Public search page: look a computer up by name or serial number."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from ..core.errors import BackendRequestError
from ..core.jinja import get_templates
from ..core.notices import pop_notices
from ..crud.computers import list_computers
from ..db.session import get_db
from ..services.records import load_enriched
from ..services.search import (
    PHASE_IDLE,
    PHASE_SHOWING_RESULTS,
    SearchState,
    search_records,
    suggest_names,
)

logger = logging.getLogger(__name__)

LOAD_FAILED = "โหลดข้อมูลไม่สำเร็จ กรุณาลองใหม่อีกครั้ง"

router = APIRouter()
templates = get_templates()


@router.get("/", response_class=HTMLResponse)
def search_page(
    request: Request,
    q: str = "",
    submitted: bool = False,
    db: Session = Depends(get_db),
):
    state = SearchState.from_request(q, submitted)
    notices = pop_notices(request)
    results = []
    suggestions: list[str] = []

    if state.phase != PHASE_IDLE:
        try:
            records = load_enriched(db)
        except BackendRequestError:
            notices.append({"kind": "error", "message": LOAD_FAILED})
            records = []
        if state.phase == PHASE_SHOWING_RESULTS:
            results = search_records(records, state.query)
        else:
            suggestions = suggest_names(records, state.query)

    context = {
        "state": state,
        "query": state.query,
        "results": results,
        "suggestions": suggestions,
        "notices": notices,
    }
    return templates.TemplateResponse(request, "search.html", context)


@router.get("/ui/suggestions", response_class=HTMLResponse)
def suggestions_partial(request: Request, q: str = "", db: Session = Depends(get_db)):
    try:
        names = suggest_names(list_computers(db), q)
    except BackendRequestError:
        names = []
    return templates.TemplateResponse(request, "_suggestions.html", {"suggestions": names})
