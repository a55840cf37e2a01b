"""One-shot user notices carried across a redirect in the session cookie."""

from __future__ import annotations

from starlette.requests import Request

SESSION_KEY = "notices"


def push_notice(request: Request, message: str, kind: str = "info") -> None:
    notices = list(request.session.get(SESSION_KEY, []))
    notices.append({"kind": kind, "message": message})
    request.session[SESSION_KEY] = notices


def pop_notices(request: Request) -> list[dict[str, str]]:
    return request.session.pop(SESSION_KEY, None) or []
