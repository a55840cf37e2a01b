from __future__ import annotations

import hmac

from fastapi import Header, HTTPException, Request, status

from ..core.config import settings
from ..middlewares import set_principal
from .ui_auth import is_logged_in


class AuthContext:
    def __init__(self, *, subject: str, scheme: str) -> None:
        self.subject = subject
        self.scheme = scheme


async def require_admin_or_api_key(
    request: Request,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> AuthContext:
    """
    Gate for the JSON API. An admin browser session or a matching
    ``X-API-Key`` passes. With no ``API_KEY`` configured the API is open.
    """
    if is_logged_in(request):
        set_principal(request, "admin")
        return AuthContext(subject="admin", scheme="session")

    api_key = (settings.API_KEY or "").strip()
    if not api_key:
        set_principal(request, "anonymous")
        return AuthContext(subject="anonymous", scheme="open")

    provided = (x_api_key or "").strip()
    if provided and hmac.compare_digest(api_key, provided):
        set_principal(request, "api-key")
        return AuthContext(subject="api-key", scheme="api_key")

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid API key" if provided else "Authorization required",
    )
