from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Templates load their CSS/JS from /static only, so no inline allowances.
DEFAULT_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "same-origin",
    "Content-Security-Policy": (
        "default-src 'self'; base-uri 'self'; form-action 'self'; "
        "frame-ancestors 'none'; object-src 'none';"
    ),
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add the baseline browser headers unless a handler already set them."""

    def __init__(self, app, headers: dict[str, str] | None = None) -> None:  # type: ignore[override]
        super().__init__(app)
        self.headers = {**DEFAULT_HEADERS, **(headers or {})}

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        if "text/html" in response.headers.get("content-type", ""):
            response.headers.setdefault("Cache-Control", "no-store")
        return response
