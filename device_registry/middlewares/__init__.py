from __future__ import annotations

from starlette.requests import Request

from .request_id import RequestIdMiddleware, principal_ctx_var, request_id_ctx_var
from .security_headers import SecurityHeadersMiddleware


def set_principal(request: Request, principal: str) -> None:
    """Record who is calling, for JSON log lines and the access log."""

    principal_ctx_var.set(principal)
    request.state.principal = principal


__all__ = [
    "RequestIdMiddleware",
    "SecurityHeadersMiddleware",
    "principal_ctx_var",
    "request_id_ctx_var",
    "set_principal",
]
