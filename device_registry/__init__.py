"""Application wiring for the Device Registry.

Importing this package builds the FastAPI app: configuration, database
tables and migrations, session handling, routers and error handlers.
``device_registry.main`` adds logging, metrics and the health check on top.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .core.config import settings
from .core.errors import (
    BackendRequestError,
    backend_error_handler,
    http_exception_handler,
    validation_exception_handler,
)
from .db.session import init_db
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware

app = FastAPI(title=settings.APP_NAME)

app.mount("/static", StaticFiles(directory=str(settings.static_dir)), name="static")

# ---------- DB init/migrations ----------
init_db()

# ---------- Middleware ----------
# Starlette wraps in reverse order: RequestId is outermost, then headers, then session.
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.APP_SECRET,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.SESSION_MAX_AGE,
    same_site="lax",
    https_only=False,
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestIdMiddleware)

# ---------- Routers ----------
from .routers import search_ui as search_ui_router  # noqa: E402

app.include_router(search_ui_router.router)

from .routers import auth_ui as auth_ui_router  # noqa: E402

app.include_router(auth_ui_router.router)

from .routers import admin_ui as admin_ui_router  # noqa: E402

app.include_router(admin_ui_router.router)

from .routers import api_computers as api_computers_router  # noqa: E402

app.include_router(api_computers_router.router)

# ---------- Exception handling ----------
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(BackendRequestError, backend_error_handler)


__all__ = ["app"]
