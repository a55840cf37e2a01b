"""Admin gate for the dashboard.

The gate is a boolean kept in the signed session cookie. It is switched on
by ``AdminGate.login`` after the shared password matched and off by
``AdminGate.logout``. It keeps casual visitors out of the admin screens and
nothing more.
"""

from __future__ import annotations

import hmac
import logging

import bcrypt
from fastapi import HTTPException, Request, status

from ..core.config import settings
from ..middlewares import set_principal

logger = logging.getLogger(__name__)

SESSION_FLAG = "admin_authenticated"


def verify_admin_password(plain: str) -> bool:
    hashed = (settings.ADMIN_PASSWORD_HASH or "").strip()
    if hashed:
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            logger.warning("ADMIN_PASSWORD_HASH is not a valid bcrypt hash")
            return False
    expected = settings.ADMIN_PASSWORD or ""
    return bool(expected) and hmac.compare_digest(plain.encode("utf-8"), expected.encode("utf-8"))


class AdminGate:
    @staticmethod
    def is_authenticated(request: Request) -> bool:
        return bool(request.session.get(SESSION_FLAG))

    @staticmethod
    def login(request: Request) -> None:
        request.session[SESSION_FLAG] = True
        logger.info("admin.login")

    @staticmethod
    def logout(request: Request) -> None:
        request.session.pop(SESSION_FLAG, None)
        logger.info("admin.logout")


def is_logged_in(request: Request) -> bool:
    return AdminGate.is_authenticated(request)


async def require_admin_session(request: Request) -> bool:
    """
    Dependency for admin pages. Raises 401; the exception handler turns that
    into a redirect to the login page for browsers.
    """
    if not AdminGate.is_authenticated(request):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Login required")
    set_principal(request, "admin")
    return True
