from __future__ import annotations

from .auth import AuthContext, require_admin_or_api_key
from .ui_auth import AdminGate, is_logged_in, require_admin_session

__all__ = [
    "AdminGate",
    "AuthContext",
    "is_logged_in",
    "require_admin_or_api_key",
    "require_admin_session",
]
