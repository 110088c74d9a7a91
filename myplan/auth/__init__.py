"""
Authentication Module

Visitor registration, login with JWT issued as bearer token and session
cookie, logout, and role guards used by every other router.

Key Components:
- utils.py: password hashing (bcrypt) and JWT encode/decode
- service.py: account lookup, registration, visitor profile updates
- dependencies.py: current-user resolution and ``require_roles`` guards
- router.py: FastAPI endpoints under /auth
"""

from .router import router
from .service import UserService
from .dependencies import (
    get_current_user, require_roles, require_admin, require_visitor,
    get_current_visitor, get_current_admin
)

__all__ = [
    "router",
    "UserService",
    "get_current_user",
    "require_roles",
    "require_admin",
    "require_visitor",
    "get_current_visitor",
    "get_current_admin",
]
