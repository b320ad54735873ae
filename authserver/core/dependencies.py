"""
FastAPI dependency injection helpers for authentication and authorisation.

The authentication middleware attaches the resolved
:class:`~authserver.security.user_details.Principal` to
``request.state.principal``; the dependencies below only read it.
"""
from typing import Generator
import logging

from fastapi import Depends, Request

from authserver.core.exceptions import ErrorCode, ForbiddenError, UnauthorizedError
from authserver.db.database import get_db
from authserver.models.user import RoleType
from authserver.security.token_manager import TokenManager
from authserver.security.user_details import Principal

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# DB dependency
# ---------------------------------------------------------------------------

def db_dependency() -> Generator:
    """Yield a database connection for the duration of a request."""
    logger.trace("Creating database dependency connection")
    with get_db() as conn:
        yield conn


def get_token_manager(request: Request) -> TokenManager:
    return request.app.state.token_manager


# ---------------------------------------------------------------------------
# Auth dependencies
# ---------------------------------------------------------------------------

def get_current_principal(request: Request) -> Principal:
    """Return the principal authenticated for this request."""
    principal = getattr(request.state, "principal", None)
    if principal is None:
        logger.warning("No authenticated principal on %s", request.url.path)
        raise UnauthorizedError(ErrorCode.UNAUTHORIZED)
    return principal


# ---------------------------------------------------------------------------
# Role-based access control
# ---------------------------------------------------------------------------

def require_roles(*roles: RoleType):
    """
    Factory that returns a dependency which enforces that the current
    principal has one of the specified roles.

    Usage::
        @router.get("/admin-only")
        def admin_only(principal: Principal = Depends(require_roles(RoleType.ROLE_ADMIN))):
            ...
    """
    def _check(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            logger.warning(
                "User id=%s lacks required roles: %s",
                principal.id,
                ", ".join(role.name for role in roles),
            )
            raise ForbiddenError(ErrorCode.FORBIDDEN)
        return principal
    return _check


require_admin = require_roles(RoleType.ROLE_ADMIN)
