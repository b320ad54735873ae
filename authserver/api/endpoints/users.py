"""
User endpoints:
  GET  /api/profile      – Profile of the authenticated user
  GET  /api/admin/ping   – Role check, admins only
"""
from fastapi import APIRouter, Depends
import logging

from authserver.core.dependencies import get_current_principal, require_admin
from authserver.schemas.user import PrincipalResponse
from authserver.security.user_details import Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Users"])


@router.get(
    "/profile",
    response_model=PrincipalResponse,
    summary="Get the current authenticated user's profile",
)
def get_profile(principal: Principal = Depends(get_current_principal)):
    logger.info("Returning profile for user id=%s", principal.id)
    return principal


@router.get("/admin/ping", summary="Admin-only health check")
def admin_ping(principal: Principal = Depends(require_admin)):
    logger.info("Admin ping by user id=%s", principal.id)
    return {"status": "ok", "user_id": principal.id}
