"""
Authenticated session endpoints:
  POST /api/auth/logout     – Expire the stored refresh token of the current user
"""
from fastapi import APIRouter, Depends, status
import logging

from authserver.core.dependencies import (
    db_dependency,
    get_current_principal,
    get_token_manager,
)
from authserver.security.token_manager import TokenManager
from authserver.security.user_details import Principal
from authserver.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Expire the refresh token of the current user",
)
def logout(
    conn=Depends(db_dependency),
    token_manager: TokenManager = Depends(get_token_manager),
    principal: Principal = Depends(get_current_principal),
):
    """
    After logout the access token keeps working until it expires; once it
    does, it can no longer be renewed and the user has to log in again.
    """
    logger.info("Logout requested for user id=%s", principal.id)
    service = AuthService(conn, token_manager)
    service.logout(principal.id)
