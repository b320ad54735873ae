"""
Public login endpoints (no bearer token required):
  POST /login           – Check credentials, returns access + refresh tokens
  POST /login/sign-up   – Register a regular user account
"""
from fastapi import APIRouter, Depends, status
import logging

from authserver.core.dependencies import db_dependency, get_token_manager
from authserver.schemas.auth import LoginRequest, LoginResponse, SignUpRequest
from authserver.schemas.user import UserResponse
from authserver.security.token_manager import TokenManager
from authserver.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/login", tags=["Login"])


@router.post(
    "",
    response_model=LoginResponse,
    summary="Login with username and password",
)
def login(
    body: LoginRequest,
    conn=Depends(db_dependency),
    token_manager: TokenManager = Depends(get_token_manager),
):
    """
    Returns a short-lived **access token** (10 min) and a long-lived
    **refresh token** (180 days). The refresh token is kept server side;
    an expired access token is renewed automatically on the next request.
    """
    logger.info("Login requested for username=%s", body.username)
    service = AuthService(conn, token_manager)
    return service.login(body.username, body.password)


@router.post(
    "/sign-up",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
)
def sign_up(
    body: SignUpRequest,
    conn=Depends(db_dependency),
    token_manager: TokenManager = Depends(get_token_manager),
):
    logger.info("Sign-up requested for username=%s", body.username)
    service = AuthService(conn, token_manager)
    return service.sign_up(body.username, body.password, body.provider_type)
