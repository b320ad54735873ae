"""
Central API router – registers all endpoint sub-routers.
"""
from fastapi import APIRouter
import logging

from authserver.api.endpoints import auth, login, users

logger = logging.getLogger(__name__)

api_router = APIRouter()

logger.info("Registering API routers")
api_router.include_router(login.router)
api_router.include_router(auth.router)
api_router.include_router(users.router)
