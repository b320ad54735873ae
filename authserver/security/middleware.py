"""
HTTP boundary for bearer token authentication.

The middleware is the only place where an authentication failure becomes a
response; when it does, the downstream handler is never invoked.
"""
import logging

from fastapi import FastAPI, Request
from starlette.concurrency import run_in_threadpool

from authserver.core.exceptions import error_response
from authserver.security.authenticator import (
    BEARER_PREFIX,
    Rejected,
    RequestAuthenticator,
    should_skip,
)

logger = logging.getLogger(__name__)


def install_auth_middleware(app: FastAPI, authenticator: RequestAuthenticator) -> None:
    """Register the authentication middleware on *app*."""

    @app.middleware("http")
    async def authenticate_request(request: Request, call_next):
        path = request.url.path
        if request.method.upper() == "OPTIONS" or should_skip(path):
            logger.trace("Skipping authentication for %s", path)
            return await call_next(request)

        result = await run_in_threadpool(
            authenticator.authenticate, request.headers.get("Authorization")
        )
        if isinstance(result, Rejected):
            logger.warning(
                "%s %s rejected code=%s",
                request.method,
                path,
                result.error_code.name,
            )
            return error_response(result.error)

        request.state.principal = result.principal
        response = await call_next(request)
        if result.reissued_access_token:
            response.headers["Authorization"] = BEARER_PREFIX + result.reissued_access_token
        return response
