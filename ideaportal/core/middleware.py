"""CORS, request-id, and access-log middleware."""

import re
import uuid
import time
import logging

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from ideaportal.core.config import settings

logger = logging.getLogger("idea_portal.access")

REQUEST_ID_HEADER = "X-Request-Id"
# Caller-supplied ids are kept only when they fit the audit column
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def _request_id(request: Request) -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER, "")
    if _REQUEST_ID_RE.match(incoming):
        return incoming
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id shared by the access log and the audit trail.

    ``request.state.request_id`` is read by ``AuditService.log_from_request``;
    ``request.state.user_id`` is filled in by the session dependency, so the
    access line names the caller when the route resolved one.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = _request_id(request)
        request.state.request_id = request_id
        request.state.user_id = None
        start_time = time.time()

        response: Response = await call_next(request)

        duration = round((time.time() - start_time) * 1000, 2)
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time-Ms"] = str(duration)

        logger.info(
            "%s %s %s %sms user=%s rid=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration,
            request.state.user_id or "-",
            request_id,
        )
        return response


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application."""
    # The session cookie needs credentials
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    app.add_middleware(RequestIdMiddleware)
