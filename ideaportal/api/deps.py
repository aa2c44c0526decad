"""Request-scoped dependencies shared by the routers."""

from typing import Optional

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from ideaportal.core.config import settings
from ideaportal.db.session import get_db
from ideaportal.services.session_service import SessionContext, session_service


def get_session_context(request: Request, db: Session = Depends(get_db)) -> SessionContext:
    """Resolve the session cookie into the caller's identity (anonymous if absent)."""
    ctx = session_service.resolve(db, request.cookies.get(settings.SESSION_COOKIE_NAME))
    request.state.user_id = ctx.user_id
    return ctx


def client_info(request: Request) -> dict:
    return {
        "user_agent": request.headers.get("user-agent"),
        "ip": request.client.host if request.client else None,
    }


def set_session_cookie(response: Response, raw_session: str) -> None:
    """HTTP-only, same-site strict cookie carrying the opaque session id."""
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=raw_session,
        max_age=settings.SESSION_TTL_HOURS * 3600,
        httponly=True,
        samesite="strict",
        secure=settings.SESSION_COOKIE_SECURE,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="strict",
        secure=settings.SESSION_COOKIE_SECURE,
    )


def session_cookie(request: Request) -> Optional[str]:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)
