"""Auth API router: signup, login, Google sign-in, logout, verification, password reset."""

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from ideaportal.api.deps import (
    clear_session_cookie, client_info, get_session_context, session_cookie, set_session_cookie,
)
from ideaportal.core.config import settings
from ideaportal.core.rate_limiter import limiter
from ideaportal.db.session import get_db
from ideaportal.schemas.schemas import (
    GoogleLoginRequest, LoginRequest, LoginResponse, OkResponse,
    PasswordResetConfirm, PasswordResetRequest, SignupRequest, SignupResponse, UserResponse,
)
from ideaportal.services.audit_service import audit_service
from ideaportal.services.auth_service import auth_service
from ideaportal.services.session_service import SessionContext

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=SignupResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
def signup(request: Request, body: SignupRequest, db: Session = Depends(get_db)):
    """Create an account; the verification link is written to the mail outbox."""
    result = auth_service.signup(db, body.email, body.password, body.name)
    audit_service.log_from_request(
        db, request,
        actor_id=result["user"]["id"],
        actor_email=result["user"]["email"],
        action="user.signup",
        resource_type="user",
        resource_id=result["user"]["id"],
    )
    return result


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
def login(request: Request, response: Response, body: LoginRequest, db: Session = Depends(get_db)):
    """Check credentials and start a session."""
    raw_session, result = auth_service.login(db, body.email, body.password, **client_info(request))
    set_session_cookie(response, raw_session)
    audit_service.log_from_request(
        db, request,
        actor_id=result["user"]["id"],
        actor_email=result["user"]["email"],
        action="user.login",
        resource_type="user",
        resource_id=result["user"]["id"],
    )
    return result


@router.post("/google", response_model=UserResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
def google_login(
    request: Request, response: Response, body: GoogleLoginRequest, db: Session = Depends(get_db),
):
    """Sign in with a Google ID token."""
    raw_session, result = auth_service.login_with_google(db, body.id_token, **client_info(request))
    set_session_cookie(response, raw_session)
    audit_service.log_from_request(
        db, request,
        actor_id=result["user"]["id"],
        actor_email=result["user"]["email"],
        action="user.login_google",
        resource_type="user",
        resource_id=result["user"]["id"],
    )
    return result


@router.post("/logout", response_model=OkResponse)
def logout(request: Request, response: Response, db: Session = Depends(get_db)):
    """End the current session; harmless without one."""
    auth_service.logout(db, session_cookie(request))
    clear_session_cookie(response)
    return OkResponse()


@router.get("/me", response_model=UserResponse)
def me(ctx: SessionContext = Depends(get_session_context)):
    """Identity of the current session."""
    ctx.require()
    return {"ok": True, "user": ctx.as_user()}


@router.get("/verify", response_model=OkResponse)
def verify_email(
    request: Request,
    uid: int = Query(0),
    token: str = Query(""),
    db: Session = Depends(get_db),
):
    """Consume the email verification token sent at signup."""
    result = auth_service.verify_email(db, uid, token)
    audit_service.log_from_request(
        db, request,
        actor_id=uid,
        actor_email=None,
        action="user.email_verified",
        resource_type="user",
        resource_id=uid,
    )
    return result


@router.post("/request-reset", response_model=OkResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
def request_password_reset(request: Request, body: PasswordResetRequest, db: Session = Depends(get_db)):
    """Send a reset link if the account exists; the answer never says which."""
    return auth_service.request_password_reset(db, body.email)


@router.post("/reset", response_model=OkResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
def reset_password(request: Request, body: PasswordResetConfirm, db: Session = Depends(get_db)):
    """Set a new password with a valid reset token."""
    result = auth_service.reset_password(db, body.uid, body.token, body.password)
    audit_service.log_from_request(
        db, request,
        actor_id=body.uid,
        actor_email=None,
        action="user.password_reset",
        resource_type="user",
        resource_id=body.uid,
    )
    return result
