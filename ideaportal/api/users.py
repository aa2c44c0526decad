"""Users API router."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ideaportal.api.deps import get_session_context
from ideaportal.db.session import get_db
from ideaportal.schemas.schemas import RegisterLinkRequest, UserOut, UserResponse
from ideaportal.services.auth_service import auth_service
from ideaportal.services.session_service import SessionContext

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/me/register", response_model=UserResponse)
def link_register(
    body: RegisterLinkRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    """Attach the caller's employee register code."""
    return auth_service.link_register(db, ctx, body.register_code)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db)):
    """Public profile: id, email and name."""
    user = auth_service.get_user(db, user_id)
    return {"ok": True, "user": UserOut(id=user.id, email=user.email, name=user.name or "")}
