"""Ideas API router: CRUD, Kanban status, votes and comments."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ideaportal.api.deps import get_session_context
from ideaportal.db.session import get_db
from ideaportal.schemas.schemas import (
    BoardResponse, CommentCreate, CommentListResponse, IdeaCreate, IdeaCreatedResponse,
    IdeaDetailResponse, IdeaListResponse, IdeaStatusUpdate, IdeaUpdate, OkResponse,
    StatusResponse, VoteResponse,
)
from ideaportal.services.audit_service import audit_service
from ideaportal.services.idea_service import idea_service
from ideaportal.services.session_service import SessionContext

router = APIRouter(prefix="/ideas", tags=["ideas"])


@router.post("", response_model=IdeaCreatedResponse)
def create_idea(
    body: IdeaCreate,
    request: Request,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    """Submit an idea, optionally under a campaign."""
    result = idea_service.create(db, ctx, body.title, body.description, body.campaign_id)
    audit_service.log_from_request(
        db, request,
        actor_id=ctx.user_id,
        actor_email=ctx.email,
        action="idea.created",
        resource_type="idea",
        resource_id=result["id"],
        new_value={"title": body.title, "campaign_id": body.campaign_id},
    )
    return result


@router.get("", response_model=IdeaListResponse)
def list_ideas(
    campaign_id: Optional[int] = Query(None),
    status: Optional[str] = Query(None),
    q: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """List ideas with optional campaign, status and text filters."""
    return {"ok": True, "ideas": idea_service.list_ideas(db, campaign_id, status, q)}


@router.get("/board", response_model=BoardResponse)
def board(db: Session = Depends(get_db)):
    """Ideas grouped by status for the Kanban view."""
    return {"ok": True, "columns": idea_service.board(db)}


@router.get("/{idea_id}", response_model=IdeaDetailResponse)
def get_idea(idea_id: int, db: Session = Depends(get_db)):
    """One idea with its comments."""
    return idea_service.get(db, idea_id)


@router.patch("/{idea_id}", response_model=OkResponse)
def update_idea(
    idea_id: int,
    body: IdeaUpdate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    """Edit an idea's title or description."""
    return idea_service.update(db, ctx, idea_id, body.title, body.description)


@router.post("/{idea_id}/status", response_model=StatusResponse)
def update_status(
    idea_id: int,
    body: IdeaStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    """Move an idea to another Kanban column."""
    result = idea_service.update_status(db, ctx, idea_id, body.status)
    audit_service.log_from_request(
        db, request,
        actor_id=ctx.user_id,
        actor_email=ctx.email,
        action="idea.status_changed",
        resource_type="idea",
        resource_id=idea_id,
        new_value={"status": result["status"]},
    )
    return result


@router.post("/{idea_id}/vote", response_model=VoteResponse)
def vote(
    idea_id: int,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    """Up-vote an idea; repeated votes are ignored."""
    return idea_service.vote(db, ctx, idea_id)


@router.get("/{idea_id}/votes", response_model=VoteResponse)
def count_votes(idea_id: int, db: Session = Depends(get_db)):
    return {"ok": True, "votes": idea_service.count_votes(db, idea_id)}


@router.post("/{idea_id}/comments", response_model=IdeaDetailResponse)
def comment(
    idea_id: int,
    body: CommentCreate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    """Comment on an idea or reply to a comment."""
    return idea_service.comment(db, ctx, idea_id, body.text, body.parent_id)


@router.get("/{idea_id}/comments", response_model=CommentListResponse)
def list_comments(idea_id: int, db: Session = Depends(get_db)):
    return {"ok": True, "comments": idea_service.list_comments(db, idea_id)}
