"""Campaigns API router."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ideaportal.api.deps import get_session_context
from ideaportal.db.session import get_db
from ideaportal.schemas.schemas import CampaignCreate, CampaignListResponse, CreatedResponse
from ideaportal.services.audit_service import audit_service
from ideaportal.services.campaign_service import campaign_service
from ideaportal.services.session_service import SessionContext

router = APIRouter(prefix="/campaigns", tags=["campaigns"])


@router.get("", response_model=CampaignListResponse)
def list_campaigns(db: Session = Depends(get_db)):
    """All campaigns, newest first."""
    return {"ok": True, "campaigns": campaign_service.list_campaigns(db)}


@router.post("", response_model=CreatedResponse)
def create_campaign(
    body: CampaignCreate,
    request: Request,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    """Open a new campaign."""
    result = campaign_service.create(db, ctx, body.title, body.description, body.deadline)
    audit_service.log_from_request(
        db, request,
        actor_id=ctx.user_id,
        actor_email=ctx.email,
        action="campaign.created",
        resource_type="campaign",
        resource_id=result["id"],
        new_value={"title": body.title},
    )
    return result
