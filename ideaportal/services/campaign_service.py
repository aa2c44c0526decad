"""Campaign service: themed calls for ideas."""

from datetime import date
from typing import Optional, List, Dict, Any

from sqlalchemy.orm import Session

from ideaportal.core.exceptions import InvalidDataError
from ideaportal.models.campaign import Campaign
from ideaportal.services.cache_service import cache_service
from ideaportal.services.session_service import SessionContext

ACTIVE = "ATIVA"


class CampaignService:
    """Lists and creates campaigns."""

    @staticmethod
    def list_campaigns(db: Session) -> List[Dict[str, Any]]:
        """All campaigns, newest first."""
        campaigns = db.query(Campaign).order_by(Campaign.created_at.desc(), Campaign.id.desc()).all()
        return [
            {
                "id": c.id,
                "title": c.title,
                "description": c.description,
                "deadline": c.deadline,
                "status": c.status,
            }
            for c in campaigns
        ]

    @staticmethod
    def create(
        db: Session,
        ctx: SessionContext,
        title: str,
        description: Optional[str] = None,
        deadline: Optional[date] = None,
    ) -> Dict[str, Any]:
        ctx.require()
        title = (title or "").strip()
        if not title:
            raise InvalidDataError("Title is required")
        campaign = Campaign(
            title=title,
            description=(description or "").strip() or None,
            deadline=deadline,
            status=ACTIVE,
        )
        db.add(campaign)
        db.commit()
        db.refresh(campaign)
        cache_service.invalidate_stats()
        return {"ok": True, "id": campaign.id}


campaign_service = CampaignService()
