"""Badge service."""

from typing import List, Dict, Any

from sqlalchemy.orm import Session

from ideaportal.models.badge import UserBadge
from ideaportal.services.session_service import SessionContext


class BadgeService:

    @staticmethod
    def list_for_user(db: Session, ctx: SessionContext) -> List[Dict[str, Any]]:
        """Badges earned by the caller, oldest grant first."""
        user_id = ctx.require()
        grants = (
            db.query(UserBadge)
            .filter(UserBadge.user_id == user_id)
            .order_by(UserBadge.granted_at.asc())
            .all()
        )
        return [
            {"code": g.badge_code, "label": g.badge.label, "granted_at": g.granted_at}
            for g in grants
        ]


badge_service = BadgeService()
