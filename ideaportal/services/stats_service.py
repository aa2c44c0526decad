"""Stats service: leaderboard and dashboard KPIs."""

from datetime import timedelta
from typing import List, Dict, Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ideaportal.core.config import settings
from ideaportal.core.security import utc_now
from ideaportal.models.campaign import Campaign
from ideaportal.models.idea import Idea, IdeaStatus, IdeaVote
from ideaportal.models.user import User
from ideaportal.services.cache_service import cache_service, STATS_KEY_PREFIX
from ideaportal.services.session_service import SessionContext

LEADERBOARD_SIZE = 10
EVOLUTION_DAYS = 30


class StatsService:
    """Aggregates over ideas and votes, cached briefly in Redis."""

    @staticmethod
    def leaderboard(db: Session) -> List[Dict[str, Any]]:
        """Top users by votes received, then by ideas authored."""
        key = f"{STATS_KEY_PREFIX}leaderboard"
        cached = cache_service.get_json(key)
        if cached is not None:
            return cached

        ideas_count = (
            select(func.count(Idea.id))
            .where(Idea.author_id == User.id)
            .correlate(User)
            .scalar_subquery()
            .label("ideas_count")
        )
        votes_received = (
            select(func.count(IdeaVote.id))
            .join(Idea, Idea.id == IdeaVote.idea_id)
            .where(Idea.author_id == User.id)
            .correlate(User)
            .scalar_subquery()
            .label("votes_received")
        )
        rows = (
            db.query(User.id, func.coalesce(User.name, User.email), ideas_count, votes_received)
            .order_by(votes_received.desc(), ideas_count.desc(), User.id.asc())
            .limit(LEADERBOARD_SIZE)
            .all()
        )
        leaders = [
            {
                "id": user_id,
                "name": name,
                "ideas_count": int(ideas or 0),
                "votes_received": int(votes or 0),
            }
            for user_id, name, ideas, votes in rows
        ]
        cache_service.set_json(key, leaders, settings.STATS_CACHE_TTL_SECONDS)
        return leaders

    @staticmethod
    def dashboard(db: Session, ctx: SessionContext) -> Dict[str, Any]:
        """KPIs and chart series for the dashboard view."""
        ctx.require()
        key = f"{STATS_KEY_PREFIX}dashboard"
        cached = cache_service.get_json(key)
        if cached is not None:
            return cached

        total_ideas = db.query(func.count(Idea.id)).scalar() or 0
        total_votes = db.query(func.count(IdeaVote.id)).scalar() or 0
        approved = (
            db.query(func.count(Idea.id))
            .filter(Idea.status == IdeaStatus.APROVADA)
            .scalar()
            or 0
        )
        approval_rate = round(approved / total_ideas * 100) if total_ideas else 0

        by_status = [
            {"status": status.value, "count": int(count)}
            for status, count in db.query(Idea.status, func.count(Idea.id)).group_by(Idea.status).all()
        ]
        by_campaign = [
            {"title": title, "count": int(count)}
            for _, title, count in (
                db.query(Campaign.id, Campaign.title, func.count(Idea.id))
                .outerjoin(Idea, Idea.campaign_id == Campaign.id)
                .group_by(Campaign.id, Campaign.title)
                .order_by(Campaign.id)
                .all()
            )
        ]
        day = func.date(Idea.created_at)
        since = utc_now() - timedelta(days=EVOLUTION_DAYS)
        evolution = [
            {"date": str(d), "count": int(count)}
            for d, count in (
                db.query(day, func.count(Idea.id))
                .filter(Idea.created_at >= since)
                .group_by(day)
                .order_by(day)
                .all()
            )
        ]

        result = {
            "kpis": {
                "total_ideas": int(total_ideas),
                "total_votes": int(total_votes),
                "approval_rate": approval_rate,
            },
            "charts": {
                "by_status": by_status,
                "by_campaign": by_campaign,
                "evolution": evolution,
            },
        }
        cache_service.set_json(key, result, settings.STATS_CACHE_TTL_SECONDS)
        return result


stats_service = StatsService()
