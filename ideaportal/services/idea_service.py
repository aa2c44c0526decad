"""Idea service: ideas, votes, comments and the Kanban board."""

import logging
from typing import Optional, List, Dict, Any

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ideaportal.core.exceptions import InvalidDataError, ResourceNotFoundError
from ideaportal.models.badge import Badge, UserBadge, FIRST_IDEA_BADGE
from ideaportal.models.campaign import Campaign
from ideaportal.models.idea import Idea, IdeaComment, IdeaStatus, IdeaVote
from ideaportal.models.user import User
from ideaportal.services.cache_service import cache_service
from ideaportal.services.session_service import SessionContext

logger = logging.getLogger("idea_portal.ideas")


def score_idea(title: str, description: str, campaign_title: Optional[str] = None) -> Dict[str, int]:
    """Heuristic quality and campaign-fit scores shown on idea cards.

    ``score`` grows with the description size in bytes, clamped to 30..100.
    ``compat`` is 80 without a campaign, otherwise keyword based.
    """
    compat = 80
    if campaign_title is not None:
        campaign_text = campaign_title.lower()
        text = f"{title} {description}".lower()
        if "digital" in text and "transformação" in campaign_text:
            compat = 100
        elif "eficiência" in text:
            compat = 90
        else:
            compat = 75
    # UTF-8 byte length, not characters
    score = min(100, max(30, len(description.encode("utf-8")) // 5))
    return {"score": score, "compat": compat}


def parse_status(value: Optional[str]) -> IdeaStatus:
    try:
        return IdeaStatus((value or "").strip().upper())
    except ValueError:
        raise InvalidDataError(f"Unknown status '{value}'")


class IdeaService:
    """CRUD for ideas; every write needs an authenticated caller."""

    # ---- Ideas ----

    @staticmethod
    def create(
        db: Session,
        ctx: SessionContext,
        title: str,
        description: str,
        campaign_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Create an idea authored by the caller.

        The author's first idea earns the ``primeira_ideia`` badge.
        """
        user_id = ctx.require()
        title = (title or "").strip()
        description = (description or "").strip()
        if not title or not description:
            raise InvalidDataError("Title and description are required")

        campaign_title = None
        if campaign_id:
            campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
            if not campaign:
                raise ResourceNotFoundError(f"Campaign {campaign_id} not found")
            campaign_title = campaign.title
        else:
            campaign_id = None

        scores = score_idea(title, description, campaign_title)
        idea = Idea(
            title=title,
            description=description,
            campaign_id=campaign_id,
            author_id=user_id,
            status=IdeaStatus.EM_ELABORACAO,
            score_ai=scores["score"],
            compat_ai=scores["compat"],
        )
        db.add(idea)
        db.commit()
        db.refresh(idea)
        logger.info("Idea %s created by user %s", idea.id, user_id)

        IdeaService._grant_first_idea_badge(db, user_id)
        cache_service.invalidate_stats()

        return {
            "ok": True,
            "id": idea.id,
            "score_ai": idea.score_ai,
            "compat_ai": idea.compat_ai,
        }

    @staticmethod
    def list_ideas(
        db: Session,
        campaign_id: Optional[int] = None,
        status: Optional[str] = None,
        q: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Ideas newest first, with campaign title, author name and vote count."""
        query = IdeaService._base_query(db)
        if campaign_id:
            query = query.filter(Idea.campaign_id == campaign_id)
        if status:
            query = query.filter(Idea.status == parse_status(status))
        if q:
            pattern = f"%{q.strip()}%"
            query = query.filter(or_(Idea.title.ilike(pattern), Idea.description.ilike(pattern)))
        rows = query.order_by(Idea.created_at.desc(), Idea.id.desc()).all()
        return [IdeaService._serialize(idea, votes) for idea, votes in rows]

    @staticmethod
    def board(db: Session) -> List[Dict[str, Any]]:
        """One Kanban column per status, in workflow order."""
        ideas = IdeaService.list_ideas(db)
        columns = []
        for status in IdeaStatus:
            column = [i for i in ideas if i["status"] == status.value]
            columns.append({"status": status.value, "count": len(column), "ideas": column})
        return columns

    @staticmethod
    def get(db: Session, idea_id: int) -> Dict[str, Any]:
        """An idea with its comments, oldest comment first."""
        row = IdeaService._base_query(db).filter(Idea.id == idea_id).first()
        if row is None:
            raise ResourceNotFoundError(f"Idea {idea_id} not found")
        idea, votes = row
        return {
            "ok": True,
            "idea": IdeaService._serialize(idea, votes),
            "comments": IdeaService._comments(db, idea_id),
        }

    @staticmethod
    def update(
        db: Session,
        ctx: SessionContext,
        idea_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Change title and/or description."""
        ctx.require()
        changes = {}
        if title is not None:
            if not title.strip():
                raise InvalidDataError("Title cannot be empty")
            changes["title"] = title.strip()
        if description is not None:
            if not description.strip():
                raise InvalidDataError("Description cannot be empty")
            changes["description"] = description.strip()
        if not changes:
            raise InvalidDataError("Nothing to update")

        idea = IdeaService._get_or_404(db, idea_id)
        for field, value in changes.items():
            setattr(idea, field, value)
        db.commit()
        return {"ok": True}

    @staticmethod
    def update_status(db: Session, ctx: SessionContext, idea_id: int, status: str) -> Dict[str, Any]:
        """Move an idea to another Kanban column."""
        ctx.require()
        new_status = parse_status(status)
        idea = IdeaService._get_or_404(db, idea_id)
        old_status = idea.status
        idea.status = new_status
        db.commit()
        cache_service.invalidate_stats()
        logger.info("Idea %s moved %s -> %s", idea_id, old_status.value, new_status.value)
        return {"ok": True, "status": new_status.value}

    # ---- Votes ----

    @staticmethod
    def vote(db: Session, ctx: SessionContext, idea_id: int) -> Dict[str, Any]:
        """Up-vote an idea; voting again is a silent no-op."""
        user_id = ctx.require()
        IdeaService._get_or_404(db, idea_id)
        db.add(IdeaVote(idea_id=idea_id, user_id=user_id, type="up"))
        try:
            db.commit()
            cache_service.invalidate_stats()
        except IntegrityError:
            # uniq_vote: the caller already voted
            db.rollback()
        return {"ok": True, "votes": IdeaService.count_votes(db, idea_id)}

    @staticmethod
    def count_votes(db: Session, idea_id: int) -> int:
        return db.query(func.count(IdeaVote.id)).filter(IdeaVote.idea_id == idea_id).scalar() or 0

    # ---- Comments ----

    @staticmethod
    def comment(
        db: Session,
        ctx: SessionContext,
        idea_id: int,
        text: str,
        parent_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Add a comment or a reply; returns the refreshed idea detail."""
        user_id = ctx.require()
        text = (text or "").strip()
        if not text:
            raise InvalidDataError("Comment text is required")
        IdeaService._get_or_404(db, idea_id)
        if parent_id:
            parent = db.query(IdeaComment).filter(
                IdeaComment.id == parent_id,
                IdeaComment.idea_id == idea_id,
            ).first()
            if parent is None:
                raise ResourceNotFoundError(f"Comment {parent_id} not found on idea {idea_id}")
        else:
            parent_id = None

        db.add(IdeaComment(idea_id=idea_id, user_id=user_id, text=text, parent_id=parent_id))
        db.commit()
        return IdeaService.get(db, idea_id)

    @staticmethod
    def list_comments(db: Session, idea_id: int) -> List[Dict[str, Any]]:
        IdeaService._get_or_404(db, idea_id)
        return IdeaService._comments(db, idea_id)

    # ---- Helpers ----

    @staticmethod
    def _base_query(db: Session):
        votes = (
            db.query(IdeaVote.idea_id, func.count(IdeaVote.id).label("votes"))
            .group_by(IdeaVote.idea_id)
            .subquery()
        )
        return (
            db.query(Idea, func.coalesce(votes.c.votes, 0))
            .outerjoin(votes, votes.c.idea_id == Idea.id)
        )

    @staticmethod
    def _serialize(idea: Idea, votes: int) -> Dict[str, Any]:
        return {
            "id": idea.id,
            "title": idea.title,
            "description": idea.description,
            "status": idea.status.value,
            "score_ai": idea.score_ai,
            "compat_ai": idea.compat_ai,
            "created_at": idea.created_at,
            "campaign_id": idea.campaign_id,
            "campaign": idea.campaign.title if idea.campaign else None,
            "author_id": idea.author_id,
            "author_name": idea.author.name if idea.author else None,
            "votes": int(votes or 0),
        }

    @staticmethod
    def _comments(db: Session, idea_id: int) -> List[Dict[str, Any]]:
        rows = (
            db.query(IdeaComment, User.name)
            .outerjoin(User, User.id == IdeaComment.user_id)
            .filter(IdeaComment.idea_id == idea_id)
            .order_by(IdeaComment.created_at.asc(), IdeaComment.id.asc())
            .all()
        )
        return [
            {
                "id": c.id,
                "user_id": c.user_id,
                "author_name": name,
                "text": c.text,
                "parent_id": c.parent_id,
                "created_at": c.created_at,
            }
            for c, name in rows
        ]

    @staticmethod
    def _get_or_404(db: Session, idea_id: int) -> Idea:
        idea = db.query(Idea).filter(Idea.id == idea_id).first()
        if idea is None:
            raise ResourceNotFoundError(f"Idea {idea_id} not found")
        return idea

    @staticmethod
    def _grant_first_idea_badge(db: Session, user_id: int) -> None:
        count = db.query(func.count(Idea.id)).filter(Idea.author_id == user_id).scalar()
        if count != 1 or db.get(Badge, FIRST_IDEA_BADGE) is None:
            return
        db.add(UserBadge(user_id=user_id, badge_code=FIRST_IDEA_BADGE))
        try:
            db.commit()
        except IntegrityError:
            # already granted
            db.rollback()


idea_service = IdeaService()
