"""Badges, leaderboard and dashboard API router."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ideaportal.api.deps import get_session_context
from ideaportal.db.session import get_db
from ideaportal.schemas.schemas import BadgeListResponse, DashboardResponse, LeaderboardResponse
from ideaportal.services.badge_service import badge_service
from ideaportal.services.session_service import SessionContext
from ideaportal.services.stats_service import stats_service

router = APIRouter(tags=["stats"])


@router.get("/badges", response_model=BadgeListResponse)
def list_badges(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    """Badges earned by the caller."""
    return {"ok": True, "badges": badge_service.list_for_user(db, ctx)}


@router.get("/stats/leaderboard", response_model=LeaderboardResponse)
def leaderboard(db: Session = Depends(get_db)):
    return {"ok": True, "leaders": stats_service.leaderboard(db)}


@router.get("/stats/dashboard", response_model=DashboardResponse)
def dashboard(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    """KPIs and chart series for signed-in users."""
    return {"ok": True, **stats_service.dashboard(db, ctx)}
