"""Admin API router: demo seeding and health."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ideaportal.core.config import settings
from ideaportal.core.exceptions import ResourceNotFoundError
from ideaportal.db.seeds.seed_sample_data import seed_sample_data
from ideaportal.db.session import get_db
from ideaportal.schemas.schemas import MessageResponse
from ideaportal.services.audit_service import audit_service
from ideaportal.services.cache_service import cache_service

logger = logging.getLogger("idea_portal")

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/seed", response_model=MessageResponse)
def seed(request: Request, db: Session = Depends(get_db)):
    """Populate demo data.

    Answers not_found unless ALLOW_SEED_ENDPOINT is set; there is no admin
    role to check against.
    """
    if not settings.ALLOW_SEED_ENDPOINT:
        raise ResourceNotFoundError("Seeding over HTTP is disabled")
    result = seed_sample_data(db)
    audit_service.log_from_request(
        db, request,
        actor_id=None,
        actor_email=None,
        action="system.seeded",
        resource_type="system",
        new_value={"message": result["message"]},
    )
    return result


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """System health check: DB and Redis."""
    db_ok = False
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError as e:
        logger.warning("Database health check failed: %s", e)

    redis_ok = cache_service.health_check()

    return {
        "database": "ok" if db_ok else "error",
        "redis": "ok" if redis_ok else ("disabled" if not settings.CACHE_ENABLED else "error"),
        "status": "healthy" if db_ok else "degraded",
    }
