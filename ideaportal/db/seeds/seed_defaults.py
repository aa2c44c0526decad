"""Seed the first-idea badge and the default campaigns."""

import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from ideaportal.core.security import utc_now
from ideaportal.models.badge import Badge, FIRST_IDEA_BADGE
from ideaportal.models.campaign import Campaign

logger = logging.getLogger("idea_portal.seed")


def seed_defaults(db: Session) -> None:
    """Insert the default badge and campaigns when their tables are empty."""
    if db.query(Badge).count() == 0:
        db.add(Badge(code=FIRST_IDEA_BADGE, label="Primeira Ideia"))

    if db.query(Campaign).count() == 0:
        today = utc_now().date()
        db.add(Campaign(
            title="Transformação Digital",
            description="Automatizar processos e experiência do colaborador",
            deadline=today + timedelta(days=60),
            status="ATIVA",
        ))
        db.add(Campaign(
            title="Eficiência Operacional",
            description="Redução de custos e ganho de produtividade",
            deadline=today + timedelta(days=90),
            status="ATIVA",
        ))

    db.commit()
    logger.info("Default badge and campaigns in place")
