"""Seed demo users, ideas, votes and comments."""

import logging
import random
from datetime import timedelta
from typing import Dict, Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ideaportal.core.exceptions import EmailExistsError
from ideaportal.core.security import utc_now
from ideaportal.models.campaign import Campaign
from ideaportal.models.idea import Idea, IdeaComment, IdeaStatus, IdeaVote
from ideaportal.models.user import User
from ideaportal.services.auth_service import AuthService, auth_service
from ideaportal.services.idea_service import score_idea
from ideaportal.services.cache_service import cache_service

logger = logging.getLogger("idea_portal.seed")

DEMO_PASSWORD = "123456"

DEMO_USERS = [
    ("Ana Souza", "ana@empresa.com"),
    ("Carlos Lima", "carlos@empresa.com"),
    ("Beatriz Rocha", "beatriz@empresa.com"),
    ("Daniel Alves", "daniel@empresa.com"),
    ("Fernanda Torres", "fernanda@empresa.com"),
]

DEMO_IDEAS = [
    ("Automatização de Relatórios", "Criar robô para gerar relatórios mensais automaticamente.", IdeaStatus.EM_ELABORACAO),
    ("Redução de Copos Plásticos", "Distribuir canecas para todos os funcionários.", IdeaStatus.EM_TRIAGEM),
    ("App de Carona Corporativa", "Facilitar caronas entre colaboradores.", IdeaStatus.EM_AVALIACAO),
    ("Treinamento em IA", "Workshop mensal sobre ferramentas de IA.", IdeaStatus.APROVADA),
    ("Sala de Descompressão", "Criar espaço com jogos e pufs.", IdeaStatus.REJEITADA),
    ("Digitalização de Arquivo Morto", "Escanear documentos antigos para liberar espaço.", IdeaStatus.EM_TRIAGEM),
    ("Programa de Mentoria", "Seniores mentorando juniores.", IdeaStatus.APROVADA),
    ("Horta Comunitária", "Horta no terraço do prédio.", IdeaStatus.EM_ELABORACAO),
]

DEMO_COMMENT = "Ótima ideia! Apoio totalmente."

# Above this many users the database is considered populated
POPULATED_THRESHOLD = 5


def seed_sample_data(
    db: Session,
    auth: Optional[AuthService] = None,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """Populate a fresh database with demo content.

    Does nothing once more than five users exist or the demo users are
    already there.
    """
    auth = auth or auth_service
    rng = rng or random.Random()

    demo_present = db.query(User.id).filter(User.email == DEMO_USERS[0][1]).first() is not None
    if demo_present or db.query(User).count() > POPULATED_THRESHOLD:
        return {"ok": True, "message": "banco_ja_populado"}

    user_ids = []
    for name, email in DEMO_USERS:
        try:
            auth.signup(db, email, DEMO_PASSWORD, name)
        except EmailExistsError:
            pass
        user_ids.append(db.query(User.id).filter(User.email == email).scalar())

    campaigns = db.query(Campaign).order_by(Campaign.id).all()
    if not campaigns:
        db.add(Campaign(
            title="Sustentabilidade",
            description="Ideias para reduzir impacto ambiental",
            deadline=utc_now().date() + timedelta(days=120),
            status="ATIVA",
        ))
        db.commit()
        campaigns = db.query(Campaign).order_by(Campaign.id).all()

    for i, (title, description, status) in enumerate(DEMO_IDEAS):
        author_id = user_ids[i % len(user_ids)]
        campaign = campaigns[i % len(campaigns)]
        scores = score_idea(title, description, campaign.title)
        idea = Idea(
            title=title,
            description=description,
            campaign_id=campaign.id,
            author_id=author_id,
            status=status,
            score_ai=scores["score"],
            compat_ai=scores["compat"],
            created_at=utc_now() - timedelta(days=rng.randint(1, 30)),
        )
        db.add(idea)
        db.commit()

        for voter_id in {rng.choice(user_ids) for _ in range(rng.randint(0, 5))}:
            db.add(IdeaVote(idea_id=idea.id, user_id=voter_id))
            try:
                db.commit()
            except IntegrityError:
                db.rollback()

        if rng.randint(0, 1):
            db.add(IdeaComment(idea_id=idea.id, user_id=rng.choice(user_ids), text=DEMO_COMMENT))
            db.commit()

    cache_service.invalidate_stats()
    logger.info("Seeded %d users and %d ideas", len(user_ids), len(DEMO_IDEAS))
    return {"ok": True, "message": "banco_populado_com_sucesso"}
