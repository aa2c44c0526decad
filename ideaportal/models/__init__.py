"""Models package: import all models so create_all can discover them."""

from ideaportal.models.user import User, OAuthIdentity
from ideaportal.models.tokens import EmailVerificationToken, PasswordResetToken
from ideaportal.models.login_session import LoginSession
from ideaportal.models.campaign import Campaign
from ideaportal.models.idea import Idea, IdeaStatus, IdeaVote, IdeaComment
from ideaportal.models.badge import Badge, UserBadge
from ideaportal.models.audit_log import AuditLog

__all__ = [
    "User", "OAuthIdentity",
    "EmailVerificationToken", "PasswordResetToken",
    "LoginSession", "Campaign",
    "Idea", "IdeaStatus", "IdeaVote", "IdeaComment",
    "Badge", "UserBadge", "AuditLog",
]
