"""Auth service: signup, login, email verification, password reset, Google sign-in."""

import logging
from datetime import timedelta
from typing import Optional, Dict, Any, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ideaportal.core.config import settings
from ideaportal.core.exceptions import (
    EmailExistsError,
    InvalidCredentialsError,
    InvalidDataError,
    ResourceNotFoundError,
)
from ideaportal.core.security import BCRYPT_MAX_BYTES, PasswordHasher, password_hasher
from ideaportal.models.tokens import EmailVerificationToken, PasswordResetToken
from ideaportal.models.user import OAuthIdentity, User
from ideaportal.services.cache_service import cache_service
from ideaportal.services.google_identity import GoogleIdentityVerifier, google_verifier
from ideaportal.services.mail_service import MailService, mail_service
from ideaportal.services.session_service import SessionContext, session_service
from ideaportal.services.token_service import token_service

logger = logging.getLogger("idea_portal.auth")


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class AuthService:
    """Handles credentials, tokens and identity for portal users.

    The password hashing strategy, the mail outbox and the Google verifier
    are injected so a deployment uses exactly one of each.
    """

    def __init__(
        self,
        hasher: Optional[PasswordHasher] = None,
        mailer: Optional[MailService] = None,
        verifier: Optional[GoogleIdentityVerifier] = None,
    ):
        self.hasher = hasher or password_hasher
        self.mailer = mailer or mail_service
        self.verifier = verifier or google_verifier
        self._dummy_hash: Optional[str] = None

    # ---- Credentials ----

    def signup(self, db: Session, email: str, password: str, name: str = "") -> Dict[str, Any]:
        """Create a local account and issue its email verification link.

        Raises:
            InvalidDataError: empty email or password, or password too long.
            EmailExistsError: the email is already registered.
        """
        email = normalize_email(email)
        name = (name or "").strip()
        self._check_password(password)
        if not email:
            raise InvalidDataError("Email and password are required")

        if db.query(User).filter(User.email == email).first():
            raise EmailExistsError(f"User with email {email} already exists")

        user = User(
            email=email,
            name=name or None,
            password_hash=self.hasher.hash(password),
            email_verified=False,
        )
        db.add(user)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise EmailExistsError(f"User with email {email} already exists")

        token = token_service.issue(
            db, EmailVerificationToken, user.id,
            timedelta(minutes=settings.EMAIL_VERIFICATION_TTL_MINUTES),
        )
        db.commit()
        cache_service.invalidate_stats()
        link = self.mailer.send_verification(user.id, token)
        logger.info("User %s signed up", user.id)

        return {
            "ok": True,
            "user": {"id": user.id, "email": user.email, "name": user.name or ""},
            "verify_link": link,
        }

    def authenticate(self, db: Session, email: str, password: str) -> User:
        """Return the user for valid credentials.

        Unknown email, wrong password and password-less accounts all raise
        the same error so callers cannot tell them apart.
        """
        user = db.query(User).filter(User.email == normalize_email(email)).first()
        if user is None or not user.password_hash:
            # Spend the same bcrypt work as a real check
            self.hasher.verify(password or "", self._get_dummy_hash())
            raise InvalidCredentialsError("Invalid email or password")
        if not self.hasher.verify(password or "", user.password_hash):
            raise InvalidCredentialsError("Invalid email or password")
        return user

    def login(
        self,
        db: Session,
        email: str,
        password: str,
        user_agent: Optional[str] = None,
        ip: Optional[str] = None,
    ) -> Tuple[str, Dict[str, Any]]:
        """Check credentials and open a session.

        Returns:
            The raw session cookie value and the response payload.
        """
        user = self.authenticate(db, email, password)
        raw_session, ctx = session_service.open(db, user, user_agent=user_agent, ip=ip)
        logger.info("User %s logged in", user.id)
        return raw_session, {
            "ok": True,
            "user": ctx.as_user(),
            "email_verified": bool(user.email_verified),
        }

    def logout(self, db: Session, raw_session: Optional[str]) -> None:
        session_service.revoke(db, raw_session)

    # ---- Email verification ----

    def verify_email(self, db: Session, user_id: int, token: str) -> Dict[str, Any]:
        """Consume the newest verification token and flag the email verified."""
        token_service.consume(db, EmailVerificationToken, user_id, token)
        db.query(User).filter(User.id == user_id).update(
            {"email_verified": True}, synchronize_session=False
        )
        db.commit()
        logger.info("Email verified for user %s", user_id)
        return {"ok": True}

    # ---- Password reset ----

    def request_password_reset(self, db: Session, email: str) -> Dict[str, Any]:
        """Issue a reset link when the email is known.

        The answer is the same whether or not the account exists.
        """
        user = db.query(User).filter(User.email == normalize_email(email)).first()
        if user is None:
            logger.info("Password reset requested for unknown email")
            return {"ok": True}

        token = token_service.issue(
            db, PasswordResetToken, user.id,
            timedelta(minutes=settings.PASSWORD_RESET_TTL_MINUTES),
        )
        db.commit()
        self.mailer.send_password_reset(user.id, token)
        logger.info("Password reset issued for user %s", user.id)
        return {"ok": True}

    def reset_password(self, db: Session, user_id: int, token: str, password: str) -> Dict[str, Any]:
        """Overwrite the password using a valid reset token; no old password needed."""
        self._check_password(password)
        token_service.consume(db, PasswordResetToken, user_id, token)
        user = db.query(User).filter(User.id == user_id).first()
        if user is None:
            db.rollback()
            raise ResourceNotFoundError(f"User {user_id} not found")
        user.password_hash = self.hasher.hash(password)
        db.commit()
        logger.info("Password reset completed for user %s", user_id)
        return {"ok": True}

    # ---- Google sign-in ----

    def login_with_google(
        self,
        db: Session,
        id_token: str,
        user_agent: Optional[str] = None,
        ip: Optional[str] = None,
    ) -> Tuple[str, Dict[str, Any]]:
        """Map a verified Google identity to a local user and open a session.

        Token validation completes before any lookup or insert, so a
        rejected token never creates a user.
        """
        claims = self.verifier.verify(id_token)
        provider = self.verifier.provider

        identity = db.query(OAuthIdentity).filter(
            OAuthIdentity.provider == provider,
            OAuthIdentity.provider_user_id == claims["sub"],
        ).first()

        if identity is not None:
            user = identity.user
        else:
            user = db.query(User).filter(User.email == claims["email"]).first()
            if user is None:
                user = User(
                    email=claims["email"],
                    name=claims["name"] or None,
                    password_hash=None,
                    email_verified=True,
                )
                db.add(user)
                db.flush()
                logger.info("User %s created from %s sign-in", user.id, provider)
            db.add(OAuthIdentity(
                user_id=user.id,
                provider=provider,
                provider_user_id=claims["sub"],
            ))
            db.commit()
            cache_service.invalidate_stats()

        raw_session, ctx = session_service.open(db, user, user_agent=user_agent, ip=ip)
        return raw_session, {
            "ok": True,
            "user": {"id": user.id, "email": user.email, "name": user.name or ""},
        }

    # ---- Users ----

    @staticmethod
    def get_user(db: Session, user_id: int) -> User:
        """Get a user by id."""
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise ResourceNotFoundError(f"User {user_id} not found")
        return user

    def link_register(self, db: Session, ctx: SessionContext, register: str) -> Dict[str, Any]:
        """Attach the caller's external register code to their account."""
        user_id = ctx.require()
        register = (register or "").strip()
        if not register:
            raise InvalidDataError("Register code is required")
        user = self.get_user(db, user_id)
        user.register = register
        db.commit()
        session_service.update_register(db, ctx, register)
        return {"ok": True, "user": ctx.as_user()}

    # ---- Helpers ----

    @staticmethod
    def _check_password(password: Optional[str]) -> None:
        if not password:
            raise InvalidDataError("Password is required")
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise InvalidDataError("Password is too long")

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self.hasher.hash("not-a-real-password")
        return self._dummy_hash


auth_service = AuthService()
