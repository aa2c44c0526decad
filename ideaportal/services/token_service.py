"""Issuing and consuming single-use user tokens."""

from datetime import timedelta
from typing import Type, Union

from sqlalchemy.orm import Session

from ideaportal.core.exceptions import TokenExpiredError, TokenInvalidError, TokenUsedError
from ideaportal.core.security import generate_token, hash_token, tokens_match, utc_now
from ideaportal.models.tokens import EmailVerificationToken, PasswordResetToken

TokenModel = Union[Type[EmailVerificationToken], Type[PasswordResetToken]]


class TokenService:
    """Time-limited, single-use tokens for one user.

    A token row goes from issued to consumed (``used_at`` set), or is
    treated as expired once ``expires_at`` has passed. Only the newest row
    for a user is ever checked.
    """

    @staticmethod
    def issue(db: Session, model: TokenModel, user_id: int, ttl: timedelta) -> str:
        """Persist a new token and return the raw value (shown once).

        Older unused tokens of the same kind are stamped as used so they
        can never be redeemed.
        """
        now = utc_now()
        db.query(model).filter(
            model.user_id == user_id,
            model.used_at.is_(None),
        ).update({"used_at": now}, synchronize_session=False)

        raw_token = generate_token()
        db.add(model(
            user_id=user_id,
            token_hash=hash_token(raw_token),
            expires_at=now + ttl,
        ))
        db.flush()
        return raw_token

    @staticmethod
    def consume(db: Session, model: TokenModel, user_id: int, raw_token: str):
        """Validate the newest token for ``user_id`` and mark it used.

        Checks run in a fixed order: existence, already used, expiry, hash.

        Raises:
            TokenInvalidError: no token, or the hash does not match.
            TokenUsedError: the token was consumed before.
            TokenExpiredError: the token is past ``expires_at``.
        """
        row = (
            db.query(model)
            .filter(model.user_id == user_id)
            .order_by(model.id.desc())
            .first()
        )
        if row is None:
            raise TokenInvalidError("No token issued for this user")
        if row.used_at is not None:
            raise TokenUsedError("Token already used")
        now = utc_now()
        if now > row.expires_at:
            raise TokenExpiredError("Token expired")
        if not tokens_match(raw_token or "", row.token_hash):
            raise TokenInvalidError("Token does not match")

        # Only the first of two concurrent consumers can stamp the row
        stamped = (
            db.query(model)
            .filter(model.id == row.id, model.used_at.is_(None))
            .update({"used_at": now}, synchronize_session=False)
        )
        if stamped == 0:
            raise TokenUsedError("Token already used")
        return row


token_service = TokenService()
