"""Google ID-token verification through the public tokeninfo endpoint."""

import logging
from typing import Any, Dict, Optional

import httpx

from ideaportal.core.config import settings
from ideaportal.core.exceptions import (
    AudienceMismatchError,
    EmailMissingError,
    IssuerMismatchError,
    TokenInvalidError,
)

logger = logging.getLogger("idea_portal.google")

GOOGLE_ISSUERS = ("https://accounts.google.com", "accounts.google.com")


class GoogleIdentityVerifier:
    """Exchanges a Google ID token for its verified claims.

    The checks run in a fixed order so each failure maps to one error:
    exchange, audience, issuer, email.
    """

    provider = "google"

    def __init__(
        self,
        client_id: Optional[str] = None,
        tokeninfo_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._client_id = client_id
        self._tokeninfo_url = tokeninfo_url
        self._timeout = timeout
        self._transport = transport

    @property
    def client_id(self) -> str:
        return self._client_id or settings.GOOGLE_CLIENT_ID

    def fetch_claims(self, id_token: str) -> Dict[str, Any]:
        """Call tokeninfo and return the decoded JSON body.

        Raises:
            TokenInvalidError: network failure, non-2xx answer or bad JSON.
        """
        if not id_token:
            raise TokenInvalidError("Empty ID token")
        try:
            with httpx.Client(
                timeout=self._timeout or settings.GOOGLE_HTTP_TIMEOUT,
                transport=self._transport,
            ) as client:
                resp = client.get(
                    self._tokeninfo_url or settings.GOOGLE_TOKENINFO_URL,
                    params={"id_token": id_token},
                )
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Google token exchange failed: %s", e.__class__.__name__)
            raise TokenInvalidError("Token exchange failed")
        if not isinstance(data, dict):
            raise TokenInvalidError("Unexpected tokeninfo payload")
        return data

    def verify(self, id_token: str) -> Dict[str, Any]:
        """Return ``{sub, email, name}`` for a valid token."""
        data = self.fetch_claims(id_token)

        if data.get("aud", "") != self.client_id:
            raise AudienceMismatchError("Token audience mismatch")
        if data.get("iss", "") not in GOOGLE_ISSUERS:
            raise IssuerMismatchError("Unknown token issuer")
        email = data.get("email")
        if not email:
            raise EmailMissingError("Token has no email claim")
        sub = str(data.get("sub", "") or "")
        if not sub:
            raise TokenInvalidError("Token has no subject")

        return {
            "sub": sub,
            "email": str(email).strip().lower(),
            "name": str(data.get("name", "") or ""),
        }


google_verifier = GoogleIdentityVerifier()
