"""Mail outbox: writes links to files instead of sending email."""

import logging
import os
from typing import Optional
from urllib.parse import urlencode

from ideaportal.core.config import settings

logger = logging.getLogger("idea_portal.mail")


class MailService:
    """Drops one text file per user and message kind into MAIL_DIR.

    Each issuance overwrites the previous file for the same user, so the
    file always holds the newest link.
    """

    def __init__(self, mail_dir: Optional[str] = None, base_url: Optional[str] = None):
        self._mail_dir = mail_dir
        self._base_url = base_url

    @property
    def mail_dir(self) -> str:
        return self._mail_dir or settings.MAIL_DIR

    @property
    def base_url(self) -> str:
        return (self._base_url or settings.PUBLIC_BASE_URL).rstrip("/")

    def verification_link(self, user_id: int, token: str) -> str:
        query = urlencode({"uid": user_id, "token": token})
        return f"{self.base_url}/api/auth/verify?{query}"

    def reset_link(self, user_id: int, token: str) -> str:
        query = urlencode({"uid": user_id, "token": token})
        return f"{self.base_url}/reset.html?{query}"

    def send_verification(self, user_id: int, token: str) -> str:
        """Write the verification link for ``user_id`` and return it."""
        link = self.verification_link(user_id, token)
        self._write(f"verification_{user_id}.txt", link)
        return link

    def send_password_reset(self, user_id: int, token: str) -> str:
        """Write the reset link for ``user_id`` and return it."""
        link = self.reset_link(user_id, token)
        self._write(f"reset_{user_id}.txt", link)
        return link

    def read(self, kind: str, user_id: int) -> Optional[str]:
        """Return the last link written for a user, if any."""
        path = os.path.join(self.mail_dir, f"{kind}_{user_id}.txt")
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def _write(self, filename: str, link: str) -> None:
        os.makedirs(self.mail_dir, exist_ok=True)
        path = os.path.join(self.mail_dir, filename)
        with open(path, "w", encoding="utf-8") as f:
            f.write(link)
        logger.info("Mail written to %s", path)


mail_service = MailService()
