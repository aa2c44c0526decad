"""Domain exceptions for the idea portal.

Every business-rule failure is a ``PortalError`` carrying the short code
that is sent to the client as ``{"ok": false, "error": code}``.
"""


class PortalError(Exception):
    """Base exception for the portal."""

    code = "error"

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class InvalidDataError(PortalError):
    """Raised when input is missing or malformed."""
    code = "invalid_data"


class EmailExistsError(PortalError):
    """Raised on signup with an email that is already registered."""
    code = "email_exists"


class InvalidCredentialsError(PortalError):
    """Raised when login fails, whatever the reason."""
    code = "invalid_credentials"


class NotAuthenticatedError(PortalError):
    """Raised when an operation needs a session and there is none."""
    code = "not_authenticated"


class ResourceNotFoundError(PortalError):
    """Raised when a requested entity does not exist."""
    code = "not_found"


class TokenError(PortalError):
    """Base for verification/reset token failures."""


class TokenInvalidError(TokenError):
    """Raised when no token exists or its hash does not match."""
    code = "token_invalido"


class TokenUsedError(TokenError):
    """Raised when the token was already consumed."""
    code = "token_usado"


class TokenExpiredError(TokenError):
    """Raised when the token is past its expiry."""
    code = "token_expirado"


class AudienceMismatchError(TokenError):
    """Raised when a federated token was issued for another client."""
    code = "aud_invalido"


class IssuerMismatchError(TokenError):
    """Raised when a federated token comes from an unknown issuer."""
    code = "iss_invalido"


class EmailMissingError(TokenError):
    """Raised when a federated token carries no email claim."""
    code = "email_ausente"
