from typing import Optional, Sequence


class QrisError(Exception):
    """Base error for QRIS provider clients."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class TransportError(QrisError):
    """Network failure, timeout or undecodable response body."""


class AuthenticationError(QrisError):
    """Token endpoint answered without an access token."""

    def __init__(self, provider: str, code: str = "", description: str = ""):
        self.provider = provider
        self.code = code
        self.description = description
        super().__init__(f"{provider}({code}) - {description}")


class SigningError(QrisError):
    """Private key could not be loaded or the message could not be signed."""


class MalformedCacheDataError(QrisError):
    """Token lifetime is not an integer number of seconds."""


class MissingFieldError(QrisError):
    def __init__(self, *fields: str, detail: Optional[str] = None):
        self.fields: Sequence[str] = fields
        super().__init__(detail or f"the key of {' or '.join(fields)} is undefined")


class ConfigurationError(QrisError):
    """Raised when provider configuration is invalid or missing."""
