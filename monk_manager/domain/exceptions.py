"""Unified error model.

Every failure that crosses a module boundary derives from BusinessError so the
CLI layer can catch one type and show a readable message. Provider and
transport failures are normalized into the closed AIError family below; the
caller decides retry/abort from the class alone, never from provider internals.
"""

from typing import Optional

import httpx


class BusinessError(Exception):
    """Base class for domain errors.

    Attributes:
        code: machine-readable error code (e.g. "RATE_LIMIT").
        message: human-readable message.
        http_status: upstream HTTP status when one is known.
        extra: additional context (provider, duration, ...).
    """

    def __init__(self, code: str, message: str, http_status: Optional[int] = None, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class AIError(BusinessError):
    """Any failure of a provider call."""


class RequestFailedError(AIError):
    """Transport-level failure: connection refused, DNS, malformed request."""

    def __init__(self, detail: str, **extra):
        self.detail = detail
        super().__init__(code="REQUEST_FAILED", message=f"API request failed: {detail}", **extra)


class InvalidResponseError(AIError):
    """The provider answered, but not with something we can use."""

    def __init__(self, detail: str, **extra):
        self.detail = detail
        super().__init__(
            code="INVALID_RESPONSE",
            message=f"Invalid response from AI model: {detail}",
            **extra,
        )


class RateLimitError(AIError):
    """Provider throttling (HTTP 429); retry/backoff is up to the caller."""

    def __init__(self, **extra):
        super().__init__(code="RATE_LIMIT", message="Rate limit exceeded", http_status=429, **extra)


class AuthenticationError(AIError):
    """The provider rejected the credential (HTTP 401)."""

    def __init__(self, detail: str = "Invalid API key", **extra):
        self.detail = detail
        super().__init__(
            code="AUTHENTICATION_FAILED",
            message=f"Authentication failed: {detail}",
            http_status=401,
            **extra,
        )


class RequestTimeoutError(AIError):
    """The call did not finish within `duration` seconds."""

    def __init__(self, duration: float, **extra):
        self.duration = duration
        super().__init__(code="TIMEOUT", message=f"Timeout: {duration:g}s", **extra)


class ProviderError(AIError):
    """Provider-reported failure that is neither throttling nor auth."""

    def __init__(self, detail: str, http_status: Optional[int] = None, **extra):
        self.detail = detail
        super().__init__(
            code="PROVIDER_ERROR",
            message=f"Model error: {detail}",
            http_status=http_status,
            **extra,
        )


class ConfigurationError(AIError):
    """Caller-supplied configuration is unusable."""

    def __init__(self, detail: str, **extra):
        self.detail = detail
        super().__init__(
            code="CONFIGURATION_ERROR",
            message=f"Configuration error: {detail}",
            **extra,
        )


def error_from_status(status: int, detail: str) -> AIError:
    """Map a non-success HTTP status to its taxonomy kind."""

    if status == 401:
        return AuthenticationError(detail or "Invalid API key")
    if status == 429:
        return RateLimitError(detail=detail)
    if 400 <= status < 600:
        return ProviderError(f"HTTP {status}: {detail}", http_status=status)
    return RequestFailedError(f"HTTP {status}: {detail}", http_status=status)


def error_from_transport(exc: httpx.RequestError, timeout: float) -> AIError:
    """Map an httpx transport exception; timeouts are checked first."""

    if isinstance(exc, httpx.TimeoutException):
        return RequestTimeoutError(timeout)
    return RequestFailedError(str(exc) or type(exc).__name__)
