"""Provider and registry exceptions."""

from __future__ import annotations


class ProviderError(Exception):
    """Base class for all provider adapter failures."""

    reason: str = "provider_error"

    def __init__(self, message: str = "", *, provider: str = "") -> None:
        super().__init__(message or self.reason)
        self.provider = provider


class NetworkTimeout(ProviderError):
    """Upstream did not answer within the request timeout."""

    reason = "timeout"


class NetworkError(ProviderError):
    """Connection-level failure or unexpected non-2xx status."""

    reason = "network_error"

    def __init__(
        self,
        message: str = "",
        *,
        provider: str = "",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, provider=provider)
        self.status_code = status_code


class UpstreamForbidden(ProviderError):
    """HTTP 403 or a detected block page."""

    reason = "forbidden"


class UpstreamEmpty(ProviderError):
    """Well-formed response without any usable record."""

    reason = "empty"


class ChallengeDetected(ProviderError):
    """Bot-challenge page returned instead of content."""

    reason = "challenge"


class MalformedResponse(ProviderError):
    """Body could not be parsed."""

    reason = "malformed"


class DetailResolutionFailed(ProviderError):
    """Detail page yielded no resolvable episode."""

    reason = "detail_unresolved"


class RegistryError(Exception):
    """Base class for provider registry errors."""


class ProviderNotFoundError(RegistryError):
    """Raised when a provider key is unknown or disabled."""


class UnsupportedProviderKind(RegistryError):
    """Raised when no adapter is wired for a provider kind."""
