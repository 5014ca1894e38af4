"""Detail resolution for a single provider record."""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from vodhub.domain.entities.errors import ProviderError, UnsupportedProviderKind
from vodhub.domain.entities.media import MediaDetail
from vodhub.domain.ports.provider_adapter import ProviderAdapterPort
from vodhub.domain.ports.provider_registry import ProviderRegistryPort

log = structlog.get_logger(__name__)


class MediaDetailUseCase:
    """Resolves ``(provider_key, media_id)`` to a fully populated MediaDetail.

    Unlike search, failures are surfaced to the caller as typed errors:

    Raises:
        ProviderNotFoundError: Unknown or disabled provider.
        UnsupportedProviderKind: No adapter wired for the provider's kind.
        ProviderError: Any adapter failure (timeout, forbidden, challenge,
            detail_unresolved, ...).
    """

    def __init__(
        self,
        *,
        registry: ProviderRegistryPort,
        adapters: Mapping[str, ProviderAdapterPort],
    ) -> None:
        self._registry = registry
        self._adapters = dict(adapters)

    async def resolve(self, provider_key: str, media_id: str) -> MediaDetail:
        provider = await self._registry.get(provider_key)
        adapter = self._adapters.get(provider.kind)
        if adapter is None:
            raise UnsupportedProviderKind(
                f"No adapter for provider kind {provider.kind!r}"
            )

        try:
            detail = await adapter.resolve_detail(provider, media_id)
        except ProviderError as exc:
            log.warning(
                "detail_resolution_failed",
                provider=provider_key,
                media_id=media_id,
                reason=exc.reason,
                error=str(exc),
            )
            raise

        log.info(
            "detail_resolved",
            provider=provider_key,
            media_id=media_id,
            episodes=len(detail.episodes),
        )
        return detail
