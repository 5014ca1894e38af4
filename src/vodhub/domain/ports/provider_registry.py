"""Port for the read-only provider registry."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from vodhub.domain.entities.media import ProviderConfig


@runtime_checkable
class ProviderRegistryPort(Protocol):
    """Supplies the currently enabled providers.

    The list may change between queries; callers must not keep it beyond
    one dispatch.
    """

    async def list_enabled(self) -> list[ProviderConfig]: ...

    async def get(self, key: str) -> ProviderConfig: ...
