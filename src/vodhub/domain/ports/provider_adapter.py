"""Port implemented by every provider adapter variant."""

from __future__ import annotations

from typing import Protocol

from vodhub.domain.entities.media import CandidateResult, MediaDetail, ProviderConfig


class ProviderAdapterPort(Protocol):
    """Turns a query into candidate results and an id into a media detail.

    ``search`` never raises provider errors: failures contribute an empty
    list.  ``resolve_detail`` raises typed ``ProviderError`` subclasses.
    """

    kind: str

    async def search(
        self,
        provider: ProviderConfig,
        query: str,
        *,
        max_pages: int = 1,
    ) -> list[CandidateResult]: ...

    async def resolve_detail(
        self, provider: ProviderConfig, media_id: str
    ) -> MediaDetail: ...
