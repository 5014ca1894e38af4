"""Port for the paged provider-search cache."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from vodhub.domain.entities.cache import CacheEntry, CacheStatus
from vodhub.domain.entities.media import CandidateResult


class PageCachePort(Protocol):
    """Memoizes ``(provider, query, page)`` search outcomes.

    The query is used verbatim (case-sensitive).  ``put`` with status
    ``ok`` and no records is a no-op.
    """

    async def get(self, provider_key: str, query: str, page: int) -> CacheEntry | None:
        ...

    async def put(
        self,
        provider_key: str,
        query: str,
        page: int,
        status: CacheStatus,
        records: Sequence[CandidateResult] = (),
        page_count: int | None = None,
    ) -> None:
        ...
