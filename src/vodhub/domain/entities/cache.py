from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .media import CandidateResult

CacheStatus = Literal["ok", "forbidden", "timeout"]

CACHE_STATUSES: tuple[CacheStatus, ...] = ("ok", "forbidden", "timeout")


@dataclass(frozen=True)
class CacheEntry:
    """Outcome of one paged provider search, memoized until ``expires_at``.

    ``records`` is empty for negative outcomes; ``page_count`` is only
    meaningful for page 1.
    """

    status: CacheStatus
    records: tuple[CandidateResult, ...] = ()
    page_count: int | None = None
    expires_at: float = 0.0

    @property
    def is_ok(self) -> bool:
        return self.status == "ok"
