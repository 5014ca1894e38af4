"""Port for the per-user search history store."""

from __future__ import annotations

from typing import Protocol


class SearchHistoryPort(Protocol):
    async def record(self, query: str) -> None: ...

    async def recent(self) -> list[str]: ...
