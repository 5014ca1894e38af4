"""Provider registry fed by config and an optional YAML providers file."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from vodhub.domain.entities.errors import ProviderNotFoundError
from vodhub.domain.entities.media import ProviderConfig
from vodhub.infrastructure.config.schema import ProviderEntry

log = structlog.get_logger(__name__)


def _to_provider(entry: ProviderEntry) -> ProviderConfig:
    return ProviderConfig(
        key=entry.key,
        display_name=entry.name,
        base_url=entry.api,
        kind=entry.kind,
        detail_base_url=entry.detail,
        headers=dict(entry.headers),
        disabled=entry.disabled,
    )


def _read_entries(path: Path) -> list[ProviderEntry]:
    """Parse *path*; invalid entries are logged and skipped."""
    if not path.exists():
        log.warning("providers_file_not_found", path=str(path))
        return []

    raw: Any = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    items = raw.get("sources", []) if isinstance(raw, dict) else raw
    if not isinstance(items, list):
        log.warning("providers_file_invalid", path=str(path))
        return []

    entries: list[ProviderEntry] = []
    for index, item in enumerate(items):
        try:
            entries.append(ProviderEntry.model_validate(item))
        except ValidationError as e:
            log.warning(
                "provider_entry_invalid",
                path=str(path),
                index=index,
                error=str(e),
            )
    return entries


class YamlProviderRegistry:
    """
    Read-only provider list.

    Inline ``providers.sources`` from config come first, followed by the
    entries of ``providers.file``.  The file is re-read (off the event
    loop) on every call so edits apply from the next query on.  On a
    duplicate key the first entry wins.
    """

    def __init__(
        self,
        inline: Sequence[ProviderEntry] = (),
        file: Path | None = None,
    ) -> None:
        self._inline = list(inline)
        self._file = file

    async def _load(self) -> list[ProviderConfig]:
        entries: list[ProviderEntry] = list(self._inline)
        if self._file is not None:
            entries.extend(await asyncio.to_thread(_read_entries, self._file))
        return list(_dedupe(_to_provider(e) for e in entries))

    async def list_enabled(self) -> list[ProviderConfig]:
        providers = [p for p in await self._load() if not p.disabled]
        log.debug("providers_loaded", count=len(providers))
        return providers

    async def get(self, key: str) -> ProviderConfig:
        for provider in await self._load():
            if provider.key == key and not provider.disabled:
                return provider
        raise ProviderNotFoundError(f"Provider '{key}' not found or disabled")


def _dedupe(providers: Iterable[ProviderConfig]) -> Iterable[ProviderConfig]:
    seen: set[str] = set()
    for provider in providers:
        if provider.key in seen:
            log.warning("provider_duplicate_key", key=provider.key)
            continue
        seen.add(provider.key)
        yield provider
