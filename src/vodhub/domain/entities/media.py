"""Media records produced by provider adapters."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Literal

UNKNOWN_YEAR = "unknown"

ProviderKind = Literal["api", "scrape"]


@dataclass(frozen=True)
class ProviderConfig:
    """One catalog provider as supplied by the provider registry.

    Read-only to the core: loaded once per dispatch and never mutated.
    """

    key: str
    display_name: str
    base_url: str
    kind: ProviderKind = "api"
    detail_base_url: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    disabled: bool = False


@dataclass(frozen=True)
class CandidateResult:
    """One playable title from one provider."""

    id: str
    title: str
    provider_key: str
    provider_label: str
    poster: str = ""
    episodes: tuple[str, ...] = ()
    episode_titles: tuple[str, ...] = ()
    year: str = UNKNOWN_YEAR
    description: str = ""
    category: str = ""
    external_id: int = 0

    def __post_init__(self) -> None:
        if self.episode_titles and len(self.episode_titles) != len(self.episodes):
            raise ValueError(
                f"episode_titles ({len(self.episode_titles)}) must match "
                f"episodes ({len(self.episodes)})"
            )

    @property
    def has_known_year(self) -> bool:
        return bool(self.year) and self.year != UNKNOWN_YEAR

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["episodes"] = list(self.episodes)
        data["episode_titles"] = list(self.episode_titles)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CandidateResult:
        """Rebuild a record from ``to_dict`` output; unknown keys are ignored."""
        names = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in names}
        kwargs["episodes"] = tuple(kwargs.get("episodes") or ())
        kwargs["episode_titles"] = tuple(kwargs.get("episode_titles") or ())
        return cls(**kwargs)


@dataclass(frozen=True)
class MediaDetail(CandidateResult):
    """CandidateResult with its episode list fully resolved."""

    source_url: str = ""
