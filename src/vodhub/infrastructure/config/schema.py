"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
CacheBackend = Literal["memory", "diskcache"]


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class CacheConfig(BaseModel):
    """Cache configuration (backend-agnostic)."""

    model_config = ConfigDict(populate_by_name=True)

    backend: CacheBackend = Field(
        default="memory",
        description="Cache backend: 'memory' (process-local) or 'diskcache' (SQLite)",
    )
    directory: Path = Field(
        default=Path("./.cache/vodhub"),
        alias="dir",
        description="Diskcache SQLite DB path",
    )
    ttl_seconds: int = Field(
        default=7200,
        description="TTL for cached search pages (seconds).",
    )
    max_concurrent: int = Field(
        default=10,
        description="Max parallel cache ops (semaphore limit, diskcache only)",
    )

    @field_validator("directory", mode="before")
    @classmethod
    def _validate_dir(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("ttl_seconds")
    @classmethod
    def _validate_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError("cache ttl_seconds must be >= 0")
        return v


class SearchConfig(BaseModel):
    """Search fan-out and aggregation tuning.

    ``max_pages`` is read once per dispatch, so changing it on a live
    config object applies from the next query on.
    """

    max_pages: int = Field(
        default=5,
        ge=1,
        description="Maximum search pages fetched per provider.",
    )
    fluid_search: bool = Field(
        default=True,
        description="Stream results as providers respond (SSE) instead of polling.",
    )
    flush_delay_ms: int = Field(
        default=80,
        ge=0,
        description="Delay before buffered results are merged into the view.",
    )
    challenge_retry_delay_seconds: float = Field(
        default=1.5,
        ge=0,
        description="Backoff before the single retry after a bot-challenge page.",
    )
    episode_concurrency: int = Field(
        default=4,
        ge=1,
        description="Max parallel episode-page resolutions per detail request.",
    )
    history_limit: int = Field(
        default=20,
        ge=1,
        description="Number of recent queries kept in the search history.",
    )


class ProviderEntry(BaseModel):
    """One provider as written in config.yaml or the providers file."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    key: str = Field(min_length=1)
    name: str = Field(min_length=1)
    api: str = Field(min_length=1, description="Base URL of the provider.")
    detail: Optional[str] = Field(
        default=None,
        description="Optional HTML detail host for API providers.",
    )
    kind: Literal["api", "scrape"] = "api"
    headers: dict[str, str] = Field(default_factory=dict)
    disabled: bool = False

    @field_validator("api", "detail")
    @classmethod
    def _strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.rstrip("/")


class ProvidersConfig(BaseModel):
    file: Optional[Path] = Field(
        default=None,
        description="YAML file with a top-level 'sources' list, re-read per query.",
    )
    sources: list[ProviderEntry] = Field(default_factory=list)

    @field_validator("file", mode="before")
    @classmethod
    def _validate_file(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/cache/search/providers).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="vodhub", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_search_timeout_seconds: float = Field(
        default=8.0,
        validation_alias=AliasChoices(
            "http_search_timeout_seconds",
            AliasPath("http", "search_timeout_seconds"),
        ),
        description="Timeout for provider search page requests.",
    )
    http_detail_timeout_seconds: float = Field(
        default=10.0,
        validation_alias=AliasChoices(
            "http_detail_timeout_seconds",
            AliasPath("http", "detail_timeout_seconds"),
        ),
        description="Timeout for detail and episode page requests.",
    )
    http_user_agent: str = Field(
        default="vodhub/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    cache: CacheConfig = Field(default_factory=CacheConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)

    @field_validator("http_search_timeout_seconds", "http_detail_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http timeouts must be > 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "search_timeout_seconds": self.http_search_timeout_seconds,
                "detail_timeout_seconds": self.http_detail_timeout_seconds,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "cache": {
                "backend": self.cache.backend,
                "dir": str(self.cache.directory),
                "ttl_seconds": self.cache.ttl_seconds,
            },
            "search": self.search.model_dump(),
            "providers": {
                "file": str(self.providers.file) if self.providers.file else None,
                "sources": [s.model_dump() for s in self.providers.sources],
            },
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read VODHUB_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - VODHUB_LOG_LEVEL
    - VODHUB_CACHE_BACKEND
    - VODHUB_SEARCH_MAX_PAGES
    - VODHUB_PROVIDERS_FILE
    """

    model_config = SettingsConfigDict(
        env_prefix="VODHUB_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_search_timeout_seconds: Optional[float] = None
    http_detail_timeout_seconds: Optional[float] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cache_backend: Optional[CacheBackend] = None
    cache_dir: Optional[Path] = None
    cache_ttl_seconds: Optional[int] = None

    search_max_pages: Optional[int] = None
    search_fluid: Optional[bool] = None

    providers_file: Optional[Path] = None

    @field_validator("cache_dir", "providers_file", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
