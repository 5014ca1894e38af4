from .aggregation import (
    ALL,
    AggregationGroup,
    FilterOption,
    FilterOptions,
    FilterState,
    GroupStats,
    YearOrder,
)
from .cache import CACHE_STATUSES, CacheEntry, CacheStatus
from .errors import (
    ChallengeDetected,
    DetailResolutionFailed,
    MalformedResponse,
    NetworkError,
    NetworkTimeout,
    ProviderError,
    ProviderNotFoundError,
    RegistryError,
    UnsupportedProviderKind,
    UpstreamEmpty,
    UpstreamForbidden,
)
from .events import (
    CompleteEvent,
    SourceErrorEvent,
    SourceResultEvent,
    StartEvent,
    StreamEvent,
    TerminalEvent,
    is_terminal,
)
from .media import (
    UNKNOWN_YEAR,
    CandidateResult,
    MediaDetail,
    ProviderConfig,
    ProviderKind,
)

__all__ = [
    "ALL",
    "CACHE_STATUSES",
    "UNKNOWN_YEAR",
    "AggregationGroup",
    "CacheEntry",
    "CacheStatus",
    "CandidateResult",
    "ChallengeDetected",
    "CompleteEvent",
    "DetailResolutionFailed",
    "FilterOption",
    "FilterOptions",
    "FilterState",
    "GroupStats",
    "MalformedResponse",
    "MediaDetail",
    "NetworkError",
    "NetworkTimeout",
    "ProviderConfig",
    "ProviderError",
    "ProviderKind",
    "ProviderNotFoundError",
    "RegistryError",
    "SourceErrorEvent",
    "SourceResultEvent",
    "StartEvent",
    "StreamEvent",
    "TerminalEvent",
    "UnsupportedProviderKind",
    "UpstreamEmpty",
    "UpstreamForbidden",
    "YearOrder",
    "is_terminal",
]
