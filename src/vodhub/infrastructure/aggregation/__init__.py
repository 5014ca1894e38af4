"""Pure grouping and ordering functions used by the aggregation engine."""

from .grouping import (
    compute_group_stats,
    filter_sources_for_playback,
    group_results,
    normalize_title,
)
from .sorter import (
    ResultSorter,
    build_filter_options,
    compare_year,
    filter_groups,
    filter_results,
    sort_batch_for_no_order,
)

__all__ = [
    "ResultSorter",
    "build_filter_options",
    "compare_year",
    "compute_group_stats",
    "filter_groups",
    "filter_results",
    "filter_sources_for_playback",
    "group_results",
    "normalize_title",
    "sort_batch_for_no_order",
]
