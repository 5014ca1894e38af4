from .media_detail import MediaDetailUseCase
from .search_aggregation import AggregationEngine
from .search_dispatch import SearchDispatchUseCase

__all__ = ["AggregationEngine", "MediaDetailUseCase", "SearchDispatchUseCase"]
