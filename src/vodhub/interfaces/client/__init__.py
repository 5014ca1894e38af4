from .sse_client import SseEventStream, parse_event

__all__ = ["SseEventStream", "parse_event"]
