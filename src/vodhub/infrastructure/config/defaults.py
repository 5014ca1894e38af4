"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "vodhub",
    "environment": "dev",
    "http": {
        "search_timeout_seconds": 8.0,
        "detail_timeout_seconds": 10.0,
        "user_agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cache": {
        "backend": "memory",
        "dir": "./.cache/vodhub",
        "ttl_seconds": 7200,
    },
    "search": {
        "max_pages": 5,
        "fluid_search": True,
        "flush_delay_ms": 80,
        "challenge_retry_delay_seconds": 1.5,
        "episode_concurrency": 4,
        "history_limit": 20,
    },
    "providers": {
        "file": None,
        "sources": [],
    },
}
