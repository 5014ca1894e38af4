from __future__ import annotations

from .load import load_config
from .schema import AppConfig, EnvOverrides, ProviderEntry, SearchConfig

__all__ = ["AppConfig", "EnvOverrides", "ProviderEntry", "SearchConfig", "load_config"]
