"""Provider registry implementations."""

from .yaml_registry import YamlProviderRegistry

__all__ = ["YamlProviderRegistry"]
