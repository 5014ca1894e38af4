"""Tests for the structlog/uvicorn logging dictConfig."""

from __future__ import annotations

import structlog

from vodhub.infrastructure.config import AppConfig
from vodhub.infrastructure.logging.setup import build_logging_config


def test_json_renderer_in_prod() -> None:
    cfg = build_logging_config(AppConfig(environment="prod"))

    processors = cfg["formatters"]["structlog"]["processors"]
    assert isinstance(processors[-1], structlog.processors.JSONRenderer)


def test_console_renderer_by_default() -> None:
    cfg = build_logging_config(AppConfig())

    processors = cfg["formatters"]["structlog"]["processors"]
    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)


def test_level_applied_except_httpx() -> None:
    cfg = build_logging_config(AppConfig(log_level="DEBUG"))

    assert cfg["root"]["level"] == "DEBUG"
    assert cfg["loggers"]["uvicorn"]["level"] == "DEBUG"
    assert cfg["loggers"]["httpx"]["level"] == "WARNING"
    assert all(h["formatter"] == "structlog" for h in cfg["handlers"].values())


def test_base_config_not_mutated() -> None:
    build_logging_config(AppConfig(log_level="ERROR"))
    cfg = build_logging_config(AppConfig(log_level="INFO"))

    assert cfg["loggers"]["uvicorn"]["level"] == "INFO"
