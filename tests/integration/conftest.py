"""Shared fixtures for integration tests.

These tests use real infrastructure components (config loader, YAML
provider registry, DiskcacheAdapter) against files under tmp_path.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml


@pytest.fixture()
def write_yaml(tmp_path: Path) -> Callable[[str, Any], Path]:
    """Write *data* as YAML to ``tmp_path / name`` and return the path."""

    def _write(name: str, data: Any) -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")
        return path

    return _write
