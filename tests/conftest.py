"""
tests.conftest

Shared fixtures.

Responsibilities:
- Settings factory pointing at a per-test SQLite database.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from edge_gate.settings import Settings


@pytest.fixture
def make_settings(tmp_path: Path):
    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "env": "test",
            "database_url": f"sqlite+aiosqlite:///{tmp_path / 'gate.db'}",
            "auth_secret": "s3cret",
            "auth_mode": "multi_user",
            "jwt_secret": "jwt-test-secret",
        }
        values.update(overrides)
        return Settings(**values)

    return _make
