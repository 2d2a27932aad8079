"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and makes fixtures
available to all test modules.
"""

import sys
from pathlib import Path

import pytest

# Add project root to Python path so the top-level modules import
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from fetcher_config import Config  # noqa: E402


@pytest.fixture
def make_config(tmp_path):
    """Build a Config rooted in the test's temporary directory."""

    def _make(**overrides):
        values = {
            "api_key": "key",
            "api_secret": "secret",
            "user": "host@example.com",
            "output_dir": str(tmp_path / "recordings"),
        }
        values.update(overrides)
        return Config(**values)

    return _make
