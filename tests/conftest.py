"""
Shared pytest configuration and fixtures for the exporter tests.

This file provides common fixtures and configuration used across all test
types in the hexagonal architecture test suite.
"""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from fmg_exporter.core.options import ExportOptions
from fmg_exporter.core.registry import create_default_registry
from tests.fixtures.fake_generation import FakeGenerationSession, FakeLoader, FakeSessionManager


# Fake browser side
@pytest.fixture
def generation():
    """Fake ready generator page over a small fixed map."""
    return FakeGenerationSession()


@pytest.fixture
def default_options():
    return ExportOptions()


@pytest.fixture
def session_manager():
    return FakeSessionManager()


@pytest.fixture
def loader():
    return FakeLoader()


@pytest.fixture
def registry():
    return create_default_registry()


@pytest.fixture
def mock_progress_port():
    """Mock progress reporting port."""
    mock = Mock()
    mock.is_progress_enabled.return_value = True
    return mock


# Generator checkout on disk
@pytest.fixture
def generator_root(tmp_path):
    """Minimal generator directory served by the static server."""
    root = tmp_path / "fmg"
    (root / "libs").mkdir(parents=True)
    (root / "index.html").write_text("<!doctype html><title>FMG</title>", encoding="utf-8")
    (root / "main.js").write_text("var seed = '1';", encoding="utf-8")
    (root / "libs" / "lib.mjs").write_text("export {};", encoding="utf-8")
    (root / "style.css").write_text("body{}", encoding="utf-8")
    (root / "data.bin").write_bytes(b"\x00\x01\x02")
    return root


# Pytest Configuration Hooks
def pytest_configure(config):
    """Configure pytest with custom settings."""
    markers = [
        "unit: Unit tests (fast, isolated)",
        "integration: Integration tests (slower, multiple components)",
        "contract: Port contract compliance tests",
    ]

    for marker in markers:
        config.addinivalue_line("markers", marker)


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # Auto-mark tests based on file path
        path = str(item.path)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        elif "contract" in path:
            item.add_marker(pytest.mark.contract)
