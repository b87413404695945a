"""
Shared test fixtures for typed-csv tests.
"""

from __future__ import annotations

import pytest

from typed_csv.registry import DecoderRegistry, build_default_registry

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def registry() -> DecoderRegistry:
    """A fresh, writable registry with the built-in decoders and rules."""
    return build_default_registry()


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (end-to-end document decoding)",
    )
