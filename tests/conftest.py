"""Shared fixtures.

Key counters are process-wide; every test starts from a clean registry.
"""

import pytest

from src.domain.keys import default_registry


@pytest.fixture(autouse=True)
def _reset_key_registry():
    default_registry.reset()
    yield
    default_registry.reset()
