"""
Pytest configuration for effectrun tests.

Provides a Fetch effect type with a synchronous performer, and a fixture that
captures loguru output.
"""

from collections.abc import Iterator

import pytest
from loguru import logger

from effectrun import DispatchTable, EffectType, define


@pytest.fixture
def fetch_type() -> EffectType:
    """``Fetch(url)`` effect type."""

    def init_fetch(self, url):
        self.url = url

    return define("Fetch", init_fetch)


@pytest.fixture
def fetch_table(fetch_type: EffectType) -> DispatchTable:
    """Table whose Fetch performer resolves synchronously to ``"data:" + url``."""
    return DispatchTable([(fetch_type, lambda effect: "data:" + effect.url)])


@pytest.fixture
def loguru_messages() -> Iterator[list[str]]:
    """Collect formatted loguru messages emitted during the test."""
    messages: list[str] = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{level}|{message}")
    try:
        yield messages
    finally:
        logger.remove(handler_id)
