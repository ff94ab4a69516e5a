"""Shared pytest fixtures for the boardfix test-suite."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo logging configuration applied by CLI invocations."""

    yield
    structlog.reset_defaults()
