from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Callable

import pytest

from tests._fixtures.library_builder import LibraryBuilder

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=UTC)


@pytest.fixture
def library(tmp_path: Path) -> LibraryBuilder:
    """Provide a throwaway component library rooted at the pytest tmp_path."""
    return LibraryBuilder(tmp_path)


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW
