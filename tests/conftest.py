from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from db import create_db_engine
from domain.engine import StatsEngine

FIXED_NOW = datetime(2026, 6, 1, 12, 0, 0)


@pytest.fixture
def stats_engine(tmp_path: Path) -> StatsEngine:
    engine = StatsEngine(
        create_db_engine(f"sqlite:///{tmp_path / 'goa_stats.db'}"),
        clock=lambda: FIXED_NOW,
    )
    engine.initialize()
    return engine
