"""Process setup shared by the CLI scripts."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from domain.common import DateRange
from domain.config import DEFAULT_CONFIG_PATH, load_engine_config
from domain.engine import StatsEngine

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "WARNING") -> None:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"unknown log level: {level}")
    logging.basicConfig(level=numeric, format=LOG_FORMAT)


def open_engine(
    config_path: Path = DEFAULT_CONFIG_PATH,
    *,
    db_url: str | None = None,
    initialize: bool = True,
) -> StatsEngine:
    """Build a StatsEngine from a config file; ``db_url`` overrides ``[database].url``."""
    config = load_engine_config(config_path)
    if db_url is not None:
        config = config.with_db_url(db_url)
    engine = StatsEngine.from_config(config)
    if initialize:
        engine.initialize()
    return engine


def parse_date_range(since: str | None, until: str | None) -> DateRange | None:
    """Build a DateRange from ISO-8601 strings; a bare date in ``until`` covers that whole day."""
    if since is None and until is None:
        return None
    start = datetime.fromisoformat(since) if since is not None else None
    end = None
    if until is not None:
        end = datetime.fromisoformat(until)
        if len(until) == 10:
            end = end.replace(hour=23, minute=59, second=59, microsecond=999999)
    return DateRange(start=start, end=end)


__all__ = ["configure_logging", "open_engine", "parse_date_range"]
