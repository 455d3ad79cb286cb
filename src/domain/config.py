"""Load engine configuration from a TOML file."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any
import tomllib

from db import DEFAULT_DB_URL
from domain.ratings.calculator import RatingParameters

ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = ROOT_DIR / "configs" / "engine.toml"


@dataclass(frozen=True)
class EngineConfig:
    """Engine-wide settings; rating parameters are fixed for every replay."""

    file_path: Path | None
    db_url: str = DEFAULT_DB_URL
    rating: RatingParameters = field(default_factory=RatingParameters)
    min_relationship_games: int = 1
    migration_timeout_seconds: float = 30.0
    hero_catalog_path: Path | None = None

    def with_db_url(self, db_url: str) -> EngineConfig:
        if not db_url.strip():
            raise ValueError("db_url must not be empty")
        return replace(self, db_url=db_url.strip())

    def as_config_json(self) -> dict[str, Any]:
        return {
            "db_url": self.db_url,
            "initial_mu": self.rating.initial_mu,
            "initial_sigma": self.rating.initial_sigma,
            "beta": self.rating.beta,
            "kappa": self.rating.kappa,
            "tau": self.rating.tau,
            "limit_sigma": self.rating.limit_sigma,
            "balance": self.rating.balance,
            "ordinal_z": self.rating.ordinal_z,
            "min_relationship_games": self.min_relationship_games,
            "migration_timeout_seconds": self.migration_timeout_seconds,
            "hero_catalog_path": None if self.hero_catalog_path is None else str(self.hero_catalog_path),
        }


def load_engine_config(file_path: Path = DEFAULT_CONFIG_PATH) -> EngineConfig:
    """Load and validate one engine TOML config file."""
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")
    if not file_path.is_file():
        raise ValueError(f"Config path is not a file: {file_path}")

    with file_path.open("rb") as file:
        raw = tomllib.load(file)
    return parse_engine_config(raw, file_path)


def _parse_bool(value: Any, *, file_path: Path, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in ("true", "1", "yes", "on"):
            return True
        if normalized in ("false", "0", "no", "off"):
            return False
    raise ValueError(f"{file_path}: [rating].{key} must be a boolean")


def parse_engine_config(raw: dict[str, Any], file_path: Path) -> EngineConfig:
    database_raw = raw.get("database", {})
    rating_raw = raw.get("rating", {})
    analytics_raw = raw.get("analytics", {})
    migration_raw = raw.get("migration", {})
    heroes_raw = raw.get("heroes", {})

    db_url = str(database_raw.get("url", DEFAULT_DB_URL)).strip()
    if not db_url:
        raise ValueError(f"{file_path}: [database].url must not be empty")

    rating = RatingParameters(
        initial_mu=float(rating_raw.get("initial_mu", 25.0)),
        initial_sigma=float(rating_raw.get("initial_sigma", 25.0 / 3.0)),
        beta=float(rating_raw.get("beta", 25.0 / 6.0)),
        kappa=float(rating_raw.get("kappa", 0.0001)),
        tau=float(rating_raw.get("tau", 25.0 / 300.0)),
        limit_sigma=_parse_bool(rating_raw.get("limit_sigma", False), file_path=file_path, key="limit_sigma"),
        balance=_parse_bool(rating_raw.get("balance", False), file_path=file_path, key="balance"),
        ordinal_z=float(rating_raw.get("ordinal_z", 3.0)),
    )
    _validate_rating(file_path=file_path, parameters=rating)

    min_relationship_games = int(analytics_raw.get("min_relationship_games", 1))
    if min_relationship_games < 1:
        raise ValueError(f"{file_path}: [analytics].min_relationship_games must be >= 1")

    timeout_seconds = float(migration_raw.get("timeout_seconds", 30.0))
    if timeout_seconds <= 0.0:
        raise ValueError(f"{file_path}: [migration].timeout_seconds must be > 0")

    catalog_value = heroes_raw.get("catalog")
    hero_catalog_path = None
    if catalog_value is not None:
        hero_catalog_path = Path(str(catalog_value))
        if not hero_catalog_path.is_absolute():
            hero_catalog_path = file_path.parent / hero_catalog_path

    return EngineConfig(
        file_path=file_path,
        db_url=db_url,
        rating=rating,
        min_relationship_games=min_relationship_games,
        migration_timeout_seconds=timeout_seconds,
        hero_catalog_path=hero_catalog_path,
    )


def _validate_rating(*, file_path: Path, parameters: RatingParameters) -> None:
    if parameters.initial_mu <= 0.0:
        raise ValueError(f"{file_path}: [rating].initial_mu must be > 0")
    if parameters.initial_sigma <= 0.0:
        raise ValueError(f"{file_path}: [rating].initial_sigma must be > 0")
    if parameters.beta <= 0.0:
        raise ValueError(f"{file_path}: [rating].beta must be > 0")
    if parameters.kappa <= 0.0:
        raise ValueError(f"{file_path}: [rating].kappa must be > 0")
    if parameters.tau <= 0.0:
        raise ValueError(f"{file_path}: [rating].tau must be > 0")
    if parameters.ordinal_z <= 0.0:
        raise ValueError(f"{file_path}: [rating].ordinal_z must be > 0")


__all__ = ["DEFAULT_CONFIG_PATH", "EngineConfig", "load_engine_config", "parse_engine_config"]
