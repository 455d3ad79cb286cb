"""Tests for TOML-based engine config and hero catalog loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from domain.config import DEFAULT_CONFIG_PATH, load_engine_config
from domain.heroes import load_hero_catalog


def test_load_engine_config_from_file(tmp_path: Path) -> None:
    config_path = tmp_path / "engine.toml"
    config_path.write_text(
        """
[database]
url = "sqlite:///league.db"

[rating]
initial_mu = 30.0
initial_sigma = 7.5
beta = 4.0
kappa = 0.0002
tau = 0.07
limit_sigma = true
balance = "false"
ordinal_z = 2.5

[analytics]
min_relationship_games = 3

[migration]
timeout_seconds = 5

[heroes]
catalog = "heroes.toml"
""".strip()
    )

    config = load_engine_config(config_path)

    assert config.db_url == "sqlite:///league.db"
    assert config.rating.initial_mu == pytest.approx(30.0)
    assert config.rating.tau == pytest.approx(0.07)
    assert config.rating.limit_sigma is True
    assert config.rating.balance is False
    assert config.rating.ordinal_z == pytest.approx(2.5)
    assert config.min_relationship_games == 3
    assert config.migration_timeout_seconds == pytest.approx(5.0)
    assert config.hero_catalog_path == tmp_path / "heroes.toml"
    assert config.as_config_json()["hero_catalog_path"] == str(tmp_path / "heroes.toml")


def test_defaults_apply_when_sections_omitted(tmp_path: Path) -> None:
    config_path = tmp_path / "engine.toml"
    config_path.write_text("[rating]\n")

    config = load_engine_config(config_path)

    assert config.db_url == "sqlite:///goa_stats.db"
    assert config.rating.initial_sigma == pytest.approx(25.0 / 3.0)
    assert config.min_relationship_games == 1
    assert config.hero_catalog_path is None
    assert config.with_db_url(" sqlite:///other.db ").db_url == "sqlite:///other.db"


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("[rating]\nbeta = 0.0", r"\[rating\].beta must be > 0"),
        ("[rating]\nlimit_sigma = \"maybe\"", r"limit_sigma must be a boolean"),
        ("[analytics]\nmin_relationship_games = 0", r"min_relationship_games must be >= 1"),
        ("[migration]\ntimeout_seconds = 0", r"timeout_seconds must be > 0"),
        ("[database]\nurl = \"  \"", r"\[database\].url must not be empty"),
    ],
)
def test_invalid_values_raise_validation_error(tmp_path: Path, body: str, message: str) -> None:
    config_path = tmp_path / "invalid.toml"
    config_path.write_text(body)

    with pytest.raises(ValueError, match=message):
        load_engine_config(config_path)


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_engine_config(tmp_path / "absent.toml")


def test_shipped_config_and_catalog_load() -> None:
    config = load_engine_config(DEFAULT_CONFIG_PATH)
    assert config.hero_catalog_path is not None

    catalog = load_hero_catalog(config.hero_catalog_path)
    brogan = catalog.by_name("Brogan")
    assert brogan is not None
    assert catalog.by_id(brogan.id) == brogan
    assert len(catalog) > 1


def test_catalog_rejects_duplicates_and_missing_names(tmp_path: Path) -> None:
    duplicate = tmp_path / "duplicate.toml"
    duplicate.write_text(
        """
[[heroes]]
id = 1
name = "Brogan"

[[heroes]]
id = 2
name = "Brogan"
""".strip()
    )
    nameless = tmp_path / "nameless.toml"
    nameless.write_text("[[heroes]]\nid = 3\n")

    with pytest.raises(ValueError, match="Duplicate hero name"):
        load_hero_catalog(duplicate)
    with pytest.raises(ValueError, match=r"heroes\[0\].name is required"):
        load_hero_catalog(nameless)
