"""Read-only hero catalog (name -> roles, complexity, expansion)."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
import tomllib


@dataclass(frozen=True)
class HeroInfo:
    id: int
    name: str
    roles: tuple[str, ...]
    complexity: int
    expansion: str


class HeroCatalog:
    """Immutable lookup injected into analytics; keyed by hero name."""

    def __init__(self, heroes: Iterable[HeroInfo] = ()) -> None:
        by_name: dict[str, HeroInfo] = {}
        by_id: dict[int, HeroInfo] = {}
        for hero in heroes:
            if hero.name in by_name:
                raise ValueError(f"Duplicate hero name in catalog: {hero.name}")
            if hero.id in by_id:
                raise ValueError(f"Duplicate hero id in catalog: {hero.id}")
            by_name[hero.name] = hero
            by_id[hero.id] = hero
        self._by_name: Mapping[str, HeroInfo] = MappingProxyType(by_name)
        self._by_id: Mapping[int, HeroInfo] = MappingProxyType(by_id)

    def __len__(self) -> int:
        return len(self._by_name)

    def __iter__(self):
        return iter(self._by_name.values())

    def by_name(self, name: str) -> HeroInfo | None:
        return self._by_name.get(name)

    def by_id(self, hero_id: int) -> HeroInfo | None:
        return self._by_id.get(hero_id)


EMPTY_CATALOG = HeroCatalog()


def load_hero_catalog(file_path: Path) -> HeroCatalog:
    """Load ``[[heroes]]`` tables from a TOML file."""
    if not file_path.exists():
        raise FileNotFoundError(f"Hero catalog not found: {file_path}")

    with file_path.open("rb") as file:
        raw = tomllib.load(file)

    heroes: list[HeroInfo] = []
    for index, entry in enumerate(raw.get("heroes", [])):
        name = str(entry.get("name", "")).strip()
        if not name:
            raise ValueError(f"{file_path}: heroes[{index}].name is required")
        if "id" not in entry:
            raise ValueError(f"{file_path}: heroes[{index}].id is required")
        complexity = int(entry.get("complexity", 1))
        if complexity < 1:
            raise ValueError(f"{file_path}: heroes[{index}].complexity must be >= 1")
        heroes.append(
            HeroInfo(
                id=int(entry["id"]),
                name=name,
                roles=tuple(str(role) for role in entry.get("roles", [])),
                complexity=complexity,
                expansion=str(entry.get("expansion", "Unknown")),
            )
        )
    return HeroCatalog(heroes)


__all__ = ["EMPTY_CATALOG", "HeroCatalog", "HeroInfo", "load_hero_catalog"]
