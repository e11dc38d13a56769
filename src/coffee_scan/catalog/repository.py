"""Packaged roaster and coffee catalog."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from importlib.resources import files


@dataclass(frozen=True)
class Roaster:
    id: int
    name: str
    domain: str | None = None
    location: str | None = None
    verified: bool = False
    aliases: tuple[str, ...] = ()

    @property
    def website(self) -> str | None:
        return f"https://{self.domain}" if self.domain else None


@dataclass(frozen=True)
class Coffee:
    id: int
    roaster_id: int
    name: str
    origin: str | None = None
    roast_level: str | None = None
    processing_method: str | None = None
    flavor_notes: tuple[str, ...] = field(default_factory=tuple)
    price: float | None = None


class CatalogRepository:
    """Loads roasters and coffees from packaged JSON data."""

    def __init__(self, roasters: list[Roaster] | None = None, coffees: list[Coffee] | None = None):
        self.roasters: list[Roaster] = roasters if roasters is not None else self._load_roasters()
        self.coffees: list[Coffee] = coffees if coffees is not None else self._load_coffees()
        self._roasters_by_id = {roaster.id: roaster for roaster in self.roasters}

    def roaster(self, roaster_id: int) -> Roaster | None:
        return self._roasters_by_id.get(roaster_id)

    @staticmethod
    def _read(name: str) -> list[dict]:
        path = files("coffee_scan.catalog.data").joinpath(name)
        return json.loads(path.read_text(encoding="utf-8"))

    def _load_roasters(self) -> list[Roaster]:
        return [
            Roaster(**{**item, "aliases": tuple(item.get("aliases", []))})
            for item in self._read("roasters.json")
        ]

    def _load_coffees(self) -> list[Coffee]:
        return [
            Coffee(**{**item, "flavor_notes": tuple(item.get("flavor_notes", []))})
            for item in self._read("coffees.json")
        ]


@lru_cache(maxsize=1)
def default_repository() -> CatalogRepository:
    return CatalogRepository()
