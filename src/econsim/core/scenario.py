"""
Static scenario configuration: resource definitions, initial regions and
(optionally) a region adjacency graph.

``Scenario.from_dict`` is the single entry point for collaborators that
supply map data. Missing or null data is a ConfigurationError and the
simulation does not start.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from econsim.core.errors import ConfigurationError
from econsim.core.resources import ResourceDefinition, ResourceRegistry

_REQUIRED_REGION_FIELDS = ("name", "wealth", "production", "labor")


@dataclass
class RegionSpec:
    """Initial state of one region."""
    name: str
    wealth: int
    production: int
    labor: int
    nation: str | None = None
    infrastructure_level: int = 1
    infrastructure_type: str = "basic"
    satisfaction: float = 1.0
    position: tuple[float, float] | None = None
    terrain_modifiers: dict[str, float] = field(default_factory=dict)
    initial_resources: dict[str, float] = field(default_factory=dict)
    base_production: dict[str, float] = field(default_factory=dict)
    consumption_per_capita: dict[str, float] = field(default_factory=dict)
    active_recipes: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict[str, Any] | None) -> RegionSpec:
        if not isinstance(d, dict) or not d:
            raise ConfigurationError(f"Null or malformed region entry in scenario: {d!r}")
        missing = [k for k in _REQUIRED_REGION_FIELDS if d.get(k) is None]
        if missing:
            raise ConfigurationError(
                f"Region {d.get('name')!r} is missing required fields: {missing}"
            )
        try:
            position = d.get("position")
            if position is not None:
                if len(position) != 2:
                    raise ConfigurationError(
                        f"Region {d['name']!r}: position must be an (x, y) pair"
                    )
                position = (float(position[0]), float(position[1]))
            return cls(
                name=str(d["name"]),
                wealth=int(d["wealth"]),
                production=int(d["production"]),
                labor=int(d["labor"]),
                nation=d.get("nation"),
                infrastructure_level=int(d.get("infrastructure_level", 1)),
                infrastructure_type=d.get("infrastructure_type", "basic"),
                satisfaction=float(d.get("satisfaction", 1.0)),
                position=position,
                terrain_modifiers=_float_table(d.get("terrain_modifiers")),
                initial_resources=_float_table(d.get("initial_resources")),
                base_production=_float_table(d.get("base_production")),
                consumption_per_capita=_float_table(d.get("consumption_per_capita")),
                active_recipes=list(d.get("active_recipes") or []),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise ConfigurationError(
                f"Malformed region {d.get('name')!r}: {exc!r}"
            ) from exc


def _float_table(table: dict[str, Any] | None) -> dict[str, float]:
    return {str(k): float(v) for k, v in (table or {}).items()}


@dataclass
class Scenario:
    """Everything needed to build a simulation besides the tunable constants."""
    resources: list[ResourceDefinition]
    regions: list[RegionSpec]
    adjacency: dict[str, list[str]] | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any] | None) -> Scenario:
        if not isinstance(d, dict) or not d:
            raise ConfigurationError("Scenario data is missing")
        if not d.get("resources"):
            raise ConfigurationError("Scenario has no resource definitions")
        if not d.get("regions"):
            raise ConfigurationError("Scenario has no regions")
        try:
            resources = [ResourceDefinition.from_dict(r) for r in d["resources"]]
            regions = [RegionSpec.from_dict(r) for r in d["regions"]]
            adjacency = d.get("adjacency")
            if adjacency is not None:
                adjacency = {k: list(v) for k, v in adjacency.items()}
        except (TypeError, AttributeError) as exc:
            raise ConfigurationError(f"Malformed scenario: {exc!r}") from exc
        return cls(resources=resources, regions=regions, adjacency=adjacency)

    def build_registry(self) -> ResourceRegistry:
        """Build the resource registry and cross-check every region against it."""
        registry = ResourceRegistry(self.resources)
        seen: set[str] = set()
        for spec in self.regions:
            if spec.name in seen:
                raise ConfigurationError(f"Duplicate region name: {spec.name!r}")
            seen.add(spec.name)
            if spec.infrastructure_level < 1:
                raise ConfigurationError(
                    f"Region {spec.name!r}: infrastructure_level must be >= 1"
                )
            if spec.labor < 0:
                raise ConfigurationError(f"Region {spec.name!r}: labor must be >= 0")
            if not 0.0 <= spec.satisfaction <= 1.0:
                raise ConfigurationError(
                    f"Region {spec.name!r}: satisfaction must be in [0, 1]"
                )
            where = f"region {spec.name!r}"
            for table in (spec.initial_resources, spec.base_production,
                          spec.consumption_per_capita):
                for name in table:
                    registry.require(name, where)
            for name, amount in spec.initial_resources.items():
                if amount < 0:
                    raise ConfigurationError(
                        f"{where}: initial stock of {name!r} is negative"
                    )
            for recipe_name in spec.active_recipes:
                registry.require_recipe(recipe_name, where)
        if self.adjacency is not None:
            for a, neighbours in self.adjacency.items():
                for name in (a, *neighbours):
                    if name not in seen:
                        raise ConfigurationError(
                            f"Adjacency references unknown region {name!r}"
                        )
        return registry
