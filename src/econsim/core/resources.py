"""
Resource definitions, recipes, and the validated resource registry.

Definitions are immutable and loaded once per scenario. Every resource name
that appears in static configuration (baselines, recipes, stocks, per-capita
tables) is checked against the registry at construction time, so a typo is
a ConfigurationError at setup rather than a silent zero at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator

from econsim.core.errors import ConfigurationError


class ResourceCategory(Enum):
    RAW = "raw"
    PROCESSED = "processed"
    ABSTRACT = "abstract"


@dataclass(frozen=True)
class RecipeInput:
    """One input line of a recipe."""
    resource: str
    amount: float
    consumed: bool = True


@dataclass(frozen=True)
class Recipe:
    """
    A rule converting inputs (plus infrastructure prerequisites) into one
    output resource.

    ``production_time`` is the number of producible turns needed before the
    recipe fires once. ``quality_impact`` scales the input-quality bonus when
    ``quality_affects_output`` is set.
    """
    name: str
    output: str
    inputs: tuple[RecipeInput, ...] = ()
    output_amount: float = 1.0
    production_time: int = 1
    required_infrastructure: str | None = None
    min_infrastructure_level: int = 1
    efficiency_multiplier: float = 1.0
    quality_affects_output: bool = False
    quality_impact: float = 0.2

    @classmethod
    def from_dict(cls, d: dict[str, Any] | None, output: str) -> Recipe:
        if not isinstance(d, dict) or not d.get("name"):
            raise ConfigurationError(f"Recipe for {output!r} is missing or unnamed: {d!r}")
        try:
            inputs = tuple(
                RecipeInput(
                    resource=i["resource"],
                    amount=float(i["amount"]),
                    consumed=bool(i.get("consumed", True)),
                )
                for i in d.get("inputs") or []
            )
            return cls(
                name=d["name"],
                output=d.get("output", output),
                inputs=inputs,
                output_amount=float(d.get("output_amount", 1.0)),
                production_time=int(d.get("production_time", 1)),
                required_infrastructure=d.get("required_infrastructure"),
                min_infrastructure_level=int(d.get("min_infrastructure_level", 1)),
                efficiency_multiplier=float(d.get("efficiency_multiplier", 1.0)),
                quality_affects_output=bool(d.get("quality_affects_output", False)),
                quality_impact=float(d.get("quality_impact", 0.2)),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise ConfigurationError(
                f"Malformed recipe {d.get('name')!r} for {output!r}: {exc!r}"
            ) from exc


@dataclass(frozen=True)
class ResourceDefinition:
    """Immutable description of one tradeable resource."""
    name: str
    category: ResourceCategory = ResourceCategory.RAW
    base_value: float = 10.0
    volatility: float = 1.0
    perish_rate: float = 0.0
    transport_factor: float = 1.0
    essential: bool = False
    recipes: tuple[Recipe, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, d: dict[str, Any] | None) -> ResourceDefinition:
        if not isinstance(d, dict) or not d.get("name"):
            raise ConfigurationError(f"Resource definition is missing or unnamed: {d!r}")
        name = d["name"]
        try:
            category = ResourceCategory(d.get("category", "raw"))
        except (ValueError, TypeError):
            raise ConfigurationError(
                f"Resource {name!r} has unknown category {d.get('category')!r}"
            ) from None
        try:
            recipes = tuple(Recipe.from_dict(r, name) for r in d.get("recipes") or [])
            return cls(
                name=name,
                category=category,
                base_value=float(d.get("base_value", 10.0)),
                volatility=float(d.get("volatility", 1.0)),
                perish_rate=float(d.get("perish_rate", 0.0)),
                transport_factor=float(d.get("transport_factor", 1.0)),
                essential=bool(d.get("essential", False)),
                recipes=recipes,
            )
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Malformed resource {name!r}: {exc!r}") from exc

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category.value,
            "base_value": self.base_value,
            "volatility": self.volatility,
            "perish_rate": self.perish_rate,
            "transport_factor": self.transport_factor,
            "essential": self.essential,
            "recipes": [r.name for r in self.recipes],
        }


class ResourceRegistry:
    """Closed, ordered set of resource definitions for one scenario."""

    def __init__(self, definitions: Iterable[ResourceDefinition]):
        self._defs: dict[str, ResourceDefinition] = {}
        self._recipes: dict[str, Recipe] = {}
        for d in definitions:
            if d is None:
                raise ConfigurationError("Null resource definition")
            if d.name in self._defs:
                raise ConfigurationError(f"Duplicate resource definition: {d.name!r}")
            self._defs[d.name] = d
        if not self._defs:
            raise ConfigurationError("At least one resource definition is required")
        for d in self._defs.values():
            self._check_definition(d)
            for r in d.recipes:
                if r.name in self._recipes:
                    raise ConfigurationError(f"Duplicate recipe name: {r.name!r}")
                self._recipes[r.name] = r

    def _check_definition(self, d: ResourceDefinition) -> None:
        if d.base_value <= 0:
            raise ConfigurationError(f"{d.name}: base_value must be positive")
        if d.volatility < 0:
            raise ConfigurationError(f"{d.name}: volatility must be non-negative")
        if not 0.0 <= d.perish_rate <= 1.0:
            raise ConfigurationError(f"{d.name}: perish_rate must be in [0, 1]")
        if not 0.0 < d.transport_factor <= 2.0:
            raise ConfigurationError(f"{d.name}: transport_factor must be in (0, 2]")
        for r in d.recipes:
            self.require(r.output, f"recipe {r.name!r} output")
            for i in r.inputs:
                self.require(i.resource, f"recipe {r.name!r} input")
                if i.amount <= 0:
                    raise ConfigurationError(
                        f"recipe {r.name!r}: input amounts must be positive"
                    )
            if r.production_time < 1 or r.min_infrastructure_level < 1:
                raise ConfigurationError(
                    f"recipe {r.name!r}: production_time and "
                    f"min_infrastructure_level must be >= 1"
                )
            if r.efficiency_multiplier <= 0 or r.output_amount <= 0:
                raise ConfigurationError(
                    f"recipe {r.name!r}: output_amount and efficiency must be positive"
                )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def require(self, name: str, where: str = "configuration") -> ResourceDefinition:
        """Return a definition or raise ConfigurationError (setup-time use)."""
        try:
            return self._defs[name]
        except KeyError:
            raise ConfigurationError(f"Unknown resource {name!r} in {where}") from None

    def get(self, name: str) -> ResourceDefinition | None:
        return self._defs.get(name)

    def get_recipe(self, name: str) -> Recipe | None:
        return self._recipes.get(name)

    def require_recipe(self, name: str, where: str = "configuration") -> Recipe:
        try:
            return self._recipes[name]
        except KeyError:
            raise ConfigurationError(f"Unknown recipe {name!r} in {where}") from None

    @property
    def names(self) -> list[str]:
        return list(self._defs)

    @property
    def essential(self) -> list[ResourceDefinition]:
        return [d for d in self._defs.values() if d.essential]

    def __contains__(self, name: object) -> bool:
        return name in self._defs

    def __iter__(self) -> Iterator[ResourceDefinition]:
        return iter(self._defs.values())

    def __len__(self) -> int:
        return len(self._defs)
