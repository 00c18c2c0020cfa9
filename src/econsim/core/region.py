"""
Region state and the per-region economy aggregation.

A Region is owned by the simulation context. External callers only ever see
``RegionSnapshot`` copies, taken at turn boundaries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from econsim.core.config import SimulationConfig
from econsim.core.ledger import ResourceLedger
from econsim.core.resources import ResourceRegistry
from econsim.core.scenario import RegionSpec


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class Infrastructure:
    """Infrastructure of a region. Level only rises through ``upgrade``."""
    type: str = "basic"
    level: int = 1
    maintenance_per_level: float = 0.5

    @property
    def maintenance_cost(self) -> int:
        return round(self.level * self.maintenance_per_level)

    def upgrade(self) -> int:
        self.level += 1
        return self.level


@dataclass
class Region:
    """Mutable state of one geographic economic unit."""
    name: str
    ledger: ResourceLedger
    wealth: int = 0
    production: int = 0
    labor: int = 0
    satisfaction: float = 1.0
    nation: str | None = None
    infrastructure: Infrastructure = field(default_factory=Infrastructure)
    position: tuple[float, float] | None = None
    active_recipes: list[str] = field(default_factory=list)
    recipe_progress: dict[str, float] = field(default_factory=dict)
    capital_investment: float = 0.0

    # Reporting only: end-of-turn value minus start-of-turn value
    wealth_delta: int = 0
    production_delta: int = 0

    @classmethod
    def from_spec(
        cls,
        spec: RegionSpec,
        registry: ResourceRegistry,
        config: SimulationConfig,
    ) -> Region:
        ledger = ResourceLedger(
            registry,
            initial=spec.initial_resources,
            base_production=spec.base_production,
            consumption_per_capita=spec.consumption_per_capita,
            terrain_modifiers=spec.terrain_modifiers,
        )
        return cls(
            name=spec.name,
            ledger=ledger,
            wealth=spec.wealth,
            production=spec.production,
            labor=spec.labor,
            satisfaction=spec.satisfaction,
            nation=spec.nation,
            infrastructure=Infrastructure(
                type=spec.infrastructure_type,
                level=spec.infrastructure_level,
                maintenance_per_level=config.economy_config["maintenance_per_level"],
            ),
            position=spec.position,
            active_recipes=list(spec.active_recipes),
        )

    def set_production(self, value: int) -> None:
        """Write this turn's derived production output."""
        self.production = max(0, int(value))

    def snapshot(self) -> RegionSnapshot:
        return RegionSnapshot(
            name=self.name,
            nation=self.nation,
            wealth=self.wealth,
            production=self.production,
            labor=self.labor,
            satisfaction=self.satisfaction,
            infrastructure_type=self.infrastructure.type,
            infrastructure_level=self.infrastructure.level,
            capital_investment=self.capital_investment,
            wealth_delta=self.wealth_delta,
            production_delta=self.production_delta,
            resources=self.ledger.get_all(),
            production_rates=self.ledger.get_production_rates(),
            consumption_rates=self.ledger.get_consumption_rates(),
            active_recipes=tuple(self.active_recipes),
        )


@dataclass(frozen=True)
class RegionSnapshot:
    """Read-only copy of a region's state at a turn boundary."""
    name: str
    nation: str | None
    wealth: int
    production: int
    labor: int
    satisfaction: float
    infrastructure_type: str
    infrastructure_level: int
    capital_investment: float
    wealth_delta: int
    production_delta: int
    resources: dict[str, float]
    production_rates: dict[str, float]
    consumption_rates: dict[str, float]
    active_recipes: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "nation": self.nation,
            "wealth": self.wealth,
            "production": self.production,
            "labor": self.labor,
            "satisfaction": round(self.satisfaction, 4),
            "infrastructure_type": self.infrastructure_type,
            "infrastructure_level": self.infrastructure_level,
            "capital_investment": round(self.capital_investment, 4),
            "wealth_delta": self.wealth_delta,
            "production_delta": self.production_delta,
            "resources": {k: round(v, 4) for k, v in self.resources.items()},
            "production_rates": {k: round(v, 4) for k, v in self.production_rates.items()},
            "consumption_rates": {k: round(v, 4) for k, v in self.consumption_rates.items()},
            "active_recipes": list(self.active_recipes),
        }


# ---------------------------------------------------------------------------
# Economy aggregation
# ---------------------------------------------------------------------------

@dataclass
class EconomyBreakdown:
    """Components of one region's wealth change for a single turn."""
    base: int = 0
    resource_balance: int = 0
    satisfaction_penalty: int = 0
    reinvestment_bonus: int = 0
    maintenance: int = 0
    fluctuation: int = 0

    @property
    def wealth_change(self) -> int:
        return (
            self.base + self.resource_balance + self.reinvestment_bonus
            - self.satisfaction_penalty - self.maintenance
        )


class RegionEconomy:
    """Aggregates production, resources and satisfaction into wealth."""

    def __init__(self, config: SimulationConfig):
        self.config = config
        self.ec = config.economy_config

    def draw_fluctuation(self, rng: np.random.Generator) -> int:
        """Bounded random change in production, inclusive on both ends."""
        return int(rng.integers(self.ec["fluctuation_min"], self.ec["fluctuation_max"] + 1))

    def breakdown(
        self, region: Region, fluctuation: int, reinvestment: float = 0.0,
    ) -> EconomyBreakdown:
        ec = self.ec
        threshold = ec["satisfaction_penalty_threshold"]
        penalty = 0
        if region.satisfaction < threshold:
            penalty = round((threshold - region.satisfaction) * ec["satisfaction_penalty_scale"])
        return EconomyBreakdown(
            base=region.production * ec["wealth_production_multiplier"],
            resource_balance=round(region.ledger.balance() * ec["resource_balance_weight"]),
            satisfaction_penalty=penalty,
            reinvestment_bonus=round(reinvestment * ec["capital_return"]),
            maintenance=region.infrastructure.maintenance_cost,
            fluctuation=fluctuation,
        )

    def aggregate(
        self, region: Region, fluctuation: int, reinvestment: float = 0.0,
    ) -> EconomyBreakdown:
        """Apply this turn's wealth change and production fluctuation together."""
        parts = self.breakdown(region, fluctuation, reinvestment)
        region.wealth = self._bounded(region.wealth + parts.wealth_change)
        region.production = max(0, region.production + fluctuation)
        return parts

    def apply_cycle(self, region: Region, multiplier: float) -> None:
        region.wealth = self._bounded(round(region.wealth * multiplier))
        region.production = max(0, round(region.production * multiplier))

    def credit(self, region: Region, amount: int) -> None:
        region.wealth = self._bounded(region.wealth + amount)

    def upgrade_cost(self, region: Region) -> int:
        return int(self.ec["upgrade_cost_per_level"] * (region.infrastructure.level + 1))

    def upgrade_infrastructure(self, region: Region) -> bool:
        """Raise infrastructure one level if the region can pay for it."""
        cost = self.upgrade_cost(region)
        if region.wealth < cost:
            return False
        region.wealth -= cost
        region.infrastructure.upgrade()
        return True

    def _bounded(self, wealth: int) -> int:
        limit = int(self.ec["wealth_limit"])
        return int(np.clip(wealth, -limit, limit))
