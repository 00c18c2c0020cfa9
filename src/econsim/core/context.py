"""
Simulation context: the one explicitly owned bundle of mutable state.

Every phase function receives the context instead of reaching for module
globals. Building a context validates the config and scenario; a
ConfigurationError here means the simulation does not start.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from econsim.core.config import SimulationConfig
from econsim.core.cycle import EconomicCycle
from econsim.core.market import Market
from econsim.core.region import Region
from econsim.core.resources import ResourceRegistry
from econsim.core.scenario import Scenario
from econsim.core.spatial import AdjacencyIndex, CoordinateIndex, SpatialIndex
from econsim.core.trade import TradeHistory


@dataclass
class SimulationContext:
    config: SimulationConfig
    registry: ResourceRegistry
    regions: dict[str, Region]
    market: Market
    spatial: SpatialIndex
    cycle: EconomicCycle
    trade_history: TradeHistory
    rng: np.random.Generator
    turn: int = 0
    recipe_rates: dict[str, dict[str, float]] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        config: SimulationConfig,
        scenario: Scenario,
        rng: np.random.Generator | None = None,
    ) -> SimulationContext:
        config.validate()
        registry = scenario.build_registry()
        regions = {
            spec.name: Region.from_spec(spec, registry, config)
            for spec in scenario.regions
        }
        if scenario.adjacency is not None:
            spatial: SpatialIndex = AdjacencyIndex(scenario.adjacency)
        else:
            spatial = CoordinateIndex(regions.values())
        return cls(
            config=config,
            registry=registry,
            regions=regions,
            market=Market(config, registry),
            spatial=spatial,
            cycle=EconomicCycle(config),
            trade_history=TradeHistory(config.trade_config["history_limit"]),
            rng=rng if rng is not None else np.random.default_rng(config.random_seed),
        )

    def region_names(self) -> list[str]:
        """Region names in processing order."""
        return sorted(self.regions)
