"""
Population and satisfaction model.

Satisfaction is the mean, over essential resources with a positive
requirement, of min(1, available / required). Low satisfaction sheds labor;
high satisfaction grows labor and credits a small capital reinvestment.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from econsim.core.config import SimulationConfig
from econsim.core.region import Region
from econsim.core.resources import ResourceRegistry


@dataclass
class PopulationOutcome:
    """Result of one region's labor update."""
    satisfaction: float
    labor_change: int = 0
    reinvestment: float = 0.0


class PopulationModel:

    def __init__(self, config: SimulationConfig, registry: ResourceRegistry):
        self.config = config
        self.registry = registry
        self.pop = config.population_config

    def compute_satisfaction(self, region: Region) -> float | None:
        """Needs satisfaction, or None if no essential resource is required."""
        required = region.ledger.get_consumption_rates()
        ratios: list[float] = []
        for definition in self.registry.essential:
            need = required.get(definition.name, 0.0)
            if need <= 0:
                continue
            available = region.ledger.get_amount(definition.name)
            ratios.append(min(1.0, available / need))
        if not ratios:
            return None
        return float(np.clip(np.mean(ratios), 0.0, 1.0))

    def update_satisfaction(self, region: Region) -> float:
        value = self.compute_satisfaction(region)
        if value is not None:
            region.satisfaction = value
        return region.satisfaction

    def update_labor(self, region: Region) -> PopulationOutcome:
        pop = self.pop
        sat = region.satisfaction
        outcome = PopulationOutcome(satisfaction=sat)
        if sat < pop["low_satisfaction"]:
            outcome.labor_change = -round((pop["low_satisfaction"] - sat) * pop["decline_rate"])
        elif sat > pop["high_satisfaction"]:
            surplus = sat - pop["high_satisfaction"]
            outcome.labor_change = round(surplus * pop["growth_rate"])
            outcome.reinvestment = surplus * pop["reinvestment_rate"]
            region.capital_investment += outcome.reinvestment
        region.labor = max(int(pop["min_labor"]), region.labor + outcome.labor_change)
        return outcome

    def step(self, region: Region) -> PopulationOutcome:
        """Satisfaction, then labor, then this turn's consumption and spoilage."""
        self.update_satisfaction(region)
        outcome = self.update_labor(region)
        region.ledger.consume()
        region.ledger.spoil()
        return outcome
