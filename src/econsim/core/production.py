"""
Production engine: Cobb-Douglas output and recipe transformations.

Cobb-Douglas output is a derived per-turn quantity written through
``Region.set_production``. Recipes turn input resources into an output
resource when every input is in stock and the region's infrastructure
meets the recipe's type and level requirements. A recipe that cannot fire
simply does nothing this turn.
"""

from __future__ import annotations

import numpy as np

from econsim.core.config import SimulationConfig
from econsim.core.region import Region
from econsim.core.resources import Recipe, ResourceRegistry


class ProductionEngine:
    """Computes region output and executes active recipes."""

    def __init__(self, config: SimulationConfig, registry: ResourceRegistry):
        self.config = config
        self.registry = registry
        self.pc = config.production_config

    @property
    def uses_cobb_douglas(self) -> bool:
        return self.pc["production_model"] == "cobb_douglas"

    # ------------------------------------------------------------------
    # Cobb-Douglas
    # ------------------------------------------------------------------
    def cobb_douglas(self, labor: float, capital: float) -> float:
        """productivity * labor^alpha * capital^beta"""
        if labor <= 0 or capital <= 0:
            return 0.0
        return float(
            self.pc["productivity_factor"]
            * np.power(labor, self.pc["labor_elasticity"])
            * np.power(capital, self.pc["capital_elasticity"])
        )

    def compute_output(self, region: Region) -> int:
        return round(self.cobb_douglas(region.labor, region.infrastructure.level))

    def apply_model(self, region: Region) -> None:
        """Overwrite production with the Cobb-Douglas output when enabled."""
        if self.uses_cobb_douglas:
            region.set_production(self.compute_output(region))

    # ------------------------------------------------------------------
    # Recipes
    # ------------------------------------------------------------------
    def can_produce(self, region: Region, recipe: Recipe) -> bool:
        infra = region.infrastructure
        if recipe.required_infrastructure and infra.type != recipe.required_infrastructure:
            return False
        if infra.level < recipe.min_infrastructure_level:
            return False
        return all(region.ledger.has(i.resource, i.amount) for i in recipe.inputs)

    def quality_factor(self, region: Region, recipe: Recipe) -> float:
        """Bonus for inputs held well above the required amount.

        Each input stocked beyond ``quality_threshold`` times its requirement
        contributes ``(min(ratio, cap) - 1) * step``; the sum is scaled by the
        recipe's quality impact and clamped.
        """
        pc = self.pc
        contribution = 0.0
        for i in recipe.inputs:
            available = region.ledger.get_amount(i.resource)
            if available > pc["quality_threshold"] * i.amount:
                ratio = min(available / i.amount, pc["quality_ratio_cap"])
                contribution += (ratio - 1.0) * pc["quality_step"]
        quality = 1.0 + contribution * recipe.quality_impact
        return float(np.clip(quality, pc["quality_min"], pc["quality_max"]))

    def recipe_output(self, region: Region, recipe: Recipe) -> float:
        amount = recipe.output_amount * recipe.efficiency_multiplier
        if recipe.quality_affects_output:
            amount *= self.quality_factor(region, recipe)
        return amount

    def recipe_rates(self, region: Region) -> dict[str, float]:
        """Expected per-turn output of the active recipes that can run now."""
        rates: dict[str, float] = {}
        for name in region.active_recipes:
            recipe = self.registry.get_recipe(name)
            if recipe is None or not self.can_produce(region, recipe):
                continue
            per_turn = recipe.output_amount * recipe.efficiency_multiplier / recipe.production_time
            rates[recipe.output] = rates.get(recipe.output, 0.0) + per_turn
        return rates

    def run_recipes(self, region: Region) -> dict[str, float]:
        """Advance every active recipe; return output added per recipe that fired."""
        fired: dict[str, float] = {}
        for name in region.active_recipes:
            recipe = self.registry.get_recipe(name)
            if recipe is None or not self.can_produce(region, recipe):
                continue
            progress = region.recipe_progress.get(name, 0.0) + 1.0
            if progress < recipe.production_time:
                region.recipe_progress[name] = progress
                continue
            region.recipe_progress[name] = 0.0
            amount = self.recipe_output(region, recipe)
            for i in recipe.inputs:
                if i.consumed:
                    region.ledger.remove_resource(i.resource, i.amount)
            region.ledger.add_resource(recipe.output, amount)
            fired[name] = amount
        return fired
