"""
Per-region resource ledger.

Holds current quantities plus the production and consumption rate maps.
Rates are recomputed every turn by ``calculate_production`` and
``calculate_demand``; they are never accumulated. Quantities only change
through ``generate``, ``add_resource``, ``remove_resource``, ``consume`` and
``spoil``, and never go below zero.
"""

from __future__ import annotations

import logging

from econsim.core.resources import ResourceRegistry

logger = logging.getLogger(__name__)


class ResourceLedger:
    """Resource quantities and per-turn rates for a single region."""

    def __init__(
        self,
        registry: ResourceRegistry,
        initial: dict[str, float] | None = None,
        base_production: dict[str, float] | None = None,
        consumption_per_capita: dict[str, float] | None = None,
        terrain_modifiers: dict[str, float] | None = None,
    ):
        self._registry = registry
        names = registry.names
        initial = initial or {}
        base_production = base_production or {}
        consumption_per_capita = consumption_per_capita or {}

        self._quantities: dict[str, float] = {
            n: max(0.0, float(initial.get(n, 0.0))) for n in names
        }
        self._baseline: dict[str, float] = {
            n: float(base_production.get(n, 0.0)) for n in names
        }
        self._per_capita: dict[str, float] = {
            n: float(consumption_per_capita.get(n, 0.0)) for n in names
        }
        self._terrain: dict[str, float] = dict(terrain_modifiers or {})
        self._production_rates: dict[str, float] = {n: 0.0 for n in names}
        self._consumption_rates: dict[str, float] = {n: 0.0 for n in names}

    # ------------------------------------------------------------------
    # Quantities
    # ------------------------------------------------------------------
    def terrain_multiplier(self, name: str) -> float:
        """Terrain modifier for a resource: by name, else by category, else 1."""
        if name in self._terrain:
            return max(0.0, self._terrain[name])
        definition = self._registry.get(name)
        if definition is not None and definition.category.value in self._terrain:
            return max(0.0, self._terrain[definition.category.value])
        return 1.0

    def generate(self) -> dict[str, float]:
        """Add each resource's per-turn baseline, scaled by terrain.

        Returns the amounts actually added. Quantities never decrease here.
        """
        added: dict[str, float] = {}
        for name, base in self._baseline.items():
            amount = base * self.terrain_multiplier(name)
            if amount > 0:
                self._quantities[name] += amount
                added[name] = amount
        return added

    def add_resource(self, name: str, amount: float) -> bool:
        if name not in self._quantities:
            logger.warning("Ignoring add of unknown resource %r", name)
            return False
        if amount <= 0:
            return False
        self._quantities[name] += amount
        return True

    def remove_resource(self, name: str, amount: float) -> bool:
        """Remove up to ``amount``; report whether the full amount was there.

        A request larger than the stock leaves the quantity at exactly zero.
        Unknown names are a no-op reporting unavailable.
        """
        if name not in self._quantities:
            return False
        if amount <= 0:
            return amount == 0
        available = self._quantities[name]
        if available >= amount:
            self._quantities[name] = available - amount
            return True
        self._quantities[name] = 0.0
        return False

    def get_amount(self, name: str) -> float:
        return self._quantities.get(name, 0.0)

    def has(self, name: str, amount: float) -> bool:
        return self._quantities.get(name, 0.0) >= amount

    def get_all(self) -> dict[str, float]:
        return dict(self._quantities)

    def get_production_rates(self) -> dict[str, float]:
        return dict(self._production_rates)

    def get_consumption_rates(self) -> dict[str, float]:
        return dict(self._consumption_rates)

    # ------------------------------------------------------------------
    # Rates
    # ------------------------------------------------------------------
    def calculate_production(
        self, recipe_rates: dict[str, float] | None = None,
    ) -> dict[str, float]:
        """Recompute production rates from baselines, terrain and recipes."""
        recipe_rates = recipe_rates or {}
        for name in self._production_rates:
            rate = self._baseline[name] * self.terrain_multiplier(name)
            rate += recipe_rates.get(name, 0.0)
            self._production_rates[name] = rate
        return self.get_production_rates()

    def calculate_demand(
        self,
        labor: int,
        wealth: float = 0.0,
        price_ratios: dict[str, float] | None = None,
        wealth_factor: float = 0.0,
        price_exponent: float = 0.5,
    ) -> dict[str, float]:
        """Recompute consumption rates from population and prices.

        rate = labor * per_capita * (1 + wealth * wealth_factor)
               * price_ratio ** -price_exponent
        """
        price_ratios = price_ratios or {}
        wealth_term = max(0.0, 1.0 + wealth * wealth_factor)
        for name in self._consumption_rates:
            need = self._per_capita[name]
            if need <= 0 or labor <= 0:
                self._consumption_rates[name] = 0.0
                continue
            ratio = price_ratios.get(name, 1.0)
            price_term = ratio ** -price_exponent if ratio > 0 else 1.0
            self._consumption_rates[name] = labor * need * wealth_term * price_term
        return self.get_consumption_rates()

    def surplus(self, name: str) -> float:
        """Production rate minus consumption rate (negative is a deficit)."""
        return (
            self._production_rates.get(name, 0.0)
            - self._consumption_rates.get(name, 0.0)
        )

    def balance(self) -> float:
        return sum(self.surplus(n) for n in self._production_rates)

    # ------------------------------------------------------------------
    # Consumption and decay
    # ------------------------------------------------------------------
    def consume(self) -> dict[str, float]:
        """Remove this turn's consumption; return the unmet amounts."""
        shortfalls: dict[str, float] = {}
        for name, rate in self._consumption_rates.items():
            if rate <= 0:
                continue
            available = self._quantities[name]
            if not self.remove_resource(name, rate):
                shortfalls[name] = rate - available
        return shortfalls

    def spoil(self) -> dict[str, float]:
        """Apply each resource's perish rate to its stock."""
        losses: dict[str, float] = {}
        for definition in self._registry:
            if definition.perish_rate <= 0:
                continue
            stock = self._quantities[definition.name]
            loss = stock * definition.perish_rate
            if loss > 0:
                self._quantities[definition.name] = stock - loss
                losses[definition.name] = loss
        return losses
