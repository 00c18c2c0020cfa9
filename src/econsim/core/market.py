"""
Global market pricing.

Once per turn every resource is repriced from aggregate supply and demand:

    ratio  = demand / max(supply, supply_floor)
    target = base_price * ratio ** demand_elasticity * jitter
    price  = clamp(target, current * (1 - volatility), current * (1 + volatility))

The volatility clamp is authoritative; the elasticity target only says which
way and roughly how far to move.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Iterable

import numpy as np

from econsim.core.config import SimulationConfig
from econsim.core.region import Region
from econsim.core.resources import ResourceRegistry


@dataclass(frozen=True)
class MarketSnapshot:
    """Read-only copy of market prices at a turn boundary."""
    turn: int
    prices: dict[str, float]
    base_prices: dict[str, float]
    supply: dict[str, float]
    demand: dict[str, float]

    def price_index(self) -> float:
        """Mean current-to-base price ratio across resources."""
        if not self.prices:
            return 1.0
        return float(np.mean([self.prices[k] / self.base_prices[k] for k in self.prices]))

    def to_dict(self) -> dict[str, Any]:
        return {
            "turn": self.turn,
            "prices": {k: round(v, 4) for k, v in self.prices.items()},
            "base_prices": dict(self.base_prices),
            "supply": {k: round(v, 4) for k, v in self.supply.items()},
            "demand": {k: round(v, 4) for k, v in self.demand.items()},
            "price_index": round(self.price_index(), 4),
        }


class Market:
    """Per-resource prices with a bounded history."""

    def __init__(self, config: SimulationConfig, registry: ResourceRegistry):
        self.config = config
        self.registry = registry
        self.mc = config.market_config
        self.base_prices: dict[str, float] = {d.name: d.base_value for d in registry}
        self.current_prices: dict[str, float] = dict(self.base_prices)
        self.history: dict[str, deque[float]] = {
            name: deque([price], maxlen=self.mc["history_length"])
            for name, price in self.base_prices.items()
        }
        self.supply: dict[str, float] = {name: 0.0 for name in self.base_prices}
        self.demand: dict[str, float] = {name: 0.0 for name in self.base_prices}

    # ------------------------------------------------------------------
    # Repricing
    # ------------------------------------------------------------------
    def aggregate(self, regions: Iterable[Region]) -> None:
        supply = {name: 0.0 for name in self.base_prices}
        demand = {name: 0.0 for name in self.base_prices}
        for region in regions:
            for name, rate in region.ledger.get_production_rates().items():
                supply[name] += rate
            for name, rate in region.ledger.get_consumption_rates().items():
                demand[name] += rate
        self.supply = supply
        self.demand = demand

    def target_price(self, name: str) -> float:
        supply = max(self.supply.get(name, 0.0), self.mc["supply_floor"])
        ratio = self.demand.get(name, 0.0) / supply
        return self.base_prices[name] * ratio ** self.mc["demand_elasticity"]

    def reprice(self, regions: Iterable[Region], rng: np.random.Generator) -> dict[str, float]:
        """Recompute every price once; return the new price map."""
        self.aggregate(regions)
        volatility = self.mc["price_volatility"]
        for definition in self.registry:
            name = definition.name
            current = self.current_prices[name]
            bound = self.mc["price_jitter"] * definition.volatility
            jitter = rng.uniform(1.0 - bound, 1.0 + bound) if bound > 0 else 1.0
            target = self.target_price(name) * jitter
            new_price = float(np.clip(
                target, current * (1.0 - volatility), current * (1.0 + volatility),
            ))
            self.current_prices[name] = new_price
            self.history[name].append(new_price)
        return dict(self.current_prices)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_current_price(self, name: str) -> float:
        return self.current_prices.get(name, self.mc["default_price"])

    def get_base_price(self, name: str) -> float:
        return self.base_prices.get(name, self.mc["default_price"])

    def get_price_ratio(self, name: str) -> float:
        if name not in self.current_prices:
            return 1.0
        return self.current_prices[name] / self.base_prices[name]

    def get_price_ratios(self) -> dict[str, float]:
        return {name: self.get_price_ratio(name) for name in self.current_prices}

    def get_price_history(self, name: str) -> list[float]:
        return list(self.history.get(name, ()))

    def get_all_current_prices(self) -> dict[str, float]:
        return dict(self.current_prices)

    def snapshot(self, turn: int) -> MarketSnapshot:
        """Prices as of completed turn ``turn``, which the caller owns."""
        return MarketSnapshot(
            turn=turn,
            prices=dict(self.current_prices),
            base_prices=dict(self.base_prices),
            supply=dict(self.supply),
            demand=dict(self.demand),
        )
