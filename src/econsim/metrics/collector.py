"""
Metrics Collector — per-turn economy statistics.

Summarizes each completed turn (wealth totals and inequality, production,
satisfaction, trade activity, price level, cycle phase) and provides time
series extraction and export for visualization.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from econsim.core.engine import SimulationEngine


@dataclass
class TurnMetrics:
    """Aggregate metrics for a single turn."""

    turn: int

    # Wealth
    total_wealth: int
    mean_wealth: float
    wealth_gini: float

    # Output and population
    total_production: int
    mean_satisfaction: float
    total_labor: int

    # Trade
    trade_count: int
    trade_volume: float

    # Market
    price_index: float
    prices: dict[str, float] = field(default_factory=dict)

    # Cycle
    cycle_phase: str = "none"

    # Per-region
    wealth_by_region: dict[str, int] = field(default_factory=dict)
    production_by_region: dict[str, int] = field(default_factory=dict)

    # Per-nation
    wealth_by_nation: dict[str, int] = field(default_factory=dict)
    production_by_nation: dict[str, int] = field(default_factory=dict)

    turn_errors: int = 0


class MetricsCollector:
    """Collects and aggregates metrics across turns."""

    def __init__(self) -> None:
        self.metrics_history: list[TurnMetrics] = []

    def collect(self, engine: SimulationEngine, errors: int = 0) -> TurnMetrics:
        """Collect metrics for the engine's current turn boundary."""
        regions = engine.get_all_regions()
        nations = engine.get_all_nations()
        market = engine.get_market_snapshot()
        trade = engine.ctx.trade_history

        wealth = [r.wealth for r in regions.values()]
        m = TurnMetrics(
            turn=engine.turn,
            total_wealth=int(sum(wealth)),
            mean_wealth=float(np.mean(wealth)) if wealth else 0.0,
            wealth_gini=self.compute_gini(wealth),
            total_production=int(sum(r.production for r in regions.values())),
            mean_satisfaction=(
                float(np.mean([r.satisfaction for r in regions.values()]))
                if regions else 0.0
            ),
            total_labor=int(sum(r.labor for r in regions.values())),
            trade_count=trade.trade_count,
            trade_volume=float(trade.total_volume),
            price_index=market.price_index(),
            prices=dict(market.prices),
            cycle_phase=engine.ctx.cycle.phase_name,
            wealth_by_region={name: r.wealth for name, r in regions.items()},
            production_by_region={name: r.production for name, r in regions.items()},
            wealth_by_nation={name: n.total_wealth for name, n in nations.items()},
            production_by_nation={name: n.total_production for name, n in nations.items()},
            turn_errors=errors,
        )
        self.metrics_history.append(m)
        return m

    @staticmethod
    def compute_gini(values: list[float]) -> float:
        """Gini coefficient of non-negative holdings (debts count as zero)."""
        if len(values) < 2:
            return 0.0
        arr = np.sort(np.clip(np.asarray(values, dtype=float), 0.0, None))
        total = arr.sum()
        if total == 0:
            return 0.0
        n = len(arr)
        ranks = 2 * np.arange(1, n + 1) - n - 1
        return float(np.clip(np.dot(ranks, arr) / (n * total), 0.0, 1.0))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_time_series(self, field_name: str) -> list[Any]:
        """Extract a time series for a specific metric field."""
        return [getattr(m, field_name) for m in self.metrics_history]

    def get_summary(self) -> dict[str, Any]:
        if not self.metrics_history:
            return {"turns": 0}
        last = self.metrics_history[-1]
        first = self.metrics_history[0]
        return {
            "turns": len(self.metrics_history),
            "final_total_wealth": last.total_wealth,
            "wealth_growth": last.total_wealth - first.total_wealth,
            "final_gini": round(last.wealth_gini, 4),
            "mean_satisfaction": round(
                float(np.mean(self.get_time_series("mean_satisfaction"))), 4,
            ),
            "total_trades": int(sum(self.get_time_series("trade_count"))),
            "final_price_index": round(last.price_index, 4),
            "cycle_phase": last.cycle_phase,
        }

    def export_for_visualization(self) -> list[dict[str, Any]]:
        """Export all metrics as a list of JSON-serializable dicts."""
        return [
            {
                "turn": m.turn,
                "total_wealth": m.total_wealth,
                "mean_wealth": round(m.mean_wealth, 4),
                "wealth_gini": round(m.wealth_gini, 4),
                "total_production": m.total_production,
                "mean_satisfaction": round(m.mean_satisfaction, 4),
                "total_labor": m.total_labor,
                "trade_count": m.trade_count,
                "trade_volume": round(m.trade_volume, 4),
                "price_index": round(m.price_index, 4),
                "prices": {k: round(v, 4) for k, v in m.prices.items()},
                "cycle_phase": m.cycle_phase,
                "wealth_by_region": m.wealth_by_region,
                "production_by_region": m.production_by_region,
                "wealth_by_nation": m.wealth_by_nation,
                "production_by_nation": m.production_by_nation,
                "turn_errors": m.turn_errors,
            }
            for m in self.metrics_history
        ]
