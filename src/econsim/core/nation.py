"""
Nation-level aggregation.

A nation owns no state of its own: its figures are sums over the snapshots
of the regions that name it, recomputed on every query.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

import numpy as np

from econsim.core.region import RegionSnapshot


def _sum_tables(tables: Iterable[dict[str, float]]) -> dict[str, float]:
    totals: dict[str, float] = {}
    for table in tables:
        for name, value in table.items():
            totals[name] = totals.get(name, 0.0) + value
    return totals


@dataclass(frozen=True)
class NationSummary:
    """Read-only totals for one nation at a turn boundary."""
    name: str
    regions: tuple[str, ...]
    total_wealth: int
    total_production: int
    total_labor: int
    mean_satisfaction: float
    resources: dict[str, float]
    production_rates: dict[str, float]
    consumption_rates: dict[str, float]

    @classmethod
    def from_snapshots(cls, name: str, snapshots: list[RegionSnapshot]) -> NationSummary:
        return cls(
            name=name,
            regions=tuple(s.name for s in snapshots),
            total_wealth=sum(s.wealth for s in snapshots),
            total_production=sum(s.production for s in snapshots),
            total_labor=sum(s.labor for s in snapshots),
            mean_satisfaction=(
                float(np.mean([s.satisfaction for s in snapshots])) if snapshots else 0.0
            ),
            resources=_sum_tables(s.resources for s in snapshots),
            production_rates=_sum_tables(s.production_rates for s in snapshots),
            consumption_rates=_sum_tables(s.consumption_rates for s in snapshots),
        )

    def resource_balance(self) -> dict[str, float]:
        """Production minus consumption rate for every resource either side names."""
        names = list(self.production_rates)
        names += [n for n in self.consumption_rates if n not in self.production_rates]
        return {
            n: self.production_rates.get(n, 0.0) - self.consumption_rates.get(n, 0.0)
            for n in names
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "regions": list(self.regions),
            "total_wealth": self.total_wealth,
            "total_production": self.total_production,
            "total_labor": self.total_labor,
            "mean_satisfaction": round(self.mean_satisfaction, 4),
            "resources": {k: round(v, 4) for k, v in self.resources.items()},
            "production_rates": {k: round(v, 4) for k, v in self.production_rates.items()},
            "consumption_rates": {k: round(v, 4) for k, v in self.consumption_rates.items()},
            "resource_balance": {k: round(v, 4) for k, v in self.resource_balance().items()},
        }


def summarize_nations(snapshots: Iterable[RegionSnapshot]) -> dict[str, NationSummary]:
    """Group region snapshots by nation; regions without a nation are skipped."""
    grouped: dict[str, list[RegionSnapshot]] = {}
    for snap in snapshots:
        if snap.nation is None:
            continue
        grouped.setdefault(snap.nation, []).append(snap)
    return {
        name: NationSummary.from_snapshots(name, grouped[name])
        for name in sorted(grouped)
    }
