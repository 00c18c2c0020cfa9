#!/usr/bin/env python3
"""Run the baseline economy scenario and print a per-turn table."""

from econsim.core.config import SimulationConfig
from econsim.core.engine import SimulationEngine
from econsim.experiment.presets import baseline_scenario
from econsim.metrics.collector import MetricsCollector


def main():
    config = SimulationConfig(
        experiment_name="baseline",
        turns_to_run=25,
        random_seed=42,
    )
    scenario = baseline_scenario()

    print(f"=== Regional economy: {config.experiment_name} ===")
    print(f"Regions: {', '.join(r.name for r in scenario.regions)}")
    print(f"Resources: {', '.join(r.name for r in scenario.resources)}")
    print(f"Turns: {config.turns_to_run}")
    print()

    engine = SimulationEngine(config, scenario)
    collector = MetricsCollector()

    print(f"{'Turn':>4} {'Wealth':>8} {'Gini':>6} {'Prod':>6} {'Sat':>5} "
          f"{'Labor':>6} {'Trades':>6} {'Volume':>8} {'PIdx':>6} {'Phase':>12}")
    print("-" * 80)

    for _ in range(config.turns_to_run):
        result = engine.advance_turn()
        if not result.success:
            print(f"Turn {result.turn + 1} failed: {result.reason}")
            break
        m = collector.collect(engine, errors=len(result.errors))
        print(
            f"{m.turn:4d} {m.total_wealth:8d} {m.wealth_gini:6.3f} "
            f"{m.total_production:6d} {m.mean_satisfaction:5.2f} "
            f"{m.total_labor:6d} {m.trade_count:6d} {m.trade_volume:8.1f} "
            f"{m.price_index:6.3f} {m.cycle_phase:>12}"
        )

    print()
    print(f"=== Final State (Turn {engine.turn}) ===")
    for name, snap in engine.get_all_regions().items():
        print(
            f"  {name:12s} wealth={snap.wealth:6d} production={snap.production:4d} "
            f"labor={snap.labor:4d} satisfaction={snap.satisfaction:.2f} "
            f"infrastructure={snap.infrastructure_level}"
        )

    print("\nPrices:")
    market = engine.get_market_snapshot()
    for resource, price in market.prices.items():
        base = market.base_prices[resource]
        print(f"  {resource:8s} {price:8.2f} (base {base:.2f}, x{price / base:.2f})")


if __name__ == "__main__":
    main()
