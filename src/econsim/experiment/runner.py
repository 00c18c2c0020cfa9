"""
Experiment Runner — comparisons, parameter sweeps, and multi-seed batches.

Each run builds a fresh engine from a config and a scenario, advances it,
and collects per-turn metrics.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from econsim.core.config import SimulationConfig
from econsim.core.engine import SimulationEngine
from econsim.core.events import TurnResult
from econsim.core.scenario import Scenario
from econsim.experiment.presets import baseline_scenario
from econsim.metrics.collector import MetricsCollector, TurnMetrics


@dataclass
class ExperimentResult:
    """Result of a single experiment run."""
    config: SimulationConfig
    turns_completed: int
    results: list[TurnResult]
    metrics: list[TurnMetrics]
    final_total_wealth: int
    final_gini: float
    mean_satisfaction: float
    total_trades: int
    final_prices: dict[str, float] = field(default_factory=dict)
    failure_reason: str | None = None


@dataclass
class ComparisonResult:
    """Result of comparing two or more experiments."""
    results: dict[str, ExperimentResult]
    config_diffs: dict[str, Any]


class ExperimentRunner:
    """
    Run, compare, and sweep simulation experiments.

    ``scenario`` is used for every run unless a call passes its own; it is
    deep-copied per run so runs never share state.
    """

    def __init__(self, scenario: Scenario | None = None):
        self.scenario = scenario if scenario is not None else baseline_scenario()

    def run_experiment(
        self,
        config: SimulationConfig,
        scenario: Scenario | None = None,
        turns: int | None = None,
    ) -> ExperimentResult:
        """Run a single experiment and return results."""
        engine = SimulationEngine(config, copy.deepcopy(scenario or self.scenario))
        collector = MetricsCollector()

        n = config.turns_to_run if turns is None else turns
        results: list[TurnResult] = []
        for _ in range(n):
            result = engine.advance_turn()
            results.append(result)
            if not result.success:
                break
            collector.collect(engine, errors=len(result.errors))

        metrics = collector.metrics_history
        satisfaction = [m.mean_satisfaction for m in metrics]
        return ExperimentResult(
            config=config,
            turns_completed=engine.turn,
            results=results,
            metrics=metrics,
            final_total_wealth=metrics[-1].total_wealth if metrics else 0,
            final_gini=metrics[-1].wealth_gini if metrics else 0.0,
            mean_satisfaction=float(np.mean(satisfaction)) if satisfaction else 0.0,
            total_trades=sum(m.trade_count for m in metrics),
            final_prices=engine.get_market_snapshot().prices,
            failure_reason=next((r.reason for r in results if not r.success), None),
        )

    def compare_experiments(
        self,
        configs: dict[str, SimulationConfig],
        turns: int | None = None,
    ) -> ComparisonResult:
        """Run multiple experiments and compare results."""
        results: dict[str, ExperimentResult] = {}
        for name, config in configs.items():
            results[name] = self.run_experiment(config, turns=turns)

        config_names = list(configs.keys())
        diffs: dict[str, Any] = {}
        if len(config_names) >= 2:
            base = configs[config_names[0]]
            for name in config_names[1:]:
                diffs[f"{config_names[0]}_vs_{name}"] = base.diff(configs[name])

        return ComparisonResult(results=results, config_diffs=diffs)

    def run_parameter_sweep(
        self,
        base_config: SimulationConfig,
        section: str,
        param_name: str,
        values: list[Any],
        turns: int | None = None,
    ) -> dict[str, ExperimentResult]:
        """
        Sweep one parameter of a ``*_config`` section across several values.

        Args:
            base_config: Base configuration to modify
            section: Config section holding the parameter, e.g. ``"trade_config"``
            param_name: Key inside that section
            values: List of values to test

        Returns:
            Dict mapping value label -> ExperimentResult
        """
        results: dict[str, ExperimentResult] = {}
        for val in values:
            config = SimulationConfig.from_dict(copy.deepcopy(base_config.to_dict()))
            config.configure(section, **{param_name: val})
            config.experiment_name = f"sweep_{param_name}={val}"
            results[f"{param_name}={val}"] = self.run_experiment(config, turns=turns)
        return results

    def run_multi_seed(
        self,
        config: SimulationConfig,
        seeds: list[int],
        turns: int | None = None,
    ) -> list[ExperimentResult]:
        """
        Run the same configuration with multiple random seeds.

        Useful for measuring variance in outcomes.
        """
        results: list[ExperimentResult] = []
        for seed in seeds:
            config_dict = copy.deepcopy(config.to_dict())
            config_dict["random_seed"] = seed
            config_dict["experiment_name"] = f"{config.experiment_name}_seed{seed}"
            seed_config = SimulationConfig.from_dict(config_dict)
            results.append(self.run_experiment(seed_config, turns=turns))
        return results
