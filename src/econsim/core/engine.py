"""
Turn orchestrator.

Runs the fixed phase order once per turn, breadth-first across regions
(every region finishes a phase before any region starts the next):

  1. Production        (baseline generation, Cobb-Douglas output, recipes)
  2. Ledger recompute  (production and consumption rates)
  3. Population        (satisfaction, labor, consumption, spoilage)
  4. Economy           (wealth aggregation, production fluctuation)
  5. Trade             (matching and execution)
  6. Market            (repricing)
  7. Economic cycle    (multiplier on wealth and production)

Trade therefore sees post-production, pre-cycle balances. A failure inside
one region's work is logged and the other regions carry on; a failure of a
whole phase abandons the turn without rolling anything back.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterator

import numpy as np

from econsim.core.config import SimulationConfig
from econsim.core.context import SimulationContext
from econsim.core.errors import TurnInProgressError, UnknownRegionError
from econsim.core.events import Event, MarketPricesUpdated, RegionChanged, TurnResult
from econsim.core.market import MarketSnapshot
from econsim.core.nation import NationSummary, summarize_nations
from econsim.core.population import PopulationModel, PopulationOutcome
from econsim.core.production import ProductionEngine
from econsim.core.region import Region, RegionEconomy, RegionSnapshot
from econsim.core.scenario import Scenario
from econsim.core.trade import TradeEngine, TradeRecord

logger = logging.getLogger(__name__)

PHASES = (
    "production",
    "ledger",
    "population",
    "economy",
    "trade",
    "market",
    "cycle",
)


class _PhaseError(Exception):
    def __init__(self, phase: str, cause: Exception):
        super().__init__(f"{phase} phase failed: {cause}")
        self.phase = phase


class SimulationEngine:
    """
    Owns the simulation context and advances it one turn at a time.

    Only one turn may run at a time; a second call while a turn is in
    progress is rejected with a failed ``TurnResult``.
    """

    def __init__(
        self,
        config: SimulationConfig,
        scenario: Scenario,
        rng: np.random.Generator | None = None,
    ):
        self.config = config
        self.scenario = scenario
        self.ctx = SimulationContext.build(config, scenario, rng=rng)
        self.production = ProductionEngine(config, self.ctx.registry)
        self.population = PopulationModel(config, self.ctx.registry)
        self.economy = RegionEconomy(config)
        self.trade = TradeEngine(config, self.economy)
        self.last_events: list[Event] = []
        self.results: list[TurnResult] = []
        self._lock = threading.Lock()

        # Per-turn scratch, discarded at the end of each turn
        self._outcomes: dict[str, PopulationOutcome] = {}
        self._errors: list[str] = []

    @property
    def turn(self) -> int:
        return self.ctx.turn

    # ------------------------------------------------------------------
    # Turn loop
    # ------------------------------------------------------------------
    def advance_turn(self) -> TurnResult:
        """Run one complete turn. Never raises for simulation errors."""
        if not self._lock.acquire(blocking=False):
            return TurnResult(
                success=False, turn=self.ctx.turn, reason="turn already in progress",
            )
        try:
            return self._run_turn()
        finally:
            self._lock.release()

    def run(self, turns: int | None = None) -> list[TurnResult]:
        """Advance ``turns`` turns (default ``config.turns_to_run``), stopping on failure."""
        n = self.config.turns_to_run if turns is None else turns
        results: list[TurnResult] = []
        for _ in range(n):
            result = self.advance_turn()
            results.append(result)
            if not result.success:
                break
        return results

    def _run_turn(self) -> TurnResult:
        ctx = self.ctx
        before = {name: ctx.regions[name].snapshot() for name in ctx.region_names()}
        self._outcomes = {}
        self._errors = []
        ctx.recipe_rates = {}

        try:
            for phase in PHASES:
                try:
                    getattr(self, f"_phase_{phase}")()
                except Exception as exc:
                    raise _PhaseError(phase, exc) from exc
        except _PhaseError as err:
            logger.exception("Turn %d abandoned", ctx.turn + 1)
            result = TurnResult(
                success=False, turn=ctx.turn, reason=str(err), errors=list(self._errors),
            )
            self.results.append(result)
            return result

        ctx.turn += 1
        self._record_deltas(before)
        events = self._build_events(before)
        self.last_events = events
        result = TurnResult(
            success=True, turn=ctx.turn, events=events, errors=list(self._errors),
        )
        self.results.append(result)
        return result

    def _for_each_region(self, phase: str, fn) -> None:
        """Apply ``fn`` to every region in order, isolating failures."""
        for name in self.ctx.region_names():
            region = self.ctx.regions[name]
            try:
                fn(region)
            except Exception as exc:
                logger.warning(
                    "%s phase failed for region %s", phase, name, exc_info=True,
                )
                self._errors.append(f"{phase}:{name}: {exc}")

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------
    def _phase_production(self) -> None:
        def produce(region: Region) -> None:
            region.ledger.generate()
            self.production.apply_model(region)
            self.ctx.recipe_rates[region.name] = self.production.recipe_rates(region)
            self.production.run_recipes(region)

        self._for_each_region("production", produce)

    def _phase_ledger(self) -> None:
        pop = self.config.population_config
        price_ratios = self.ctx.market.get_price_ratios()

        def recompute(region: Region) -> None:
            region.ledger.calculate_production(self.ctx.recipe_rates.get(region.name))
            region.ledger.calculate_demand(
                region.labor,
                wealth=region.wealth,
                price_ratios=price_ratios,
                wealth_factor=pop["wealth_demand_factor"],
                price_exponent=pop["demand_price_exponent"],
            )

        self._for_each_region("ledger", recompute)

    def _phase_population(self) -> None:
        def update(region: Region) -> None:
            self._outcomes[region.name] = self.population.step(region)

        self._for_each_region("population", update)

    def _phase_economy(self) -> None:
        def aggregate(region: Region) -> None:
            fluctuation = self.economy.draw_fluctuation(self.ctx.rng)
            outcome = self._outcomes.get(region.name)
            reinvestment = outcome.reinvestment if outcome is not None else 0.0
            self.economy.aggregate(region, fluctuation, reinvestment)

        self._for_each_region("economy", aggregate)

    def _phase_trade(self) -> None:
        result = self.trade.run(self.ctx)
        self._errors.extend(result.errors)

    def _phase_market(self) -> None:
        regions = [self.ctx.regions[n] for n in self.ctx.region_names()]
        self.ctx.market.reprice(regions, self.ctx.rng)

    def _phase_cycle(self) -> None:
        multiplier = self.ctx.cycle.multiplier

        def scale(region: Region) -> None:
            self.economy.apply_cycle(region, multiplier)

        if multiplier != 1.0:
            self._for_each_region("cycle", scale)
        if self.ctx.cycle.advance():
            logger.info(
                "Economic cycle entered %s after turn %d",
                self.ctx.cycle.phase_name, self.ctx.turn + 1,
            )

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------
    def _record_deltas(self, before: dict[str, RegionSnapshot]) -> None:
        for name, snap in before.items():
            region = self.ctx.regions[name]
            region.wealth_delta = region.wealth - snap.wealth
            region.production_delta = region.production - snap.production

    def _build_events(self, before: dict[str, RegionSnapshot]) -> list[Event]:
        events: list[Event] = []
        for name in self.ctx.region_names():
            region = self.ctx.regions[name]
            old = before[name]
            if (
                region.wealth == old.wealth
                and region.production == old.production
                and region.satisfaction == old.satisfaction
                and region.labor == old.labor
            ):
                continue
            events.append(RegionChanged(
                turn=self.ctx.turn,
                region=name,
                nation=region.nation,
                wealth=region.wealth,
                production=region.production,
                wealth_delta=region.wealth_delta,
                production_delta=region.production_delta,
                satisfaction=region.satisfaction,
            ))
        events.append(MarketPricesUpdated(
            turn=self.ctx.turn, prices=self.ctx.market.get_all_current_prices(),
        ))
        return events

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_region(self, name: str) -> RegionSnapshot | None:
        region = self.ctx.regions.get(name)
        return region.snapshot() if region is not None else None

    def get_all_regions(self) -> dict[str, RegionSnapshot]:
        return {name: self.ctx.regions[name].snapshot() for name in self.ctx.region_names()}

    def get_market_snapshot(self) -> MarketSnapshot:
        return self.ctx.market.snapshot(self.ctx.turn)

    def get_trade_history(self, name: str) -> dict[str, list[TradeRecord]]:
        return {
            "imports": self.ctx.trade_history.get_imports(name),
            "exports": self.ctx.trade_history.get_exports(name),
        }

    def get_cycle_state(self) -> dict[str, Any]:
        return self.ctx.cycle.to_dict()

    def get_all_nations(self) -> dict[str, NationSummary]:
        """Per-nation totals over the current region snapshots, by nation name."""
        return summarize_nations(self.get_all_regions().values())

    def get_nation_summary(self, name: str) -> NationSummary | None:
        return self.get_all_nations().get(name)

    # ------------------------------------------------------------------
    # Mutation entry points (turn boundaries only)
    # ------------------------------------------------------------------
    @contextmanager
    def _between_turns(self, name: str) -> Iterator[Region]:
        if not self._lock.acquire(blocking=False):
            raise TurnInProgressError("Cannot modify regions while a turn is in progress")
        try:
            region = self.ctx.regions.get(name)
            if region is None:
                raise UnknownRegionError(name)
            yield region
        finally:
            self._lock.release()

    def upgrade_infrastructure(self, name: str) -> bool:
        """Pay for one infrastructure level; False if the region cannot afford it."""
        with self._between_turns(name) as region:
            upgraded = self.economy.upgrade_infrastructure(region)
        if upgraded:
            logger.info("%s upgraded infrastructure to level %d",
                        name, region.infrastructure.level)
        return upgraded

    def activate_recipe(self, name: str, recipe_name: str) -> bool:
        with self._between_turns(name) as region:
            if self.ctx.registry.get_recipe(recipe_name) is None:
                return False
            if recipe_name in region.active_recipes:
                return False
            region.active_recipes.append(recipe_name)
            return True

    def deactivate_recipe(self, name: str, recipe_name: str) -> bool:
        with self._between_turns(name) as region:
            if recipe_name not in region.active_recipes:
                return False
            region.active_recipes.remove(recipe_name)
            region.recipe_progress.pop(recipe_name, None)
            return True
