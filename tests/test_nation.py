"""Tests for nation-level aggregation."""

import pytest

from econsim.core.config import SimulationConfig
from econsim.core.engine import SimulationEngine
from econsim.core.nation import NationSummary, summarize_nations
from econsim.core.region import RegionSnapshot
from econsim.experiment.presets import baseline_scenario, trade_pair_scenario


def _snapshot(name: str, nation: str | None, wealth: int = 100, **tables) -> RegionSnapshot:
    return RegionSnapshot(
        name=name,
        nation=nation,
        wealth=wealth,
        production=50,
        labor=100,
        satisfaction=tables.pop("satisfaction", 0.5),
        infrastructure_type="basic",
        infrastructure_level=1,
        capital_investment=0.0,
        wealth_delta=0,
        production_delta=0,
        resources=tables.get("resources", {}),
        production_rates=tables.get("production_rates", {}),
        consumption_rates=tables.get("consumption_rates", {}),
        active_recipes=(),
    )


class TestNationSummary:
    def test_sums_regions(self):
        summary = NationSummary.from_snapshots("Aldria", [
            _snapshot("A", "Aldria", wealth=100, satisfaction=0.2,
                      resources={"Food": 5.0}),
            _snapshot("B", "Aldria", wealth=-30, satisfaction=0.6,
                      resources={"Food": 2.5, "Iron": 1.0}),
        ])
        assert summary.regions == ("A", "B")
        assert summary.total_wealth == 70
        assert summary.total_production == 100
        assert summary.total_labor == 200
        assert summary.mean_satisfaction == pytest.approx(0.4)
        assert summary.resources == {"Food": 7.5, "Iron": 1.0}

    def test_resource_balance(self):
        summary = NationSummary.from_snapshots("Aldria", [
            _snapshot("A", "Aldria", production_rates={"Food": 10.0},
                      consumption_rates={"Food": 4.0}),
            _snapshot("B", "Aldria", production_rates={"Wood": 2.0},
                      consumption_rates={"Food": 1.0, "Iron": 3.0}),
        ])
        assert summary.resource_balance() == {"Food": 5.0, "Wood": 2.0, "Iron": -3.0}
        assert summary.to_dict()["resource_balance"]["Iron"] == -3.0

    def test_regions_without_nation_skipped(self):
        nations = summarize_nations([
            _snapshot("C", "Belmora"),
            _snapshot("A", "Aldria"),
            _snapshot("Free", None),
        ])
        assert list(nations) == ["Aldria", "Belmora"]
        assert nations["Aldria"].regions == ("A",)


class TestEngineNations:
    def test_baseline_nations(self):
        engine = SimulationEngine(SimulationConfig(random_seed=1), baseline_scenario())
        nations = engine.get_all_nations()
        assert list(nations) == ["Aldria", "Belmora"]

        aldria = engine.get_nation_summary("Aldria")
        assert aldria.regions == ("Highpeak", "Northmarch")
        assert aldria.total_wealth == 220
        assert aldria.total_production == 90
        assert aldria.total_labor == 180
        assert aldria.resources["Food"] == pytest.approx(90.0)

    def test_totals_track_regions_after_turns(self):
        engine = SimulationEngine(SimulationConfig(random_seed=3), baseline_scenario())
        engine.run(3)
        regions = engine.get_all_regions()
        for name, summary in engine.get_all_nations().items():
            members = [r for r in regions.values() if r.nation == name]
            assert summary.total_wealth == sum(r.wealth for r in members)
            assert summary.total_production == sum(r.production for r in members)

    def test_unknown_nation(self):
        engine = SimulationEngine(SimulationConfig(random_seed=1), baseline_scenario())
        assert engine.get_nation_summary("Atlantis") is None

    def test_scenario_without_nations(self):
        engine = SimulationEngine(SimulationConfig(random_seed=1), trade_pair_scenario())
        assert engine.get_all_nations() == {}
