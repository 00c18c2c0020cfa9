"""Tests for Region, Infrastructure, RegionEconomy and EconomicCycle."""

import numpy as np
import pytest

from econsim.core.config import SimulationConfig
from econsim.core.cycle import EconomicCycle
from econsim.core.ledger import ResourceLedger
from econsim.core.region import Infrastructure, Region, RegionEconomy
from econsim.core.resources import ResourceDefinition, ResourceRegistry


def _make_region(**overrides) -> Region:
    registry = ResourceRegistry([ResourceDefinition("Food")])
    ledger = overrides.pop("ledger", None) or ResourceLedger(registry)
    defaults = dict(
        name="A", ledger=ledger, wealth=100, production=50, labor=100, satisfaction=0.7,
    )
    defaults.update(overrides)
    return Region(**defaults)


class TestInfrastructure:
    @pytest.mark.parametrize("level,expected", [(1, 0), (2, 1), (3, 2), (4, 2), (6, 3)])
    def test_maintenance_linear_in_level(self, level, expected):
        assert Infrastructure(level=level).maintenance_cost == expected

    def test_upgrade(self):
        infra = Infrastructure()
        assert infra.level == 1
        assert infra.upgrade() == 2
        assert infra.level == 2


class TestSnapshot:
    def test_snapshot_is_detached(self):
        region = _make_region()
        snap = region.snapshot()
        region.wealth = 5
        region.ledger.add_resource("Food", 3.0)
        assert snap.wealth == 100
        assert snap.resources == {"Food": 0.0}

    def test_snapshots_equal_without_changes(self):
        region = _make_region()
        assert region.snapshot() == region.snapshot()

    def test_to_dict(self):
        d = _make_region(nation="Aldria").snapshot().to_dict()
        assert d["name"] == "A"
        assert d["nation"] == "Aldria"
        assert d["infrastructure_level"] == 1


class TestRegionEconomy:
    def test_base_wealth_change(self):
        economy = RegionEconomy(SimulationConfig())
        region = _make_region()
        parts = economy.aggregate(region, fluctuation=2)
        assert parts.base == 100
        assert parts.maintenance == 0
        assert region.wealth == 200
        assert region.production == 52

    def test_production_never_negative(self):
        economy = RegionEconomy(SimulationConfig())
        region = _make_region(production=1)
        economy.aggregate(region, fluctuation=-2)
        assert region.production == 0

    def test_wealth_uses_production_before_fluctuation(self):
        economy = RegionEconomy(SimulationConfig())
        region = _make_region(production=10, wealth=0)
        economy.aggregate(region, fluctuation=-2)
        assert region.wealth == 20

    def test_satisfaction_penalty(self):
        economy = RegionEconomy(SimulationConfig())
        region = _make_region(satisfaction=0.2)
        parts = economy.aggregate(region, fluctuation=0)
        assert parts.satisfaction_penalty == 6
        assert region.wealth == 194

    def test_resource_balance(self):
        registry = ResourceRegistry([ResourceDefinition("Food"), ResourceDefinition("Iron")])
        ledger = ResourceLedger(
            registry,
            base_production={"Food": 10.0},
            consumption_per_capita={"Iron": 0.04},
        )
        ledger.calculate_production()
        ledger.calculate_demand(100)
        economy = RegionEconomy(SimulationConfig())
        region = _make_region(ledger=ledger)
        parts = economy.aggregate(region, fluctuation=0)
        assert parts.resource_balance == 6
        assert region.wealth == 206

    def test_maintenance_always_subtracted(self):
        economy = RegionEconomy(SimulationConfig())
        region = _make_region(production=0, infrastructure=Infrastructure(level=4))
        economy.aggregate(region, fluctuation=0)
        assert region.wealth == 98

    def test_reinvestment_bonus(self):
        economy = RegionEconomy(SimulationConfig())
        region = _make_region(production=0)
        parts = economy.aggregate(region, fluctuation=0, reinvestment=0.3)
        assert parts.reinvestment_bonus == 3
        assert region.wealth == 103

    def test_apply_cycle(self):
        economy = RegionEconomy(SimulationConfig())
        region = _make_region(wealth=200, production=40)
        economy.apply_cycle(region, 1.05)
        assert region.wealth == 210
        assert region.production == 42

    def test_wealth_bounded(self):
        config = SimulationConfig()
        config.configure("economy_config", wealth_limit=1000)
        economy = RegionEconomy(config)
        region = _make_region(wealth=990, production=50)
        economy.aggregate(region, fluctuation=0)
        assert region.wealth == 1000

    def test_fluctuation_range(self):
        economy = RegionEconomy(SimulationConfig())
        rng = np.random.default_rng(0)
        draws = {economy.draw_fluctuation(rng) for _ in range(500)}
        assert draws == {-2, -1, 0, 1, 2}

    def test_upgrade_paid_from_wealth(self):
        economy = RegionEconomy(SimulationConfig())
        region = _make_region(wealth=150)
        assert economy.upgrade_infrastructure(region) is True
        assert region.infrastructure.level == 2
        assert region.wealth == 50

    def test_upgrade_refused_when_poor(self):
        economy = RegionEconomy(SimulationConfig())
        region = _make_region(wealth=50)
        assert economy.upgrade_infrastructure(region) is False
        assert region.infrastructure.level == 1
        assert region.wealth == 50


class TestEconomicCycle:
    def test_starts_in_expansion(self):
        cycle = EconomicCycle(SimulationConfig())
        assert cycle.phase_name == "expansion"
        assert cycle.multiplier == 1.05

    def test_phase_changes_after_duration(self):
        cycle = EconomicCycle(SimulationConfig())
        changes = [cycle.advance() for _ in range(5)]
        assert changes == [False, False, False, False, True]
        assert cycle.phase_name == "peak"
        assert cycle.multiplier == 1.0

    def test_wraps_around(self):
        cycle = EconomicCycle(SimulationConfig())
        for _ in range(5 + 3 + 5 + 4):
            cycle.advance()
        assert cycle.phase_name == "expansion"

    def test_custom_start_phase(self):
        config = SimulationConfig()
        config.configure("cycle_config", start_phase="contraction")
        cycle = EconomicCycle(config)
        assert cycle.multiplier == 0.95

    def test_disabled(self):
        config = SimulationConfig()
        config.configure("cycle_config", enabled=False)
        cycle = EconomicCycle(config)
        assert cycle.multiplier == 1.0
        assert cycle.phase_name == "none"
        assert cycle.advance() is False
