"""Tests for ResourceLedger."""

import pytest

from econsim.core.ledger import ResourceLedger
from econsim.core.resources import ResourceCategory, ResourceDefinition, ResourceRegistry


def _make_registry() -> ResourceRegistry:
    return ResourceRegistry([
        ResourceDefinition("Food", essential=True, perish_rate=0.1),
        ResourceDefinition("Iron", category=ResourceCategory.RAW),
        ResourceDefinition("Tools", category=ResourceCategory.PROCESSED),
    ])


def _make_ledger(**kwargs) -> ResourceLedger:
    return ResourceLedger(_make_registry(), **kwargs)


class TestGenerate:
    def test_adds_baseline(self):
        ledger = _make_ledger(initial={"Food": 5.0}, base_production={"Food": 10.0})
        added = ledger.generate()
        assert added == {"Food": 10.0}
        assert ledger.get_amount("Food") == 15.0

    def test_terrain_by_resource_name(self):
        ledger = _make_ledger(
            base_production={"Food": 10.0}, terrain_modifiers={"Food": 1.5},
        )
        ledger.generate()
        assert ledger.get_amount("Food") == pytest.approx(15.0)

    def test_terrain_by_category(self):
        ledger = _make_ledger(
            base_production={"Iron": 4.0, "Tools": 4.0},
            terrain_modifiers={"raw": 2.0},
        )
        ledger.generate()
        assert ledger.get_amount("Iron") == pytest.approx(8.0)
        assert ledger.get_amount("Tools") == pytest.approx(4.0)

    def test_never_decreases(self):
        ledger = _make_ledger(
            initial={"Food": 7.0, "Iron": 3.0},
            base_production={"Food": -5.0, "Iron": 2.0},
            terrain_modifiers={"Iron": -1.0},
        )
        before = ledger.get_all()
        ledger.generate()
        after = ledger.get_all()
        for name in before:
            assert after[name] >= before[name]


class TestAddRemove:
    def test_remove_available(self):
        ledger = _make_ledger(initial={"Food": 10.0})
        assert ledger.remove_resource("Food", 4.0) is True
        assert ledger.get_amount("Food") == 6.0

    def test_remove_more_than_available_clamps_to_zero(self):
        ledger = _make_ledger(initial={"Food": 10.0})
        assert ledger.remove_resource("Food", 25.0) is False
        assert ledger.get_amount("Food") == 0.0

    def test_remove_unknown_is_noop(self):
        ledger = _make_ledger(initial={"Food": 10.0})
        assert ledger.remove_resource("Gold", 1.0) is False
        assert ledger.get_all() == {"Food": 10.0, "Iron": 0.0, "Tools": 0.0}

    def test_add_unknown_ignored(self):
        ledger = _make_ledger()
        assert ledger.add_resource("Gold", 5.0) is False
        assert "Gold" not in ledger.get_all()

    def test_add_non_positive_ignored(self):
        ledger = _make_ledger(initial={"Food": 1.0})
        assert ledger.add_resource("Food", -3.0) is False
        assert ledger.get_amount("Food") == 1.0

    def test_negative_initial_clamped(self):
        ledger = _make_ledger(initial={"Food": -4.0})
        assert ledger.get_amount("Food") == 0.0


class TestSnapshots:
    def test_get_all_is_a_copy(self):
        ledger = _make_ledger(initial={"Food": 10.0})
        snap = ledger.get_all()
        snap["Food"] = 999.0
        assert ledger.get_amount("Food") == 10.0

    def test_rate_maps_are_copies(self):
        ledger = _make_ledger(base_production={"Food": 2.0})
        ledger.calculate_production()
        rates = ledger.get_production_rates()
        rates["Food"] = 0.0
        assert ledger.get_production_rates()["Food"] == 2.0
        ledger.get_consumption_rates()["Food"] = 5.0
        assert ledger.get_consumption_rates()["Food"] == 0.0


class TestRates:
    def test_calculate_production_includes_recipes(self):
        ledger = _make_ledger(
            base_production={"Food": 10.0}, terrain_modifiers={"Food": 0.5},
        )
        rates = ledger.calculate_production({"Tools": 1.5})
        assert rates["Food"] == pytest.approx(5.0)
        assert rates["Tools"] == pytest.approx(1.5)
        assert rates["Iron"] == 0.0

    def test_calculate_production_does_not_touch_quantities(self):
        ledger = _make_ledger(initial={"Food": 3.0}, base_production={"Food": 10.0})
        ledger.calculate_production()
        assert ledger.get_amount("Food") == 3.0

    def test_calculate_demand_per_capita(self):
        ledger = _make_ledger(consumption_per_capita={"Food": 0.4})
        rates = ledger.calculate_demand(100)
        assert rates["Food"] == pytest.approx(40.0)
        assert rates["Iron"] == 0.0

    def test_demand_falls_with_price(self):
        ledger = _make_ledger(consumption_per_capita={"Food": 0.4})
        rates = ledger.calculate_demand(100, price_ratios={"Food": 4.0}, price_exponent=0.5)
        assert rates["Food"] == pytest.approx(20.0)

    def test_demand_rises_with_wealth(self):
        ledger = _make_ledger(consumption_per_capita={"Food": 0.5})
        rates = ledger.calculate_demand(10, wealth=1000, wealth_factor=0.001)
        assert rates["Food"] == pytest.approx(10.0)

    def test_no_labor_no_demand(self):
        ledger = _make_ledger(consumption_per_capita={"Food": 0.4})
        assert ledger.calculate_demand(0)["Food"] == 0.0

    def test_surplus_and_balance(self):
        ledger = _make_ledger(
            base_production={"Food": 10.0, "Iron": 1.0},
            consumption_per_capita={"Food": 0.04, "Iron": 0.05},
        )
        ledger.calculate_production()
        ledger.calculate_demand(100)
        assert ledger.surplus("Food") == pytest.approx(6.0)
        assert ledger.surplus("Iron") == pytest.approx(-4.0)
        assert ledger.balance() == pytest.approx(2.0)


class TestConsumeAndSpoil:
    def test_consume_reports_shortfall(self):
        ledger = _make_ledger(initial={"Food": 10.0}, consumption_per_capita={"Food": 0.4})
        ledger.calculate_demand(100)
        shortfalls = ledger.consume()
        assert shortfalls == {"Food": pytest.approx(30.0)}
        assert ledger.get_amount("Food") == 0.0

    def test_consume_with_enough_stock(self):
        ledger = _make_ledger(initial={"Food": 50.0}, consumption_per_capita={"Food": 0.4})
        ledger.calculate_demand(100)
        assert ledger.consume() == {}
        assert ledger.get_amount("Food") == pytest.approx(10.0)

    def test_spoil_applies_perish_rate(self):
        ledger = _make_ledger(initial={"Food": 100.0, "Iron": 100.0})
        losses = ledger.spoil()
        assert losses == {"Food": pytest.approx(10.0)}
        assert ledger.get_amount("Food") == pytest.approx(90.0)
        assert ledger.get_amount("Iron") == 100.0
