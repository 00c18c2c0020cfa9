"""Tests for TradeEngine, TradeHistory and spatial indexes."""

import pytest

from econsim.core.config import SimulationConfig
from econsim.core.context import SimulationContext
from econsim.core.region import RegionEconomy
from econsim.core.scenario import Scenario
from econsim.core.spatial import AdjacencyIndex, CoordinateIndex
from econsim.core.trade import TradeEngine, TradeHistory, TradeTransaction


def _region(name: str, x: float, **overrides) -> dict:
    d = {
        "name": name, "wealth": 100, "production": 50, "labor": 100,
        "satisfaction": 0.7, "position": [x, 0.0],
    }
    d.update(overrides)
    return d


def _make_config(**trade) -> SimulationConfig:
    config = SimulationConfig(random_seed=42)
    config.configure("trade_config", **trade)
    return config


def _make_context(
    regions: list[dict],
    config: SimulationConfig | None = None,
    transport_factor: float = 1.0,
) -> SimulationContext:
    scenario = Scenario.from_dict({
        "resources": [{"name": "Iron", "base_value": 15.0, "transport_factor": transport_factor}],
        "regions": regions,
    })
    ctx = SimulationContext.build(config or _make_config(), scenario)
    for region in ctx.regions.values():
        region.ledger.generate()
        region.ledger.calculate_production()
        region.ledger.calculate_demand(region.labor)
    return ctx


def _exporter(name: str = "Ironhold", x: float = 0.0, output: float = 100.0) -> dict:
    return _region(name, x, base_production={"Iron": output})


def _importer(name: str, x: float, need: float = 40.0) -> dict:
    return _region(name, x, consumption_per_capita={"Iron": need / 100})


def _run(ctx: SimulationContext):
    config = ctx.config
    return TradeEngine(config, RegionEconomy(config)).run(ctx)


class TestTradeExecution:
    def test_surplus_meets_deficit(self):
        ctx = _make_context([_exporter(), _importer("Plainsworth", 1.0)])
        result = _run(ctx)

        assert result.errors == []
        assert result.transactions == [
            TradeTransaction("Ironhold", "Plainsworth", "Iron", 40.0, pytest.approx(32.0)),
        ]
        exporter = ctx.regions["Ironhold"]
        importer = ctx.regions["Plainsworth"]
        assert exporter.ledger.get_amount("Iron") == pytest.approx(60.0)
        assert importer.ledger.get_amount("Iron") == pytest.approx(32.0)
        # value = 32 * 0.5; exporter takes the full value, importer half
        assert exporter.wealth == 116
        assert importer.wealth == 108

    def test_received_never_exceeds_shipped(self):
        ctx = _make_context(
            [_exporter(), _importer("Plainsworth", 1.0)], transport_factor=2.0,
        )
        tx = _run(ctx).transactions[0]
        assert tx.received == pytest.approx(tx.shipped)

    def test_transport_factor_reduces_delivery(self):
        ctx = _make_context(
            [_exporter(), _importer("Plainsworth", 1.0)], transport_factor=0.5,
        )
        tx = _run(ctx).transactions[0]
        assert tx.received == pytest.approx(40.0 * 0.4)

    def test_max_trade_volume(self):
        ctx = _make_context(
            [_exporter(), _importer("Plainsworth", 1.0)],
            config=_make_config(max_trade_volume=10.0),
        )
        tx = _run(ctx).transactions[0]
        assert tx.shipped == pytest.approx(10.0)

    def test_shipped_limited_by_exporter_stock(self):
        ctx = _make_context([_exporter(), _importer("Plainsworth", 1.0)])
        ctx.regions["Ironhold"].ledger.remove_resource("Iron", 85.0)
        tx = _run(ctx).transactions[0]
        assert tx.shipped == pytest.approx(15.0)

    def test_below_minimum_volume_not_traded(self):
        ctx = _make_context([_exporter(), _importer("Plainsworth", 1.0, need=0.05)])
        result = _run(ctx)
        assert result.transactions == []
        assert ctx.trade_history.trade_count == 0

    def test_no_deficit_no_trade(self):
        ctx = _make_context([_exporter(), _exporter("Otherhold", 1.0)])
        assert _run(ctx).transactions == []

    def test_out_of_radius(self):
        ctx = _make_context([_exporter(), _importer("Farland", 5.0)])
        assert _run(ctx).transactions == []

    def test_surplus_split_in_lexical_order(self):
        ctx = _make_context(
            [_exporter(output=50.0), _importer("Cedar", 1.0), _importer("Birch", 1.0)],
        )
        txs = _run(ctx).transactions
        assert [(t.importer, t.shipped) for t in txs] == [
            ("Birch", pytest.approx(40.0)),
            ("Cedar", pytest.approx(10.0)),
        ]

    def test_shipped_within_pre_trade_surplus(self):
        ctx = _make_context(
            [_exporter(output=60.0)] + [_importer(n, 1.0) for n in ("Ash", "Birch", "Cedar")],
        )
        surplus = ctx.regions["Ironhold"].ledger.surplus("Iron")
        txs = _run(ctx).transactions
        assert sum(t.shipped for t in txs) <= surplus + 1e-9
        assert all(0 < t.received <= t.shipped for t in txs)

    def test_max_trading_partners(self):
        ctx = _make_context(
            [_exporter()] + [_importer(n, 1.0, need=10.0) for n in ("Ash", "Birch", "Cedar")],
            config=_make_config(max_trading_partners=2),
        )
        txs = _run(ctx).transactions
        assert [t.importer for t in txs] == ["Ash", "Birch"]

    def test_missing_region_isolated(self):
        ctx = _make_context([_exporter(), _importer("Plainsworth", 1.0)])

        class _GhostIndex:
            def neighbors(self, region, radius):
                return ["Ghost", "Plainsworth"] if region == "Ironhold" else []

        ctx.spatial = _GhostIndex()
        result = _run(ctx)
        assert len(result.errors) == 1
        assert "Ghost" in result.errors[0]
        assert [t.importer for t in result.transactions] == ["Plainsworth"]


class TestTradeHistory:
    def test_recorded_for_both_parties(self):
        ctx = _make_context([_exporter(), _importer("Plainsworth", 1.0)])
        _run(ctx)
        exports = ctx.trade_history.get_exports("Ironhold")
        imports = ctx.trade_history.get_imports("Plainsworth")
        assert len(exports) == 1 and exports[0].partner == "Plainsworth"
        assert exports[0].amount == pytest.approx(40.0)
        assert imports[0].amount == pytest.approx(32.0)
        assert ctx.trade_history.total_volume == pytest.approx(32.0)

    def test_cleared_each_run(self):
        ctx = _make_context([_exporter(), _importer("Plainsworth", 1.0)])
        _run(ctx)
        ctx.regions["Ironhold"].ledger.remove_resource("Iron", 1000.0)
        _run(ctx)
        assert ctx.trade_history.get_exports("Ironhold") == []

    def test_bounded(self):
        history = TradeHistory(limit=2)
        for i in range(5):
            history.record(TradeTransaction("A", "B", "Iron", 1.0 + i, 1.0), turn=i)
        assert [r.turn for r in history.get_exports("A")] == [3, 4]
        assert history.trade_count == 5

    def test_unknown_region_empty(self):
        assert TradeHistory().to_dict("Nowhere") == {"imports": [], "exports": []}


class TestSpatialIndexes:
    def test_coordinate_index(self):
        ctx = _make_context([_exporter(), _importer("B", 1.5), _importer("C", 3.0)])
        index = CoordinateIndex(ctx.regions.values())
        assert index.neighbors("Ironhold", 2.0) == ["B"]
        assert index.neighbors("B", 2.0) == ["C", "Ironhold"]
        assert index.neighbors("Unknown", 2.0) == []

    def test_region_without_position_reachable(self):
        ctx = _make_context([_exporter(), _region("Drifter", 0.0, position=None)])
        index = CoordinateIndex(ctx.regions.values())
        assert index.neighbors("Ironhold", 0.5) == ["Drifter"]

    def test_adjacency_hops(self):
        index = AdjacencyIndex({"A": ["B"], "B": ["C"], "C": ["D"]})
        assert index.neighbors("A", 1) == ["B"]
        assert index.neighbors("A", 2) == ["B", "C"]
        assert index.neighbors("C", 1) == ["B", "D"]
        assert index.neighbors("Z", 3) == []
