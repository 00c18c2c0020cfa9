"""
Trade engine: surplus-to-deficit transfers between nearby regions.

Each turn every exporter (lexical order) offers its surplus to importer
candidates within the trade radius (lexical order), resource by resource in
registry order. Shipped volume is capped by the exporter's remaining surplus
and stock, the importer's remaining deficit and the per-trade maximum;
transport losses reduce what arrives. Both sides earn wealth from the
received value, the exporter more than the importer.

A failure while evaluating or executing one candidate trade is logged and
skipped; it never aborts the rest of the trade phase.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from econsim.core.config import SimulationConfig
from econsim.core.region import RegionEconomy
from econsim.core.resources import ResourceDefinition

if TYPE_CHECKING:
    from econsim.core.context import SimulationContext

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TradeTransaction:
    """One transfer within a single turn."""
    exporter: str
    importer: str
    resource: str
    shipped: float
    received: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "exporter": self.exporter,
            "importer": self.importer,
            "resource": self.resource,
            "shipped": round(self.shipped, 4),
            "received": round(self.received, 4),
        }


@dataclass(frozen=True)
class TradeRecord:
    """A trade as seen from one party's side."""
    turn: int
    partner: str
    resource: str
    amount: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "turn": self.turn,
            "partner": self.partner,
            "resource": self.resource,
            "amount": round(self.amount, 4),
        }


class TradeHistory:
    """Recent imports and exports per region. Reporting only."""

    def __init__(self, limit: int = 50):
        self.limit = limit
        self._imports: dict[str, deque[TradeRecord]] = {}
        self._exports: dict[str, deque[TradeRecord]] = {}
        self.transactions: list[TradeTransaction] = []

    def clear(self) -> None:
        self._imports.clear()
        self._exports.clear()
        self.transactions = []

    def record(self, tx: TradeTransaction, turn: int) -> None:
        self.transactions.append(tx)
        self._exports.setdefault(tx.exporter, deque(maxlen=self.limit)).append(
            TradeRecord(turn, tx.importer, tx.resource, tx.shipped)
        )
        self._imports.setdefault(tx.importer, deque(maxlen=self.limit)).append(
            TradeRecord(turn, tx.exporter, tx.resource, tx.received)
        )

    def get_imports(self, region: str) -> list[TradeRecord]:
        return list(self._imports.get(region, ()))

    def get_exports(self, region: str) -> list[TradeRecord]:
        return list(self._exports.get(region, ()))

    @property
    def trade_count(self) -> int:
        return len(self.transactions)

    @property
    def total_volume(self) -> float:
        return sum(tx.received for tx in self.transactions)

    def to_dict(self, region: str) -> dict[str, Any]:
        return {
            "imports": [r.to_dict() for r in self.get_imports(region)],
            "exports": [r.to_dict() for r in self.get_exports(region)],
        }


@dataclass
class TradePhaseResult:
    transactions: list[TradeTransaction]
    errors: list[str]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class TradeEngine:

    def __init__(self, config: SimulationConfig, economy: RegionEconomy):
        self.config = config
        self.tc = config.trade_config
        self.economy = economy

    def efficiency(self, definition: ResourceDefinition) -> float:
        """Fraction of a shipment that arrives, never above 1."""
        return min(1.0, self.tc["trade_efficiency"] * definition.transport_factor)

    def run(self, ctx: SimulationContext) -> TradePhaseResult:
        ctx.trade_history.clear()
        partners: dict[str, set[str]] = defaultdict(set)
        surplus_left: dict[tuple[str, str], float] = {}
        deficit_left: dict[tuple[str, str], float] = {}
        executed: list[TradeTransaction] = []
        errors: list[str] = []

        for exporter_name in ctx.region_names():
            candidates = ctx.spatial.neighbors(exporter_name, self.tc["trade_radius"])
            for importer_name in sorted(candidates):
                if not self._can_partner(partners, exporter_name, importer_name):
                    continue
                for definition in ctx.registry:
                    try:
                        tx = self._match(
                            ctx, exporter_name, importer_name, definition,
                            surplus_left, deficit_left,
                        )
                        if tx is None:
                            continue
                        self.execute(ctx, tx)
                    except Exception as exc:
                        logger.warning(
                            "Trade %s -> %s (%s) failed",
                            exporter_name, importer_name, definition.name,
                            exc_info=True,
                        )
                        errors.append(
                            f"trade {exporter_name}->{importer_name} "
                            f"{definition.name}: {exc}"
                        )
                        continue
                    surplus_left[(exporter_name, tx.resource)] -= tx.shipped
                    deficit_left[(importer_name, tx.resource)] -= tx.received
                    partners[exporter_name].add(importer_name)
                    partners[importer_name].add(exporter_name)
                    ctx.trade_history.record(tx, ctx.turn)
                    executed.append(tx)
        return TradePhaseResult(transactions=executed, errors=errors)

    def _can_partner(
        self, partners: dict[str, set[str]], exporter: str, importer: str,
    ) -> bool:
        if importer in partners[exporter]:
            return True
        limit = self.tc["max_trading_partners"]
        return len(partners[exporter]) < limit and len(partners[importer]) < limit

    def _match(
        self,
        ctx: SimulationContext,
        exporter_name: str,
        importer_name: str,
        definition: ResourceDefinition,
        surplus_left: dict[tuple[str, str], float],
        deficit_left: dict[tuple[str, str], float],
    ) -> TradeTransaction | None:
        exporter = ctx.regions.get(exporter_name)
        importer = ctx.regions.get(importer_name)
        if exporter is None or importer is None:
            raise KeyError(
                f"unknown region {exporter_name if exporter is None else importer_name!r}"
            )
        name = definition.name
        min_volume = self.tc["min_trade_volume"]

        surplus = surplus_left.setdefault(
            (exporter_name, name), exporter.ledger.surplus(name),
        )
        if surplus <= min_volume:
            return None
        deficit = deficit_left.setdefault(
            (importer_name, name), -importer.ledger.surplus(name),
        )
        if deficit <= 0:
            return None

        shipped = min(
            surplus, deficit, self.tc["max_trade_volume"],
            exporter.ledger.get_amount(name),
        )
        if shipped < min_volume:
            return None
        received = shipped * self.efficiency(definition)
        if received <= 0:
            return None
        return TradeTransaction(exporter_name, importer_name, name, shipped, received)

    def execute(self, ctx: SimulationContext, tx: TradeTransaction) -> None:
        """Move goods and credit both parties."""
        exporter = ctx.regions[tx.exporter]
        importer = ctx.regions[tx.importer]
        exporter.ledger.remove_resource(tx.resource, tx.shipped)
        importer.ledger.add_resource(tx.resource, tx.received)
        value = tx.received * self.tc["trade_value_rate"]
        self.economy.credit(exporter, round(value * self.tc["exporter_share"]))
        self.economy.credit(importer, round(value * self.tc["importer_share"]))
