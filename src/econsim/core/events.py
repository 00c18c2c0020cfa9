"""Outbound notifications returned from each turn."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class RegionChanged:
    """A region's observable state changed during a turn."""
    turn: int
    region: str
    nation: str | None
    wealth: int
    production: int
    wealth_delta: int
    production_delta: int
    satisfaction: float
    kind: str = "region_changed"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MarketPricesUpdated:
    """Market-wide price update, one per completed turn."""
    turn: int
    prices: dict[str, float]
    kind: str = "market_prices_updated"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


Event = Union[RegionChanged, MarketPricesUpdated]


@dataclass
class TurnResult:
    """Outcome of ``advance_turn``: success, or a reason string on failure."""
    success: bool
    turn: int
    reason: str | None = None
    events: list[Event] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.success

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "turn": self.turn,
            "reason": self.reason,
            "events": [e.to_dict() for e in self.events],
            "errors": list(self.errors),
        }
