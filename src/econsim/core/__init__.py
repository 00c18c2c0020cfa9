"""Simulation core: regions, ledgers, production, market, trade and the turn loop."""

from econsim.core.config import SimulationConfig
from econsim.core.engine import SimulationEngine
from econsim.core.errors import ConfigurationError, EconSimError, TurnInProgressError
from econsim.core.events import MarketPricesUpdated, RegionChanged, TurnResult
from econsim.core.market import MarketSnapshot
from econsim.core.nation import NationSummary
from econsim.core.region import RegionSnapshot
from econsim.core.scenario import Scenario

__all__ = [
    "SimulationConfig",
    "SimulationEngine",
    "ConfigurationError",
    "EconSimError",
    "TurnInProgressError",
    "MarketPricesUpdated",
    "RegionChanged",
    "TurnResult",
    "MarketSnapshot",
    "NationSummary",
    "RegionSnapshot",
    "Scenario",
]
