"""
Master configuration for the regional economy simulation.

Every tunable constant lives here, grouped into dict-valued sub-configs
the same way for each subsystem. Nothing in the turn pipeline is
hardcoded.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from econsim.core.errors import ConfigurationError

PRODUCTION_MODELS = ("linear", "cobb_douglas")
CONFIG_SECTIONS = (
    "production_config",
    "economy_config",
    "population_config",
    "trade_config",
    "market_config",
    "cycle_config",
)


@dataclass
class SimulationConfig:
    """
    Master configuration for one simulation run.

    Use ``to_dict()`` / ``from_dict()`` for serialization and comparison,
    and ``validate()`` before handing the config to an engine.
    """

    # === Experiment identity ===
    experiment_name: str = "default"
    random_seed: int | None = None
    turns_to_run: int = 50

    # === Production ===
    # 'linear' keeps production as a running value perturbed each turn;
    # 'cobb_douglas' derives it from labor and infrastructure every turn.
    production_config: dict[str, Any] = field(default_factory=lambda: {
        "production_model": "linear",
        "productivity_factor": 1.0,
        "labor_elasticity": 0.5,
        "capital_elasticity": 0.5,
        "quality_threshold": 1.5,   # input stock / required ratio before quality kicks in
        "quality_ratio_cap": 3.0,
        "quality_step": 0.1,
        "quality_min": 0.5,
        "quality_max": 1.5,
    })

    # === Region economy ===
    economy_config: dict[str, Any] = field(default_factory=lambda: {
        "wealth_production_multiplier": 2,
        "fluctuation_min": -2,
        "fluctuation_max": 2,
        "resource_balance_weight": 1.0,
        "satisfaction_penalty_threshold": 0.5,
        "satisfaction_penalty_scale": 20,
        "maintenance_per_level": 0.5,
        "upgrade_cost_per_level": 50,
        "capital_return": 10.0,
        "wealth_limit": 1_000_000_000,
    })

    # === Population / satisfaction ===
    population_config: dict[str, Any] = field(default_factory=lambda: {
        "low_satisfaction": 0.5,
        "high_satisfaction": 0.8,
        "decline_rate": 10,
        "growth_rate": 15,
        "reinvestment_rate": 0.5,
        "min_labor": 0,
        "wealth_demand_factor": 0.0,
        "demand_price_exponent": 0.5,
    })

    # === Trade ===
    trade_config: dict[str, Any] = field(default_factory=lambda: {
        "trade_radius": 2.0,
        "max_trading_partners": 3,
        "trade_efficiency": 0.8,
        "min_trade_volume": 0.1,
        "max_trade_volume": 50.0,
        "trade_value_rate": 0.5,
        "exporter_share": 1.0,
        "importer_share": 0.5,
        "history_limit": 50,
    })

    # === Market ===
    market_config: dict[str, Any] = field(default_factory=lambda: {
        "price_volatility": 0.2,
        "demand_elasticity": 0.1,
        "price_jitter": 0.05,
        "history_length": 20,
        "supply_floor": 0.1,
        "default_price": 10.0,
    })

    # === Economic cycle ===
    cycle_config: dict[str, Any] = field(default_factory=lambda: {
        "enabled": True,
        "start_phase": "expansion",
        "phases": [
            {"name": "expansion", "multiplier": 1.05, "duration": 5},
            {"name": "peak", "multiplier": 1.0, "duration": 3},
            {"name": "contraction", "multiplier": 0.95, "duration": 5},
            {"name": "recovery", "multiplier": 1.02, "duration": 4},
        ],
    })

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def validate(self) -> None:
        """Raise ConfigurationError if any constant is malformed or out of range."""
        self._check_types()
        try:
            self._check_ranges()
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise ConfigurationError(f"Malformed configuration: {exc!r}") from exc

    def _check_types(self) -> None:
        if isinstance(self.turns_to_run, bool) or not isinstance(self.turns_to_run, int):
            raise ConfigurationError(
                f"turns_to_run must be an integer, got {self.turns_to_run!r}"
            )
        seed = self.random_seed
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            raise ConfigurationError(f"random_seed must be an integer, got {seed!r}")
        defaults = SimulationConfig()
        for section in CONFIG_SECTIONS:
            values = getattr(self, section)
            if not isinstance(values, dict):
                raise ConfigurationError(f"{section} must be a mapping, got {values!r}")
            for key, default in getattr(defaults, section).items():
                if isinstance(default, bool) or not isinstance(default, (int, float)):
                    continue
                value = values.get(key)
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ConfigurationError(
                        f"{section}.{key} must be a number, got {value!r}"
                    )

    def _check_ranges(self) -> None:
        pc = self.production_config
        if pc.get("production_model") not in PRODUCTION_MODELS:
            raise ConfigurationError(
                f"production_model must be one of {PRODUCTION_MODELS}, "
                f"got {pc.get('production_model')!r}"
            )
        for key in ("labor_elasticity", "capital_elasticity"):
            if not 0.0 < pc[key] <= 1.0:
                raise ConfigurationError(f"{key} must be in (0, 1], got {pc[key]}")
        if pc["productivity_factor"] <= 0:
            raise ConfigurationError("productivity_factor must be positive")

        ec = self.economy_config
        if ec["fluctuation_min"] > ec["fluctuation_max"]:
            raise ConfigurationError("fluctuation_min must not exceed fluctuation_max")
        if ec["maintenance_per_level"] < 0:
            raise ConfigurationError("maintenance_per_level must be non-negative")

        pop = self.population_config
        if not 0.0 <= pop["low_satisfaction"] <= pop["high_satisfaction"] <= 1.0:
            raise ConfigurationError(
                "satisfaction thresholds must satisfy 0 <= low <= high <= 1"
            )
        if pop["min_labor"] < 0:
            raise ConfigurationError("min_labor must be non-negative")

        tc = self.trade_config
        if not 0.0 < tc["trade_efficiency"] <= 1.0:
            raise ConfigurationError(
                f"trade_efficiency must be in (0, 1], got {tc['trade_efficiency']}"
            )
        if tc["max_trading_partners"] < 0:
            raise ConfigurationError("max_trading_partners must be non-negative")
        if tc["trade_radius"] < 0:
            raise ConfigurationError("trade_radius must be non-negative")
        if tc["min_trade_volume"] <= 0:
            raise ConfigurationError("min_trade_volume must be positive")

        mc = self.market_config
        if not 0.0 < mc["price_volatility"] < 1.0:
            raise ConfigurationError(
                f"price_volatility must be in (0, 1), got {mc['price_volatility']}"
            )
        if not 0.0 < mc["demand_elasticity"] <= 0.5:
            raise ConfigurationError(
                f"demand_elasticity must be in (0, 0.5], got {mc['demand_elasticity']}"
            )
        if not 0.0 <= mc["price_jitter"] < 1.0:
            raise ConfigurationError("price_jitter must be in [0, 1)")
        if mc["history_length"] < 1:
            raise ConfigurationError("history_length must be at least 1")
        if mc["supply_floor"] <= 0 or mc["default_price"] <= 0:
            raise ConfigurationError("supply_floor and default_price must be positive")

        cc = self.cycle_config
        phases = cc.get("phases") or []
        if cc.get("enabled", True):
            if not phases:
                raise ConfigurationError("cycle_config.phases must not be empty")
            names = [p["name"] for p in phases]
            if cc.get("start_phase", names[0]) not in names:
                raise ConfigurationError(
                    f"start_phase {cc.get('start_phase')!r} is not a configured phase"
                )
            for p in phases:
                if p["multiplier"] <= 0 or p["duration"] < 1:
                    raise ConfigurationError(
                        f"cycle phase {p['name']!r} needs multiplier > 0 and duration >= 1"
                    )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SimulationConfig:
        """Deserialize from a dict.

        Sub-config dicts are merged over the defaults, so a partial
        ``{"trade_config": {"trade_efficiency": 0.5}}`` keeps every other
        trade constant.
        """
        defaults = cls()
        kwargs: dict[str, Any] = {}
        for k, v in d.items():
            if k.startswith("_") or not hasattr(defaults, k):
                continue
            current = getattr(defaults, k)
            if isinstance(current, dict) and isinstance(v, dict):
                merged = dict(current)
                merged.update(v)
                kwargs[k] = merged
            else:
                kwargs[k] = v
        return cls(**kwargs)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)

    @classmethod
    def from_json(cls, s: str) -> SimulationConfig:
        return cls.from_dict(json.loads(s))

    def configure(self, section: str, **kwargs: Any) -> None:
        """Update parameters inside one of the ``*_config`` sections."""
        target = getattr(self, section, None)
        if not isinstance(target, dict):
            raise ConfigurationError(f"Unknown config section: {section!r}")
        target.update(kwargs)

    def diff(self, other: SimulationConfig) -> dict[str, tuple[Any, Any]]:
        """Return parameters that differ between two configs."""
        diffs: dict[str, tuple[Any, Any]] = {}
        for k in self.to_dict():
            v1 = getattr(self, k)
            v2 = getattr(other, k)
            if v1 != v2:
                diffs[k] = (v1, v2)
        return diffs
