"""
Experiment presets — pre-configured scenarios and configurations.

Scenario presets return a Scenario (resources + regions). Config presets
return a SimulationConfig with settings aimed at one question about the
economy (does trade equalize wealth, how far do prices swing, ...).
"""

from __future__ import annotations

from typing import Any, Callable

from econsim.core.config import SimulationConfig
from econsim.core.scenario import Scenario


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

BASE_RESOURCES: list[dict[str, Any]] = [
    {
        "name": "Food", "category": "raw", "base_value": 10.0,
        "volatility": 1.0, "perish_rate": 0.05, "transport_factor": 1.0,
        "essential": True,
        "recipes": [],
    },
    {
        "name": "Wood", "category": "raw", "base_value": 5.0,
        "volatility": 0.6, "transport_factor": 0.9,
    },
    {
        "name": "Iron", "category": "raw", "base_value": 15.0,
        "volatility": 0.8, "transport_factor": 0.8,
    },
    {
        "name": "Tools", "category": "processed", "base_value": 30.0,
        "volatility": 0.5, "transport_factor": 1.2, "essential": True,
        "recipes": [{
            "name": "forge_tools",
            "inputs": [
                {"resource": "Iron", "amount": 2.0},
                {"resource": "Wood", "amount": 1.0},
            ],
            "output_amount": 1.0,
            "required_infrastructure": "workshop",
            "min_infrastructure_level": 2,
            "quality_affects_output": True,
        }],
    },
    {
        "name": "Bread", "category": "processed", "base_value": 14.0,
        "volatility": 1.0, "perish_rate": 0.2,
        "recipes": [{
            "name": "bake_bread",
            "inputs": [
                {"resource": "Food", "amount": 3.0},
                {"resource": "Wood", "amount": 1.0, "consumed": False},
            ],
            "output_amount": 4.0,
            "production_time": 2,
        }],
    },
]


def baseline_scenario() -> Scenario:
    """Four regions of two nations with complementary resource endowments."""
    return Scenario.from_dict({
        "resources": BASE_RESOURCES,
        "regions": [
            {
                "name": "Highpeak", "nation": "Aldria",
                "wealth": 120, "production": 40, "labor": 80,
                "infrastructure_level": 2, "infrastructure_type": "workshop",
                "position": [0.0, 0.0],
                "terrain_modifiers": {"Iron": 1.5, "Food": 0.5},
                "initial_resources": {"Food": 30.0, "Iron": 20.0, "Wood": 10.0},
                "base_production": {"Food": 10.0, "Iron": 20.0, "Wood": 4.0},
                "consumption_per_capita": {"Food": 0.2, "Tools": 0.02, "Wood": 0.05},
                "active_recipes": ["forge_tools"],
            },
            {
                "name": "Northmarch", "nation": "Aldria",
                "wealth": 100, "production": 50, "labor": 100,
                "position": [1.0, 1.0],
                "terrain_modifiers": {"raw": 1.1},
                "initial_resources": {"Food": 60.0, "Wood": 40.0},
                "base_production": {"Food": 25.0, "Wood": 15.0},
                "consumption_per_capita": {"Food": 0.2, "Tools": 0.02, "Wood": 0.05},
                "active_recipes": ["bake_bread"],
            },
            {
                "name": "Riverlands", "nation": "Belmora",
                "wealth": 90, "production": 55, "labor": 120,
                "position": [2.0, 0.0],
                "terrain_modifiers": {"Food": 1.4},
                "initial_resources": {"Food": 80.0},
                "base_production": {"Food": 30.0, "Wood": 5.0},
                "consumption_per_capita": {"Food": 0.2, "Tools": 0.02, "Iron": 0.05},
            },
            {
                "name": "Saltcoast", "nation": "Belmora",
                "wealth": 70, "production": 35, "labor": 60,
                "position": [3.5, 1.5],
                "initial_resources": {"Food": 20.0, "Iron": 10.0},
                "base_production": {"Food": 8.0, "Iron": 6.0},
                "consumption_per_capita": {"Food": 0.2, "Wood": 0.1},
            },
        ],
    })


def trade_pair_scenario() -> Scenario:
    """Two neighbours: one mines Iron, the other needs it."""
    return Scenario.from_dict({
        "resources": [
            {"name": "Iron", "category": "raw", "base_value": 15.0},
        ],
        "regions": [
            {
                "name": "Ironhold", "wealth": 100, "production": 50, "labor": 100,
                "satisfaction": 0.7, "position": [0.0, 0.0],
                "base_production": {"Iron": 100.0},
            },
            {
                "name": "Plainsworth", "wealth": 100, "production": 50, "labor": 100,
                "satisfaction": 0.7, "position": [1.0, 0.0],
                "consumption_per_capita": {"Iron": 0.4},
            },
        ],
    })


def ring_scenario(n: int = 6) -> Scenario:
    """``n`` identical regions connected in a ring (hop-count trade radius)."""
    names = [f"Region{i:02d}" for i in range(n)]
    regions = []
    for i, name in enumerate(names):
        # Alternate surplus and deficit so trade has something to move
        food = 30.0 if i % 2 == 0 else 5.0
        regions.append({
            "name": name, "nation": f"Nation{i % 3}",
            "wealth": 100, "production": 50, "labor": 100,
            "initial_resources": {"Food": 20.0},
            "base_production": {"Food": food},
            "consumption_per_capita": {"Food": 0.15},
        })
    adjacency = {names[i]: [names[(i + 1) % n]] for i in range(n)}
    return Scenario.from_dict({
        "resources": [BASE_RESOURCES[0]],
        "regions": regions,
        "adjacency": adjacency,
    })


SCENARIOS: dict[str, Callable[[], Scenario]] = {
    "baseline": baseline_scenario,
    "trade_pair": trade_pair_scenario,
    "ring": ring_scenario,
}


def get_scenario(name: str) -> Scenario:
    """Get a preset scenario by name."""
    if name not in SCENARIOS:
        raise KeyError(f"Unknown scenario: '{name}'. Available: {list(SCENARIOS.keys())}")
    return SCENARIOS[name]()


def list_scenarios() -> list[str]:
    return list(SCENARIOS.keys())


# ---------------------------------------------------------------------------
# Configurations
# ---------------------------------------------------------------------------

def baseline() -> SimulationConfig:
    """Standard baseline configuration with default parameters."""
    return SimulationConfig(experiment_name="baseline", turns_to_run=50)


def cobb_douglas() -> SimulationConfig:
    """Production derived each turn from labor and infrastructure."""
    config = SimulationConfig(experiment_name="cobb_douglas", turns_to_run=50)
    config.configure(
        "production_config",
        production_model="cobb_douglas",
        productivity_factor=5.0,
    )
    return config


def free_trade() -> SimulationConfig:
    """Lossless transport, long range and many partners."""
    config = SimulationConfig(experiment_name="free_trade", turns_to_run=50)
    config.configure(
        "trade_config",
        trade_radius=10.0,
        max_trading_partners=10,
        trade_efficiency=1.0,
        max_trade_volume=200.0,
    )
    return config


def autarky() -> SimulationConfig:
    """No trade at all: every region lives on its own production."""
    config = SimulationConfig(experiment_name="autarky", turns_to_run=50)
    config.configure("trade_config", trade_radius=0.0, max_trading_partners=0)
    return config


def volatile_market() -> SimulationConfig:
    """Prices swing hard and respond strongly to scarcity."""
    config = SimulationConfig(experiment_name="volatile_market", turns_to_run=50)
    config.configure(
        "market_config",
        price_volatility=0.5,
        demand_elasticity=0.5,
        price_jitter=0.2,
    )
    return config


def flat_cycle() -> SimulationConfig:
    """Economic cycle disabled, multiplier fixed at 1."""
    config = SimulationConfig(experiment_name="flat_cycle", turns_to_run=50)
    config.configure("cycle_config", enabled=False)
    return config


PRESETS: dict[str, Callable[[], SimulationConfig]] = {
    "baseline": baseline,
    "cobb_douglas": cobb_douglas,
    "free_trade": free_trade,
    "autarky": autarky,
    "volatile_market": volatile_market,
    "flat_cycle": flat_cycle,
}


def get_preset(name: str) -> SimulationConfig:
    """Get a preset config by name."""
    if name not in PRESETS:
        raise KeyError(f"Unknown preset: '{name}'. Available: {list(PRESETS.keys())}")
    return PRESETS[name]()


def list_presets() -> list[str]:
    """Return list of available preset names."""
    return list(PRESETS.keys())
