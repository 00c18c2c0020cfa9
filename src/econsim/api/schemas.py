"""
Pydantic models for API request/response validation.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Any


# === Simulation ===

class CreateSessionRequest(BaseModel):
    config: dict[str, Any] | None = None
    preset: str | None = None
    scenario: dict[str, Any] | None = None
    scenario_preset: str | None = None
    name: str | None = None


class StepRequest(BaseModel):
    n: int = Field(default=1, ge=1, le=10_000)


class SessionSummary(BaseModel):
    id: str
    name: str
    status: str
    current_turn: int
    max_turns: int
    region_count: int


class SessionResponse(SessionSummary):
    config: dict[str, Any]
    cycle: dict[str, Any]
    last_result: dict[str, Any] | None = None


# === Regions ===

class RegionResponse(BaseModel):
    name: str
    nation: str | None
    wealth: int
    production: int
    labor: int
    satisfaction: float
    infrastructure_type: str
    infrastructure_level: int
    capital_investment: float
    wealth_delta: int
    production_delta: int
    resources: dict[str, float]
    production_rates: dict[str, float]
    consumption_rates: dict[str, float]
    active_recipes: list[str]


class TradeRecordResponse(BaseModel):
    turn: int
    partner: str
    resource: str
    amount: float


class TradeHistoryResponse(BaseModel):
    region: str
    imports: list[TradeRecordResponse]
    exports: list[TradeRecordResponse]


class UpgradeResponse(BaseModel):
    region: str
    upgraded: bool
    infrastructure_level: int
    wealth: int


class RecipeRequest(BaseModel):
    recipe: str
    active: bool = True


# === Market ===

class MarketResponse(BaseModel):
    turn: int
    prices: dict[str, float]
    base_prices: dict[str, float]
    supply: dict[str, float]
    demand: dict[str, float]
    price_index: float


class PriceHistoryResponse(BaseModel):
    resource: str
    base_price: float
    current_price: float
    history: list[float]


# === Nations ===

class NationResponse(BaseModel):
    name: str
    regions: list[str]
    total_wealth: int
    total_production: int
    total_labor: int
    mean_satisfaction: float
    resources: dict[str, float]
    production_rates: dict[str, float]
    consumption_rates: dict[str, float]
    resource_balance: dict[str, float]
