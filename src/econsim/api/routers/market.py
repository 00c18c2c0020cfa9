"""Market price endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from econsim.api.schemas import MarketResponse, PriceHistoryResponse

router = APIRouter()


def _get_engine(request: Request, session_id: str):
    mgr = request.app.state.session_manager
    try:
        return mgr.get_session(session_id).engine
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")


@router.get("/{session_id}", response_model=MarketResponse)
def get_market(session_id: str, request: Request):
    engine = _get_engine(request, session_id)
    return engine.get_market_snapshot().to_dict()


@router.get("/{session_id}/history/{resource}", response_model=PriceHistoryResponse)
def get_price_history(session_id: str, resource: str, request: Request):
    engine = _get_engine(request, session_id)
    market = engine.ctx.market
    if resource not in market.base_prices:
        raise HTTPException(status_code=404, detail=f"Resource '{resource}' not found")
    return {
        "resource": resource,
        "base_price": market.get_base_price(resource),
        "current_price": market.get_current_price(resource),
        "history": market.get_price_history(resource),
    }
