"""Region query and mutation endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from econsim.api.schemas import (
    RecipeRequest,
    RegionResponse,
    TradeHistoryResponse,
    UpgradeResponse,
)
from econsim.core.errors import TurnInProgressError

router = APIRouter()


def _get_engine(request: Request, session_id: str):
    mgr = request.app.state.session_manager
    try:
        return mgr.get_session(session_id).engine
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")


def _region_not_found(name: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Region '{name}' not found")


@router.get("/{session_id}", response_model=list[RegionResponse])
def list_regions(session_id: str, request: Request):
    engine = _get_engine(request, session_id)
    return [snap.to_dict() for snap in engine.get_all_regions().values()]


@router.get("/{session_id}/{region_name}", response_model=RegionResponse)
def get_region(session_id: str, region_name: str, request: Request):
    engine = _get_engine(request, session_id)
    snap = engine.get_region(region_name)
    if snap is None:
        raise _region_not_found(region_name)
    return snap.to_dict()


@router.get("/{session_id}/{region_name}/trades", response_model=TradeHistoryResponse)
def get_region_trades(session_id: str, region_name: str, request: Request):
    engine = _get_engine(request, session_id)
    if engine.get_region(region_name) is None:
        raise _region_not_found(region_name)
    history = engine.ctx.trade_history.to_dict(region_name)
    return {"region": region_name, **history}


@router.post("/{session_id}/{region_name}/upgrade", response_model=UpgradeResponse)
def upgrade_region(session_id: str, region_name: str, request: Request):
    engine = _get_engine(request, session_id)
    try:
        upgraded = engine.upgrade_infrastructure(region_name)
    except KeyError:
        raise _region_not_found(region_name)
    except TurnInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    snap = engine.get_region(region_name)
    return {
        "region": region_name,
        "upgraded": upgraded,
        "infrastructure_level": snap.infrastructure_level,
        "wealth": snap.wealth,
    }


@router.post("/{session_id}/{region_name}/recipes", response_model=RegionResponse)
def set_recipe(session_id: str, region_name: str, req: RecipeRequest, request: Request):
    engine = _get_engine(request, session_id)
    if engine.ctx.registry.get_recipe(req.recipe) is None:
        raise HTTPException(status_code=404, detail=f"Recipe '{req.recipe}' not found")
    try:
        if req.active:
            engine.activate_recipe(region_name, req.recipe)
        else:
            engine.deactivate_recipe(region_name, req.recipe)
    except KeyError:
        raise _region_not_found(region_name)
    except TurnInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return engine.get_region(region_name).to_dict()
