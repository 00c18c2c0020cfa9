"""Simulation session management endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from econsim.api.schemas import (
    CreateSessionRequest,
    SessionResponse,
    SessionSummary,
    StepRequest,
)
from econsim.core.config import SimulationConfig
from econsim.core.errors import ConfigurationError
from econsim.core.scenario import Scenario
from econsim.experiment.presets import get_preset

router = APIRouter()


def _session_response(session) -> dict:
    return {
        "id": session.id,
        "name": session.name,
        "status": session.status,
        "current_turn": session.current_turn,
        "max_turns": session.max_turns,
        "region_count": len(session.engine.ctx.regions),
        "config": session.config.to_dict(),
        "cycle": session.engine.get_cycle_state(),
        "last_result": session.last_result.to_dict() if session.last_result else None,
    }


@router.post("/sessions", response_model=SessionResponse)
def create_session(req: CreateSessionRequest, request: Request):
    mgr = request.app.state.session_manager

    try:
        config = None
        if req.preset:
            config = get_preset(req.preset)
        elif req.config:
            config = SimulationConfig.from_dict(req.config)

        scenario = req.scenario_preset
        if req.scenario:
            scenario = Scenario.from_dict(req.scenario)

        session = mgr.create_session(config=config, scenario=scenario, name=req.name)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ConfigurationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return _session_response(session)


@router.get("/sessions", response_model=list[SessionSummary])
def list_sessions(request: Request):
    mgr = request.app.state.session_manager
    return mgr.list_sessions()


@router.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    try:
        session = mgr.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return _session_response(session)


@router.delete("/sessions/{session_id}")
def delete_session(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    try:
        mgr.delete_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return {"deleted": True}


@router.post("/sessions/{session_id}/advance", response_model=SessionResponse)
def advance_session(session_id: str, req: StepRequest, request: Request):
    mgr = request.app.state.session_manager
    try:
        session = mgr.step(session_id, req.n)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return _session_response(session)


@router.post("/sessions/{session_id}/run", response_model=SessionResponse)
def run_session(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    try:
        session = mgr.run_full_async(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return _session_response(session)


@router.post("/sessions/{session_id}/reset", response_model=SessionResponse)
def reset_session(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    if mgr.is_running(session_id):
        raise HTTPException(status_code=409, detail="Cannot reset while running")
    try:
        session = mgr.reset_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return _session_response(session)
