"""Per-turn metrics endpoints."""

from __future__ import annotations

from dataclasses import fields
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request

from econsim.metrics.collector import TurnMetrics

router = APIRouter()

_METRIC_FIELDS = {f.name for f in fields(TurnMetrics)}


def _get_collector(request: Request, session_id: str):
    mgr = request.app.state.session_manager
    try:
        return mgr.get_session(session_id).collector
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")


@router.get("/{session_id}/turns")
def get_turns(
    session_id: str,
    request: Request,
    from_turn: int = Query(0, ge=0),
    to_turn: int | None = Query(None),
) -> list[dict[str, Any]]:
    collector = _get_collector(request, session_id)
    exported = collector.export_for_visualization()
    end = to_turn if to_turn is not None else len(exported)
    return exported[from_turn:end]


@router.get("/{session_id}/summary")
def get_summary(session_id: str, request: Request) -> dict[str, Any]:
    return _get_collector(request, session_id).get_summary()


@router.get("/{session_id}/time-series/{field_name}")
def get_time_series(session_id: str, field_name: str, request: Request) -> dict[str, Any]:
    collector = _get_collector(request, session_id)
    if field_name not in _METRIC_FIELDS:
        raise HTTPException(status_code=400, detail=f"Unknown metric field: '{field_name}'")
    return {
        "field": field_name,
        "turns": collector.get_time_series("turn"),
        "values": collector.get_time_series(field_name),
    }
