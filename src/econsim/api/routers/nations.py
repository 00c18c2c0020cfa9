"""Nation aggregate endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from econsim.api.schemas import NationResponse

router = APIRouter()


def _get_engine(request: Request, session_id: str):
    mgr = request.app.state.session_manager
    try:
        return mgr.get_session(session_id).engine
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")


@router.get("/{session_id}", response_model=list[NationResponse])
def list_nations(session_id: str, request: Request):
    engine = _get_engine(request, session_id)
    return [n.to_dict() for n in engine.get_all_nations().values()]


@router.get("/{session_id}/{nation_name}", response_model=NationResponse)
def get_nation(session_id: str, nation_name: str, request: Request):
    engine = _get_engine(request, session_id)
    summary = engine.get_nation_summary(nation_name)
    if summary is None:
        raise HTTPException(status_code=404, detail=f"Nation '{nation_name}' not found")
    return summary.to_dict()
