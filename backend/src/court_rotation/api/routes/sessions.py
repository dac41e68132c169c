"""REST endpoints for rotation sessions."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from court_rotation.api.routes.players import _serialize_player
from court_rotation.config import settings
from court_rotation.exceptions import InsufficientPlayers, SessionNotFound
from court_rotation.models.round import Match, RoundResult
from court_rotation.services.session_manager import RotationSession, SessionManager

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


class StartSessionRequest(BaseModel):
    seed: Optional[int] = None


def _get_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def _get_session(request: Request, session_id: str) -> RotationSession:
    try:
        return _get_manager(request).get_session(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")


@router.post("", status_code=201)
async def start_session(request: Request, body: StartSessionRequest | None = None):
    """Start a new session with fresh teammate history."""
    seed = body.seed if body else None
    session = _get_manager(request).create_session(seed=seed)
    return _serialize_session(session)


@router.get("")
async def list_sessions(request: Request):
    """List active sessions."""
    return {"sessions": _get_manager(request).list_sessions()}


@router.post("/{session_id}/rounds")
async def next_round(request: Request, session_id: str):
    """Build the next round (start, manual advance or timer expiry)."""
    manager = _get_manager(request)
    session = _get_session(request, session_id)
    try:
        manager.advance(session.id)
    except InsufficientPlayers as e:
        raise HTTPException(status_code=409, detail=str(e))
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")
    return _serialize_session(session)


@router.get("/{session_id}")
async def get_session(request: Request, session_id: str):
    """Current round and matches."""
    return _serialize_session(_get_session(request, session_id))


@router.delete("/{session_id}")
async def end_session(request: Request, session_id: str):
    """End the session; its teammate history is discarded."""
    _get_manager(request).remove_session(session_id)
    return {"status": "ended"}


# Helper functions

def _serialize_session(session: RotationSession) -> dict:
    return {
        "session_id": session.id,
        "round_number": session.round_number,
        "round": _serialize_round(session.current_round) if session.current_round else None,
        "persistence_error": session.persistence_error,
        "round_duration_seconds": settings.round_duration_seconds,
        "round_warning_seconds": settings.round_warning_seconds,
    }


def _serialize_round(result: RoundResult) -> dict:
    return {
        "round_number": result.round_number,
        "matches": [_serialize_match(m) for m in result.matches],
        "benched": [_serialize_player(p) for p in result.benched],
        "idle": [_serialize_player(p) for p in result.idle],
    }


def _serialize_match(match: Match) -> dict:
    return {
        "court": match.court,
        "team1": [_serialize_player(p) for p in match.team1],
        "team2": [_serialize_player(p) for p in match.team2],
        "avg1": match.avg1,
        "avg2": match.avg2,
    }
