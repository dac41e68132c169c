"""REST endpoints for the player roster."""

from typing import Any

import duckdb
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from court_rotation.exceptions import PlayerNotFound
from court_rotation.models.player import Player
from court_rotation.repositories.player_repository import PlayerRepository

router = APIRouter(prefix="/api/players", tags=["players"])


class UpsertPlayersRequest(BaseModel):
    players: list[dict[str, Any]] = []


class UpdatePlayersRequest(BaseModel):
    updates: list[dict[str, Any]] = []


def _get_repository(request: Request) -> PlayerRepository:
    return request.app.state.repository


@router.get("")
async def list_players(request: Request):
    """List all players ordered by name."""
    repo = _get_repository(request)
    return [_serialize_player(p) for p in repo.list_players()]


@router.post("")
async def upsert_players(request: Request, body: UpsertPlayersRequest):
    """Insert or update one or more players."""
    if not body.players:
        raise HTTPException(status_code=400, detail="No players")
    repo = _get_repository(request)
    try:
        repo.upsert_players(body.players)
    except (ValueError, duckdb.Error) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True}


@router.patch("")
async def update_players(request: Request, body: UpdatePlayersRequest):
    """Update fields on multiple players."""
    if not body.updates:
        raise HTTPException(status_code=400, detail="No updates")
    repo = _get_repository(request)
    try:
        repo.update_players(body.updates)
    except (ValueError, duckdb.Error) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True}


@router.post("/{player_id}/presence")
async def toggle_presence(request: Request, player_id: str):
    """Toggle whether a player is present today."""
    repo = _get_repository(request)
    try:
        player = repo.toggle_presence(player_id)
    except PlayerNotFound:
        raise HTTPException(status_code=404, detail="Player not found")
    return _serialize_player(player)


def _serialize_player(player: Player) -> dict:
    return {
        "id": player.id,
        "name": player.name,
        "gender": player.gender,
        "skill_level": player.skill_level,
        "is_present": player.is_present,
        "bench_count": player.bench_count,
        "last_played_round": player.last_played_round,
    }
