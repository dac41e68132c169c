"""Data models for court rotation."""

from court_rotation.models.player import Player
from court_rotation.models.round import Match, RoundDeltas, RoundResult

__all__ = [
    "Player",
    "Match",
    "RoundDeltas",
    "RoundResult",
]
