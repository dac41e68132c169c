"""Round, match and persistence delta models."""

from dataclasses import dataclass, field

from court_rotation.models.player import Player


@dataclass
class Match:
    """Two teams of two on one court."""

    court: int  # 1-based, sequential per round
    team1: list[Player]
    team2: list[Player]
    avg1: float
    avg2: float

    @property
    def players(self) -> list[Player]:
        return self.team1 + self.team2


@dataclass
class RoundDeltas:
    """Counter updates the caller must apply to the player store."""

    round_number: int
    played_ids: list[str] = field(default_factory=list)  # last_played_round = round_number
    benched_ids: list[str] = field(default_factory=list)  # bench_count += 1


@dataclass
class RoundResult:
    """Everything produced by building one round."""

    round_number: int
    matches: list[Match]
    playing: list[Player]
    benched: list[Player]
    deltas: RoundDeltas
    # Selected to play but left over when forming groups of four
    idle: list[Player] = field(default_factory=list)
