"""Player model."""

from dataclasses import dataclass


@dataclass
class Player:
    """A club player as stored in the player store."""

    id: str
    name: str
    gender: str  # "M" or "F"
    skill_level: int
    is_present: bool = False
    bench_count: int = 0
    last_played_round: int = 0  # 0 = has not played this session

    @classmethod
    def from_row(cls, row: dict) -> "Player":
        """Build a Player from a store row, tolerating missing counters."""
        return cls(
            id=str(row["id"]),
            name=row["name"],
            gender=row.get("gender") or "",
            skill_level=int(row["skill_level"]),
            is_present=bool(row.get("is_present") or False),
            bench_count=int(row.get("bench_count") or 0),
            last_played_round=int(row.get("last_played_round") or 0),
        )
