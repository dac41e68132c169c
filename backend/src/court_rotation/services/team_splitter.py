"""Split a court of four into two balanced doubles teams."""
from dataclasses import dataclass

from court_rotation.models.player import Player


def pair_key(a: str, b: str) -> tuple[str, str]:
    """Order-independent key for two player ids."""
    return tuple(sorted([a, b]))


class TeammateHistory:
    """How many times each pair of players has been teamed this session."""

    def __init__(self):
        self._counts: dict[tuple[str, str], int] = {}

    def count(self, a: str, b: str) -> int:
        return self._counts.get(pair_key(a, b), 0)

    def record(self, a: str, b: str) -> None:
        key = pair_key(a, b)
        self._counts[key] = self._counts.get(key, 0) + 1

    def clear(self) -> None:
        self._counts.clear()

    def as_dict(self) -> dict[tuple[str, str], int]:
        return dict(self._counts)

    def __len__(self) -> int:
        return len(self._counts)


@dataclass
class TeamSplit:
    """Chosen split for one group."""

    team1: list[Player]
    team2: list[Player]
    avg1: float
    avg2: float
    score: float


class TeamSplitter:
    """Picks the pairing of four players with the closest team averages.

    Repeat teammates add a soft penalty of one point per previous pairing, so
    a skill gap of 0.1 outweighs a single repeat.
    """

    # The three ways to split positions 0-3 into two unordered pairs
    CANDIDATES = (
        ((0, 1), (2, 3)),
        ((0, 2), (1, 3)),
        ((0, 3), (1, 2)),
    )
    AVG_DIFF_WEIGHT = 10

    @staticmethod
    def _average(team: list[Player]) -> float:
        return sum(p.skill_level for p in team) / len(team)

    def score(self, team_a: list[Player], team_b: list[Player], history: TeammateHistory) -> float:
        """Lower is better."""
        diff = abs(self._average(team_a) - self._average(team_b))
        penalty = history.count(team_a[0].id, team_a[1].id) + history.count(team_b[0].id, team_b[1].id)
        return diff * self.AVG_DIFF_WEIGHT + penalty

    def split(self, group: list[Player], history: TeammateHistory) -> TeamSplit:
        """Choose the best split and record both pairs in history.

        Ties go to the earliest candidate in CANDIDATES.

        Raises:
            ValueError: group does not have exactly four players
        """
        if len(group) != 4:
            raise ValueError(f"Team split needs exactly 4 players, got {len(group)}")

        best: TeamSplit | None = None
        for pair_a, pair_b in self.CANDIDATES:
            team_a = [group[i] for i in pair_a]
            team_b = [group[i] for i in pair_b]
            candidate_score = self.score(team_a, team_b, history)
            if best is None or candidate_score < best.score:
                best = TeamSplit(
                    team1=team_a,
                    team2=team_b,
                    avg1=self._average(team_a),
                    avg2=self._average(team_b),
                    score=candidate_score,
                )

        history.record(best.team1[0].id, best.team1[1].id)
        history.record(best.team2[0].id, best.team2[1].id)
        return best
