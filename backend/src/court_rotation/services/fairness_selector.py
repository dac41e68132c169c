"""Bench rotation: decide who plays and who sits out each round."""
import random
from typing import Optional

from court_rotation.exceptions import InsufficientPlayers
from court_rotation.models.player import Player


class FairnessSelector:
    """Ranks present players by how much they are owed a game.

    Ranking, most-favored first:
        1. bench_count, descending
        2. rounds since last played, descending (never played = most stale)
        3. benched in the previous round
        4. random draw
    """

    MAX_PLAYING = 16
    MIN_PLAYERS = 4

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def rounds_since_played(self, player: Player, round_number: int) -> int:
        """Rounds elapsed since the player last played, as of round_number."""
        if player.last_played_round <= 0:
            return round_number
        return round_number - player.last_played_round

    def rank(
        self,
        present: list[Player],
        round_number: int,
        last_benched_ids: set[str],
    ) -> list[Player]:
        """Return present players ordered from most to least deserving of a game."""
        keyed = [
            (
                -player.bench_count,
                -self.rounds_since_played(player, round_number),
                0 if player.id in last_benched_ids else 1,
                self.rng.random(),
                index,
                player,
            )
            for index, player in enumerate(present)
        ]
        keyed.sort(key=lambda entry: entry[:5])
        return [entry[-1] for entry in keyed]

    def select(
        self,
        present: list[Player],
        round_number: int,
        last_benched_ids: set[str],
    ) -> tuple[list[Player], list[Player]]:
        """Split present players into (playing, benched).

        Args:
            present: Players currently marked present
            round_number: 1-based number of the round being built
            last_benched_ids: Ids benched in the previous round

        Returns:
            (playing, benched). Playing is in ranking order; benched keeps
            the input order.

        Raises:
            InsufficientPlayers: Fewer than 4 present players
        """
        if len(present) < self.MIN_PLAYERS:
            raise InsufficientPlayers(len(present), self.MIN_PLAYERS)

        ranked = self.rank(present, round_number, last_benched_ids)
        playing = ranked[: self.MAX_PLAYING]
        playing_ids = {p.id for p in playing}
        benched = [p for p in present if p.id not in playing_ids]
        return playing, benched
