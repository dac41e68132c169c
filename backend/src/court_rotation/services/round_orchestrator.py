"""Builds one round at a time and keeps the session's fairness memory."""
import logging
import random
from typing import Optional

from court_rotation.models.player import Player
from court_rotation.models.round import Match, RoundDeltas, RoundResult
from court_rotation.services.fairness_selector import FairnessSelector
from court_rotation.services.skill_grouper import SkillGrouper
from court_rotation.services.team_splitter import TeammateHistory, TeamSplitter

logger = logging.getLogger(__name__)


class RoundOrchestrator:
    """Composes selection, grouping and team splitting for a session.

    Owns the teammate history and the set of players benched last round.
    Performs no persistence: callers apply ``RoundResult.deltas`` to the
    player store and pass a refreshed snapshot to the next ``build_round``.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        round_number: int = 0,
    ):
        """
        Args:
            rng: Random source for bench tie-breaks
            seed: Seed for a fresh generator when rng is not given
            round_number: Last round already recorded in the player store;
                          the first round built is round_number + 1
        """
        if rng is None:
            rng = random.Random(seed)
        self.selector = FairnessSelector(rng)
        self.grouper = SkillGrouper()
        self.splitter = TeamSplitter()
        self.teammate_history = TeammateHistory()
        self.last_benched_ids: set[str] = set()
        self.start_round = round_number
        self.round_number = round_number

    def build_round(self, present: list[Player]) -> RoundResult:
        """Build the next round from the present players.

        Raises:
            InsufficientPlayers: Fewer than 4 present; state is unchanged
        """
        round_number = self.round_number + 1
        playing, benched = self.selector.select(present, round_number, self.last_benched_ids)

        groups, idle = self.grouper.group(playing)
        if idle:
            logger.info(
                f"Round {round_number}: {len(idle)} selected player(s) left without a court"
            )

        matches = []
        for court, group in enumerate(groups, start=1):
            split = self.splitter.split(group, self.teammate_history)
            matches.append(
                Match(
                    court=court,
                    team1=split.team1,
                    team2=split.team2,
                    avg1=split.avg1,
                    avg2=split.avg2,
                )
            )

        self.last_benched_ids = {p.id for p in benched}
        self.round_number = round_number

        logger.info(
            f"Built round {round_number}: {len(matches)} court(s), "
            f"{len(playing)} playing, {len(benched)} benched"
        )

        return RoundResult(
            round_number=round_number,
            matches=matches,
            playing=playing,
            benched=benched,
            idle=idle,
            deltas=RoundDeltas(
                round_number=round_number,
                played_ids=[p.id for p in playing],
                benched_ids=[p.id for p in benched],
            ),
        )

    def reset(self) -> None:
        """Forget all session memory, as if a new session had started."""
        self.teammate_history.clear()
        self.last_benched_ids = set()
        self.round_number = self.start_round
