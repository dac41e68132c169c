"""Group the playing pool into skill-banded fours."""
from court_rotation.models.player import Player


class SkillGrouper:
    """Greedy grouping into courts of four.

    Scans the skill-sorted pool for the first run of four within SKILL_BAND
    levels. When no such run is left, the top four remaining players are
    grouped regardless of spread.
    """

    GROUP_SIZE = 4
    MAX_GROUPS = 4
    SKILL_BAND = 2

    def _find_window(self, pool: list[Player]) -> int | None:
        """Start index of the first qualifying window, or None."""
        for start in range(len(pool) - self.GROUP_SIZE + 1):
            window = pool[start:start + self.GROUP_SIZE]
            levels = [p.skill_level for p in window]
            if max(levels) - min(levels) <= self.SKILL_BAND:
                return start
        return None

    def group(self, playing: list[Player]) -> tuple[list[list[Player]], list[Player]]:
        """Form up to MAX_GROUPS groups.

        Returns:
            (groups, leftover). Leftover players did not fit into a group.
        """
        # sorted() is stable: equal skill keeps the selector's order
        pool = sorted(playing, key=lambda p: p.skill_level, reverse=True)
        groups: list[list[Player]] = []

        while len(pool) >= self.GROUP_SIZE and len(groups) < self.MAX_GROUPS:
            start = self._find_window(pool)
            if start is None:
                start = 0
            groups.append(pool[start:start + self.GROUP_SIZE])
            del pool[start:start + self.GROUP_SIZE]

        return groups, pool
