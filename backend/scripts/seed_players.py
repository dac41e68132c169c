#!/usr/bin/env python3
"""Load a roster CSV into the player database.

Run once to set up a club, or again after editing the roster. Existing
players keep their bench and last-played counters.

Usage:
    python scripts/seed_players.py roster.csv [database_path] [--reset-counters]

Default database_path: data/players.duckdb (relative to repo root)
"""
import logging
import sys
from pathlib import Path

from court_rotation.repositories.player_repository import PlayerRepository


def main() -> None:
    """Main entry point."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    if not args:
        print(__doc__)
        sys.exit(1)

    roster_path = Path(args[0])
    if len(args) > 1:
        db_path = Path(args[1])
    else:
        db_path = Path(__file__).parent.parent.parent / "data" / "players.duckdb"

    if not roster_path.exists():
        print(f"Error: roster not found: {roster_path}")
        sys.exit(1)

    repo = PlayerRepository(db_path)
    count = repo.load_roster_csv(roster_path)
    if "--reset-counters" in sys.argv:
        repo.reset_counters()
        print("Reset bench and last-played counters")

    print(f"Loaded {count} players into {db_path}")


if __name__ == "__main__":
    main()
