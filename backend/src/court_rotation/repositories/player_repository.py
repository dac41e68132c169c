"""DuckDB-based player store."""

import logging
from pathlib import Path

import duckdb
import pandas as pd

from court_rotation.exceptions import PlayerNotFound
from court_rotation.models.player import Player

logger = logging.getLogger(__name__)

PLAYER_COLUMNS = (
    "id",
    "name",
    "gender",
    "skill_level",
    "is_present",
    "bench_count",
    "last_played_round",
)

ROSTER_REQUIRED_COLUMNS = ("id", "name", "skill_level")

PRESENCE_VALUES = {
    "true": True, "yes": True, "y": True, "1": True, "present": True,
    "false": False, "no": False, "n": False, "0": False, "absent": False, "": False,
}


class PlayerRepository:
    """Data access layer for the club roster and its fairness counters."""

    def __init__(self, database_path: str | Path):
        """Open (and if needed create) the player database.

        Args:
            database_path: Path to the .duckdb file. Parent directories are
                          created when missing.
        """
        self._db_path = Path(database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS players (
                    id VARCHAR PRIMARY KEY,
                    name VARCHAR NOT NULL,
                    gender VARCHAR,
                    skill_level INTEGER NOT NULL,
                    is_present BOOLEAN DEFAULT FALSE,
                    bench_count INTEGER DEFAULT 0,
                    last_played_round INTEGER DEFAULT 0
                )
            """)
            count = conn.execute("SELECT COUNT(*) FROM players").fetchone()[0]
        logger.info(f"PlayerRepository: Using {self._db_path} ({count} players)")

    def _connect(self) -> duckdb.DuckDBPyConnection:
        # One connection per operation; nothing is shared between threads
        return duckdb.connect(str(self._db_path))

    def _query(self, sql: str, params: list | None = None) -> list[dict]:
        """Execute query and return list of dicts keyed by column name."""
        with self._connect() as conn:
            cursor = conn.execute(sql, params or [])
            columns = [col[0] for col in cursor.description]
            rows = cursor.fetchall()
        return [dict(zip(columns, row)) for row in rows]

    @staticmethod
    def _placeholders(values: list) -> str:
        return ", ".join("?" for _ in values)

    # ------------------------------------------------------------------ reads

    def list_players(self) -> list[Player]:
        """All players ordered by name."""
        rows = self._query("SELECT * FROM players ORDER BY name, id")
        return [Player.from_row(row) for row in rows]

    def list_present_players(self) -> list[Player]:
        """Players currently marked present, ordered by name."""
        rows = self._query("SELECT * FROM players WHERE is_present ORDER BY name, id")
        return [Player.from_row(row) for row in rows]

    def get_player(self, player_id: str) -> Player:
        """Fetch one player.

        Raises:
            PlayerNotFound: No player with that id
        """
        rows = self._query("SELECT * FROM players WHERE id = ?", [player_id])
        if not rows:
            raise PlayerNotFound(player_id)
        return Player.from_row(rows[0])

    # ----------------------------------------------------------------- writes

    def upsert_players(self, players: list[dict]) -> int:
        """Insert new players or update the given fields of existing ones.

        Only the fields present in each dict are written on update, so
        counters survive a roster edit that omits them.

        Returns:
            Number of rows written

        Raises:
            ValueError: A row has no id, carries an unknown field, or is a
                        new player without name and skill_level
        """
        for player in players:
            self._validate_fields(player)
            if not player.get("id"):
                raise ValueError("Every player needs an id")

        with self._connect() as conn:
            conn.begin()
            for player in players:
                columns = [col for col in PLAYER_COLUMNS if col in player]
                exists = conn.execute(
                    "SELECT COUNT(*) FROM players WHERE id = ?", [player["id"]]
                ).fetchone()[0]

                if exists:
                    fields = [col for col in columns if col != "id"]
                    if fields:
                        assignments = ", ".join(f"{col} = ?" for col in fields)
                        conn.execute(
                            f"UPDATE players SET {assignments} WHERE id = ?",
                            [*(player[col] for col in fields), player["id"]],
                        )
                    continue

                if player.get("name") is None or player.get("skill_level") is None:
                    conn.rollback()
                    raise ValueError(f"New player {player['id']} needs a name and skill_level")
                conn.execute(
                    f"INSERT INTO players ({', '.join(columns)}) VALUES ({self._placeholders(columns)})",
                    [player[col] for col in columns],
                )
            conn.commit()
        return len(players)

    def update_players(self, updates: list[dict]) -> int:
        """Apply per-player field updates of the form ``{id, **fields}``.

        Entries without an id are skipped.

        Returns:
            Number of entries applied

        Raises:
            ValueError: An entry carries an unknown field
        """
        statements = []
        for update in updates:
            self._validate_fields(update)
            player_id = update.get("id")
            if not player_id:
                continue
            fields = {k: v for k, v in update.items() if k != "id"}
            if not fields:
                continue
            assignments = ", ".join(f"{col} = ?" for col in fields)
            statements.append((
                f"UPDATE players SET {assignments} WHERE id = ?",
                [*fields.values(), player_id],
            ))

        with self._connect() as conn:
            conn.begin()
            for sql, params in statements:
                conn.execute(sql, params)
            conn.commit()
        return len(statements)

    @staticmethod
    def _validate_fields(row: dict) -> None:
        unknown = set(row) - set(PLAYER_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown player field(s): {', '.join(sorted(unknown))}")

    def set_presence(self, player_id: str, is_present: bool) -> Player:
        """Mark a player present or absent."""
        player = self.get_player(player_id)
        with self._connect() as conn:
            conn.execute(
                "UPDATE players SET is_present = ? WHERE id = ?",
                [is_present, player_id],
            )
        player.is_present = is_present
        return player

    def toggle_presence(self, player_id: str) -> Player:
        """Flip a player's presence.

        Raises:
            PlayerNotFound: No player with that id
        """
        player = self.get_player(player_id)
        return self.set_presence(player_id, not player.is_present)

    def set_last_played_round(self, player_ids: list[str], round_number: int) -> None:
        """Batched: mark players as having played in round_number.

        A player's last_played_round never moves backwards.
        """
        if not player_ids:
            return
        with self._connect() as conn:
            conn.execute(
                f"UPDATE players SET last_played_round = GREATEST(COALESCE(last_played_round, 0), ?) "
                f"WHERE id IN ({self._placeholders(player_ids)})",
                [round_number, *player_ids],
            )

    def increment_bench_count(self, player_ids: list[str]) -> None:
        """Batched: add one bench to each player."""
        if not player_ids:
            return
        with self._connect() as conn:
            conn.execute(
                f"UPDATE players SET bench_count = COALESCE(bench_count, 0) + 1 "
                f"WHERE id IN ({self._placeholders(player_ids)})",
                list(player_ids),
            )

    def max_last_played_round(self) -> int:
        """Highest round any player has been recorded playing (0 if none)."""
        rows = self._query("SELECT COALESCE(MAX(last_played_round), 0) AS last_round FROM players")
        return int(rows[0]["last_round"])

    def reset_counters(self) -> None:
        """Zero every player's bench_count and last_played_round."""
        with self._connect() as conn:
            conn.execute("UPDATE players SET bench_count = 0, last_played_round = 0")

    # ----------------------------------------------------------------- roster

    def load_roster_csv(self, csv_path: str | Path) -> int:
        """Import a roster CSV (id,name,gender,skill_level[,is_present]).

        Existing players keep their counters; name, gender, skill and
        presence are overwritten. Rows missing a required value are skipped.

        Returns:
            Number of players imported
        """
        df = pd.read_csv(
            csv_path,
            dtype={"id": str, "name": str, "gender": str, "is_present": str},
        )

        missing = [col for col in ROSTER_REQUIRED_COLUMNS if col not in df.columns]
        if missing:
            raise ValueError(f"Roster {csv_path} is missing column(s): {', '.join(missing)}")

        incomplete = df[list(ROSTER_REQUIRED_COLUMNS)].isna().any(axis=1)
        if incomplete.any():
            logger.warning(f"Skipping {int(incomplete.sum())} incomplete roster row(s) in {csv_path}")
            df = df[~incomplete]

        roster = pd.DataFrame({
            "id": df["id"].str.strip(),
            "name": df["name"].str.strip(),
            "gender": df["gender"].fillna("").str.strip().str.upper() if "gender" in df else "",
            "skill_level": df["skill_level"].astype(int),
            "is_present": self._parse_presence(df["is_present"]) if "is_present" in df else False,
        })

        with self._connect() as conn:
            conn.register("roster_df", roster)
            conn.execute("""
                INSERT INTO players (id, name, gender, skill_level, is_present)
                SELECT id, name, gender, skill_level, is_present FROM roster_df
                ON CONFLICT (id) DO UPDATE SET
                    name = excluded.name,
                    gender = excluded.gender,
                    skill_level = excluded.skill_level,
                    is_present = excluded.is_present
            """)
            conn.unregister("roster_df")

        logger.info(f"Imported {len(roster)} players from {csv_path}")
        return len(roster)

    @staticmethod
    def _parse_presence(column: pd.Series) -> pd.Series:
        """Map yes/no style presence cells to booleans; blank means absent.

        Raises:
            ValueError: A cell is not a recognised presence value
        """
        normalized = column.fillna("").str.strip().str.lower()
        parsed = normalized.map(PRESENCE_VALUES)
        unknown = sorted(set(column[parsed.isna()]))
        if unknown:
            raise ValueError(f"Unrecognised is_present value(s): {', '.join(unknown)}")
        return parsed.astype(bool)
