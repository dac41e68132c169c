"""Rotation session management."""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import duckdb

from court_rotation.exceptions import PersistenceFailure, SessionNotFound
from court_rotation.models.round import RoundDeltas, RoundResult
from court_rotation.repositories.player_repository import PlayerRepository
from court_rotation.services.round_orchestrator import RoundOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class RotationSession:
    """An active club session: one orchestrator and its latest round."""

    id: str
    orchestrator: RoundOrchestrator
    seed: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.now)

    current_round: RoundResult | None = None
    # Message of the last failed delta write, cleared on the next success
    persistence_error: str | None = None

    # Serializes round building so deltas land before the next round reads
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def round_number(self) -> int:
        return self.orchestrator.round_number

    @property
    def rounds_played(self) -> int:
        return self.orchestrator.round_number - self.orchestrator.start_round


class SessionManager:
    """In-memory manager for rotation sessions.

    Calls the orchestrator, then writes its deltas to the player store.
    Every round starts from a fresh read of the store, so counters written
    by the previous round are always visible to the next one.
    """

    def __init__(self, repository: PlayerRepository, default_seed: Optional[int] = None):
        self.repository = repository
        self.default_seed = default_seed
        self.sessions: dict[str, RotationSession] = {}
        self._sessions_lock = threading.Lock()

    def create_session(self, seed: Optional[int] = None) -> RotationSession:
        """Start a new session with empty teammate history.

        Args:
            seed: Seed for bench tie-breaks; falls back to the configured
                  default, then to an unseeded generator.
        """
        if seed is None:
            seed = self.default_seed
        # Round numbers continue from earlier sessions so last_played_round only grows
        start_round = self.repository.max_last_played_round()
        session_id = str(uuid.uuid4())[:8]  # Short ID for URLs
        session = RotationSession(
            id=session_id,
            orchestrator=RoundOrchestrator(seed=seed, round_number=start_round),
            seed=seed,
        )
        with self._sessions_lock:
            self.sessions[session_id] = session
        logger.info(f"Started session {session_id} after round {start_round}")
        return session

    def get_session(self, session_id: str) -> RotationSession:
        """Get a session by ID.

        Raises:
            SessionNotFound: Unknown or ended session
        """
        with self._sessions_lock:
            session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def remove_session(self, session_id: str) -> None:
        """End a session. Unknown ids are ignored."""
        with self._sessions_lock:
            removed = self.sessions.pop(session_id, None)
        if removed is not None:
            logger.info(f"Ended session {session_id} after {removed.rounds_played} round(s)")

    def list_sessions(self) -> list[dict]:
        """List all active sessions (for debugging)."""
        with self._sessions_lock:
            sessions = list(self.sessions.values())
        return [
            {
                "id": s.id,
                "round_number": s.round_number,
                "rounds_played": s.rounds_played,
                "created_at": s.created_at.isoformat(),
            }
            for s in sessions
        ]

    def advance(self, session_id: str) -> RoundResult:
        """Build the session's next round and persist its deltas.

        A failed delta write does not undo the round: the matches are
        returned and the failure is recorded on ``session.persistence_error``.

        Raises:
            SessionNotFound: Unknown session
            InsufficientPlayers: Fewer than 4 players present
        """
        session = self.get_session(session_id)
        with session.lock:
            present = self.repository.list_present_players()
            result = session.orchestrator.build_round(present)
            session.current_round = result

            try:
                self.apply_deltas(result.deltas)
            except PersistenceFailure as e:
                logger.error(f"Session {session_id}: {e}")
                session.persistence_error = str(e)
            else:
                session.persistence_error = None

        return result

    def apply_deltas(self, deltas: RoundDeltas) -> None:
        """Write one round's counter updates to the player store.

        Both updates are attempted even if the first fails.

        Raises:
            PersistenceFailure: Either update failed
        """
        errors: list[Exception] = []
        try:
            self.repository.set_last_played_round(deltas.played_ids, deltas.round_number)
        except duckdb.Error as e:
            errors.append(e)
        try:
            self.repository.increment_bench_count(deltas.benched_ids)
        except duckdb.Error as e:
            errors.append(e)

        if errors:
            raise PersistenceFailure(deltas.round_number, errors[0]) from errors[0]
