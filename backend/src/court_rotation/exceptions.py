"""Errors raised by the rotation core and its collaborators."""


class CourtRotationError(Exception):
    """Base class for all court rotation errors."""


class InsufficientPlayers(CourtRotationError):
    """Fewer present players than one court needs."""

    def __init__(self, present_count: int, required: int = 4):
        self.present_count = present_count
        self.required = required
        super().__init__(
            f"Not enough players present: need at least {required}, got {present_count}"
        )


class PersistenceFailure(CourtRotationError):
    """Round deltas could not be written to the player store.

    The round's matches are still valid; only the fairness counters lag.
    """

    def __init__(self, round_number: int, cause: Exception):
        self.round_number = round_number
        self.cause = cause
        super().__init__(f"Failed to persist round {round_number}: {cause}")


class SessionNotFound(CourtRotationError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")


class PlayerNotFound(CourtRotationError):
    def __init__(self, player_id: str):
        self.player_id = player_id
        super().__init__(f"Player {player_id} not found")
