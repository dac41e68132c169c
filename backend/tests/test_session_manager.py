"""Tests for SessionManager."""

from unittest.mock import MagicMock

import duckdb
import pytest

from court_rotation.exceptions import InsufficientPlayers, PersistenceFailure, SessionNotFound
from court_rotation.models.player import Player
from court_rotation.models.round import RoundDeltas
from court_rotation.repositories.player_repository import PlayerRepository
from court_rotation.services.session_manager import SessionManager


def _roster(count, present=True):
    return [
        {
            "id": f"p{i:02d}",
            "name": f"Player {i:02d}",
            "gender": "F" if i % 2 else "M",
            "skill_level": 1 + i % 5,
            "is_present": present,
        }
        for i in range(count)
    ]


@pytest.fixture
def repo(tmp_path):
    repository = PlayerRepository(tmp_path / "players.duckdb")
    repository.upsert_players(_roster(18))
    return repository


@pytest.fixture
def manager(repo):
    return SessionManager(repo, default_seed=13)


def test_create_and_get_session(manager):
    session = manager.create_session()

    assert manager.get_session(session.id) is session
    assert session.round_number == 0
    assert session.seed == 13
    assert session.current_round is None


def test_explicit_seed_overrides_default(manager):
    assert manager.create_session(seed=4).seed == 4


def test_unknown_session_raises(manager):
    with pytest.raises(SessionNotFound):
        manager.get_session("nope")
    with pytest.raises(SessionNotFound):
        manager.advance("nope")


def test_remove_session(manager):
    session = manager.create_session()
    manager.remove_session(session.id)
    manager.remove_session(session.id)

    with pytest.raises(SessionNotFound):
        manager.get_session(session.id)
    assert manager.list_sessions() == []


def test_advance_persists_deltas(manager, repo):
    session = manager.create_session()

    result = manager.advance(session.id)

    assert result.round_number == 1
    assert session.current_round is result
    assert session.persistence_error is None
    assert len(result.benched) == 2
    for player in repo.list_players():
        if player.id in result.deltas.played_ids:
            assert player.last_played_round == 1
            assert player.bench_count == 0
        else:
            assert player.bench_count == 1
            assert player.last_played_round == 0


def test_benched_players_play_next_round(manager):
    session = manager.create_session()

    first = manager.advance(session.id)
    second = manager.advance(session.id)

    first_benched = {p.id for p in first.benched}
    assert first_benched <= {p.id for p in second.playing}
    assert first_benched.isdisjoint({p.id for p in second.benched})


def test_absent_players_are_not_scheduled(manager, repo):
    repo.toggle_presence("p00")
    session = manager.create_session()

    result = manager.advance(session.id)

    scheduled = {p.id for p in result.playing + result.benched}
    assert "p00" not in scheduled
    assert len(scheduled) == 17


def test_insufficient_players_propagates_without_state_change(repo):
    repo.update_players([{"id": p.id, "is_present": False} for p in repo.list_players()[3:]])
    manager = SessionManager(repo)
    session = manager.create_session()

    with pytest.raises(InsufficientPlayers):
        manager.advance(session.id)

    assert session.round_number == 0
    assert session.current_round is None
    assert all(p.bench_count == 0 and p.last_played_round == 0 for p in repo.list_players())


def test_persistence_failure_keeps_matches():
    repo = MagicMock()
    repo.max_last_played_round.return_value = 0
    repo.list_present_players.return_value = [
        Player(id=f"m{i}", name=f"M{i}", gender="M", skill_level=3, is_present=True)
        for i in range(9)
    ]
    repo.set_last_played_round.side_effect = duckdb.Error("database is locked")
    manager = SessionManager(repo, default_seed=1)
    session = manager.create_session()

    result = manager.advance(session.id)

    assert len(result.matches) == 2
    assert session.current_round is result
    assert "database is locked" in session.persistence_error
    # The bench update is still attempted
    repo.increment_bench_count.assert_called_once_with(result.deltas.benched_ids)


def test_persistence_error_clears_after_success():
    repo = MagicMock()
    repo.max_last_played_round.return_value = 0
    repo.list_present_players.return_value = [
        Player(id=f"m{i}", name=f"M{i}", gender="F", skill_level=2, is_present=True)
        for i in range(4)
    ]
    repo.increment_bench_count.side_effect = [duckdb.Error("timeout"), None]
    manager = SessionManager(repo)
    session = manager.create_session()

    manager.advance(session.id)
    assert session.persistence_error is not None

    manager.advance(session.id)
    assert session.persistence_error is None
    assert session.round_number == 2


def test_apply_deltas_raises_persistence_failure():
    repo = MagicMock()
    cause = duckdb.Error("disk full")
    repo.increment_bench_count.side_effect = cause
    manager = SessionManager(repo)

    with pytest.raises(PersistenceFailure) as exc_info:
        manager.apply_deltas(RoundDeltas(round_number=3, played_ids=["a"], benched_ids=["b"]))

    assert exc_info.value.round_number == 3
    assert exc_info.value.cause is cause
    repo.set_last_played_round.assert_called_once_with(["a"], 3)


def test_sessions_have_independent_history(manager):
    first = manager.create_session()
    second = manager.create_session()

    manager.advance(first.id)

    assert len(first.orchestrator.teammate_history) > 0
    assert len(second.orchestrator.teammate_history) == 0
    assert [s["id"] for s in manager.list_sessions()] == [first.id, second.id]


def _counters(repo):
    return {p.id: (p.bench_count, p.last_played_round) for p in repo.list_players()}


def test_new_session_continues_round_numbers(repo):
    manager = SessionManager(repo, default_seed=2)
    first = manager.create_session()
    for _ in range(5):
        manager.advance(first.id)
    manager.remove_session(first.id)

    second = manager.create_session()

    assert second.round_number == 5
    assert second.rounds_played == 0
    assert manager.advance(second.id).round_number == 6


def test_counters_never_decrease_across_sessions(repo):
    repo.update_players([{"id": p.id, "is_present": False} for p in repo.list_players()[8:]])
    manager = SessionManager(repo, default_seed=9)

    first = manager.create_session()
    for _ in range(5):
        manager.advance(first.id)
    manager.remove_session(first.id)
    before = _counters(repo)

    second = manager.create_session()
    manager.advance(second.id)
    after = _counters(repo)

    for player_id, (bench_count, last_played) in before.items():
        assert after[player_id][0] >= bench_count
        assert after[player_id][1] >= last_played
    assert all(after[pid][1] == 6 for pid in manager.get_session(second.id).current_round.deltas.played_ids)


def test_returning_players_are_not_penalized(repo):
    # Everyone played in round 5 of an earlier session
    repo.set_last_played_round([p.id for p in repo.list_players()], 5)
    manager = SessionManager(repo)
    session = manager.create_session()

    result = manager.advance(session.id)

    selector = session.orchestrator.selector
    assert all(selector.rounds_since_played(p, result.round_number) >= 1 for p in result.playing + result.benched)


def test_list_sessions_reports_rounds_played(manager):
    session = manager.create_session()
    manager.advance(session.id)

    listed = manager.list_sessions()

    assert listed[0]["id"] == session.id
    assert listed[0]["round_number"] == 1
    assert listed[0]["rounds_played"] == 1
