"""Tests for SkillGrouper."""
import pytest

from court_rotation.models.player import Player
from court_rotation.services.skill_grouper import SkillGrouper


def _players(levels):
    return [
        Player(id=f"p{i}", name=f"Player {i}", gender="F", skill_level=level, is_present=True)
        for i, level in enumerate(levels)
    ]


def _levels(group):
    return [p.skill_level for p in group]


@pytest.fixture
def grouper():
    return SkillGrouper()


def test_same_skill_players_grouped_together(grouper):
    playing = _players([1, 1, 1, 1, 2, 2, 2, 2, 3, 3, 3, 3, 4, 4, 4, 4])

    groups, leftover = grouper.group(playing)

    assert [_levels(g) for g in groups] == [[4] * 4, [3] * 4, [2] * 4, [1] * 4]
    assert leftover == []


def test_skips_to_first_window_within_band(grouper):
    playing = _players([0, 5, 10, 0, 4, 6, 0, 5])

    groups, leftover = grouper.group(playing)

    assert _levels(groups[0]) == [6, 5, 5, 4]
    # No band of 2 remains, so the top four are taken as they are
    assert _levels(groups[1]) == [10, 0, 0, 0]
    assert leftover == []


def test_falls_back_to_first_four_when_no_window(grouper):
    playing = _players([1, 10, 4, 7])

    groups, leftover = grouper.group(playing)

    assert len(groups) == 1
    assert _levels(groups[0]) == [10, 7, 4, 1]
    assert leftover == []


def test_band_of_exactly_two_qualifies(grouper):
    playing = _players([7, 5, 6, 5, 1])

    groups, leftover = grouper.group(playing)

    assert _levels(groups[0]) == [7, 6, 5, 5]
    assert _levels(leftover) == [1]


def test_leftover_players_are_returned(grouper):
    playing = _players([3, 3, 3, 3, 3, 3])

    groups, leftover = grouper.group(playing)

    assert len(groups) == 1
    assert len(leftover) == 2


def test_at_most_four_groups(grouper):
    playing = _players([2] * 18)

    groups, leftover = grouper.group(playing)

    assert len(groups) == 4
    assert len(leftover) == 2


def test_fewer_than_four_forms_no_group(grouper):
    groups, leftover = grouper.group(_players([3, 3, 3]))

    assert groups == []
    assert len(leftover) == 3


def test_equal_skill_keeps_incoming_order(grouper):
    playing = _players([3] * 8)

    groups, _ = grouper.group(playing)

    assert [p.id for p in groups[0]] == ["p0", "p1", "p2", "p3"]
    assert [p.id for p in groups[1]] == ["p4", "p5", "p6", "p7"]


def test_groups_are_disjoint_and_complete(grouper):
    playing = _players([9, 1, 4, 4, 7, 2, 8, 3, 5, 5, 6, 1, 2, 9, 3, 7])

    groups, leftover = grouper.group(playing)

    ids = [p.id for g in groups for p in g]
    assert all(len(g) == 4 for g in groups)
    assert len(ids) == len(set(ids))
    assert set(ids) | {p.id for p in leftover} == {p.id for p in playing}


def test_does_not_mutate_input(grouper):
    playing = _players([1, 5, 3, 2, 4])
    before = [p.id for p in playing]

    grouper.group(playing)

    assert [p.id for p in playing] == before
