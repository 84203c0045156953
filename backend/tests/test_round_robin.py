"""
Tests for the round-robin block generator (circle method + rotation continuation).
"""

import pytest

from pairing_engine.models.pairing import PairingType
from pairing_engine.services.errors import PairingValidationError
from pairing_engine.services.pairing_slots import TeamSlot
from pairing_engine.services.round_robin import (
    cycle_length,
    generate_round_robin_block,
    pool_type,
    round_pairs,
    round_robin_byes,
)


def _pairs(generated):
    return [(g.team1.rank, g.team2.rank) for g in generated]


def test_four_team_rotation_matches_preset_order():
    """Circle method for 4 teams: 1v4 2v3, 1v3 2v4, 1v2 3v4."""
    block = generate_round_robin_block(4, 3, existing_max_round=0, next_game_number=1)
    assert _pairs(block) == [(1, 4), (2, 3), (1, 3), (2, 4), (1, 2), (3, 4)]
    assert [g.round for g in block] == [1, 1, 2, 2, 3, 3]
    assert [g.game_number for g in block] == [1, 2, 3, 4, 5, 6]


@pytest.mark.parametrize("team_count", range(2, 17))
def test_each_round_covers_every_team_once(team_count):
    rounds = cycle_length(team_count)
    block = generate_round_robin_block(team_count, rounds, existing_max_round=0, next_game_number=1)
    byes = round_robin_byes(team_count, rounds, existing_max_round=0)

    for r in range(1, rounds + 1):
        games = [g for g in block if g.round == r]
        assert len(games) == team_count // 2
        seen = [rank for g in games for rank in (g.team1.rank, g.team2.rank)]
        if team_count % 2 == 1:
            seen.append(byes[r])
        assert sorted(seen) == list(range(1, team_count + 1))


@pytest.mark.parametrize("team_count", [2, 3, 4, 5, 6, 7, 8, 10, 12])
def test_full_cycle_plays_every_pair_exactly_once(team_count):
    block = generate_round_robin_block(team_count, cycle_length(team_count), 0, 1)
    pairs = _pairs(block)
    assert len(pairs) == len(set(pairs))
    assert len(pairs) == team_count * (team_count - 1) // 2
    assert all(a < b for a, b in pairs)


def test_odd_team_count_gives_each_team_one_bye_per_cycle():
    byes = round_robin_byes(5, 5, existing_max_round=0)
    assert sorted(byes.values()) == [1, 2, 3, 4, 5]
    assert round_robin_byes(6, 5, existing_max_round=0) == {}


@pytest.mark.parametrize("team_count,r1,r2", [(4, 1, 2), (6, 2, 3), (7, 3, 4), (8, 5, 9), (5, 1, 1)])
def test_two_blocks_equal_one_combined_block(team_count, r1, r2):
    """Adding r1 then r2 rounds yields exactly one r1+r2 block."""
    combined = generate_round_robin_block(team_count, r1 + r2, 0, 1)

    first = generate_round_robin_block(team_count, r1, 0, 1)
    second = generate_round_robin_block(
        team_count, r2, existing_max_round=first[-1].round, next_game_number=first[-1].game_number + 1
    )
    split = first + second

    assert [(g.game_number, g.round, g.team1, g.team2) for g in split] == [
        (g.game_number, g.round, g.team1, g.team2) for g in combined
    ]
    rounds = [g.round for g in split]
    assert rounds == sorted(rounds)
    assert len({g.game_number for g in split}) == len(split)


def test_appended_block_does_not_repeat_previous_round():
    first = generate_round_robin_block(6, 1, 0, 1)
    second = generate_round_robin_block(6, 1, existing_max_round=1, next_game_number=4)
    assert set(_pairs(first)).isdisjoint(_pairs(second))


def test_rotation_restarts_after_full_cycle():
    pairs_round_1, _ = round_pairs(6, 1)
    pairs_round_6, _ = round_pairs(6, 6)
    assert pairs_round_1 == pairs_round_6


def test_sub_pool_type_tags_both_sides():
    block = generate_round_robin_block(4, 1, 0, 1, pairing_type=pool_type(3))
    assert {g.team1_type for g in block} == {PairingType.RRD3}
    assert {g.team2_type for g in block} == {PairingType.RRD3}
    assert all(isinstance(g.team1, TeamSlot) for g in block)


def test_pool_out_of_range_rejected():
    with pytest.raises(PairingValidationError) as exc:
        pool_type(9)
    assert exc.value.code == "INVALID_POOL"
    assert pool_type(None) == PairingType.T


@pytest.mark.parametrize("team_count", [0, 1])
def test_team_count_below_two_rejected(team_count):
    with pytest.raises(PairingValidationError) as exc:
        generate_round_robin_block(team_count, 1, 0, 1)
    assert exc.value.code == "INVALID_TEAM_COUNT"


def test_zero_rounds_rejected():
    with pytest.raises(PairingValidationError) as exc:
        generate_round_robin_block(4, 0, 0, 1)
    assert exc.value.code == "INVALID_ROUND_COUNT"


def test_bracket_type_rejected_for_round_robin():
    with pytest.raises(PairingValidationError) as exc:
        generate_round_robin_block(4, 1, 0, 1, pairing_type=PairingType.Q)
    assert exc.value.code == "INVALID_TYPE"
