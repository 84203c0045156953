"""
Round-Robin Block Generator

Circle method: team 1 stays fixed, every other position rotates one step per
round. Odd team counts get a virtual BYE position; whoever draws it sits out
and no pairing record is written for them.

Rotation continuation: absolute round r (1-based across the whole division)
uses rotation offset (r - 1) mod cycle_length, so a block appended after
existing rounds picks the cycle up where the previous block stopped.
Adding R1 rounds then R2 rounds yields exactly the pairings of one R1+R2 call.
"""

import os
from typing import Dict, List, Optional, Tuple

from pairing_engine.models.pairing import PairingType
from pairing_engine.services.errors import PairingValidationError
from pairing_engine.services.pairing_slots import GeneratedPairing, TeamSlot

MAX_BLOCK_ROUNDS = int(os.getenv("MAX_BLOCK_ROUNDS", "30"))

ROUND_ROBIN_TYPES = frozenset(
    {
        PairingType.T,
        PairingType.RRD1,
        PairingType.RRD2,
        PairingType.RRD3,
        PairingType.RRD4,
        PairingType.RRD5,
        PairingType.RRD6,
        PairingType.RRD7,
        PairingType.RRD8,
    }
)


def cycle_length(team_count: int) -> int:
    """
    Rounds before the rotation repeats.
    Even n: n-1 rounds. Odd n: n rounds (each team gets one BYE).
    """
    if team_count % 2 == 0:
        return team_count - 1
    return team_count


def pool_type(pool: Optional[int]) -> PairingType:
    """Map an optional sub-pool number (1..8) to its type tag."""
    if pool is None:
        return PairingType.T
    if not 1 <= pool <= 8:
        raise PairingValidationError(f"pool must be between 1 and 8, got {pool}", code="INVALID_POOL")
    return PairingType(f"RRD{pool}")


def _positions_for_round(team_count: int, absolute_round: int) -> List[int]:
    """
    Circle positions (0-based team indexes, BYE = team_count for odd n)
    after rotating to the given absolute round.
    """
    n2 = team_count + 1 if team_count % 2 == 1 else team_count
    rest = list(range(1, n2))
    offset = (absolute_round - 1) % cycle_length(team_count)
    if offset:
        # Each step moves the last position to the front of the rotating ring
        rest = rest[-offset:] + rest[:-offset]
    return [0] + rest


def round_pairs(team_count: int, absolute_round: int) -> Tuple[List[Tuple[int, int]], Optional[int]]:
    """
    Pairs for one round as 1-based ranks (lower rank first) plus the BYE rank.

    Returns:
        (pairs, bye_rank) where bye_rank is None for even team counts
    """
    positions = _positions_for_round(team_count, absolute_round)
    n2 = len(positions)
    bye_idx = team_count if team_count % 2 == 1 else -1

    pairs: List[Tuple[int, int]] = []
    bye_rank: Optional[int] = None
    for i in range(n2 // 2):
        a, b = positions[i], positions[n2 - 1 - i]
        if a == bye_idx or b == bye_idx:
            bye_rank = (b if a == bye_idx else a) + 1
            continue
        pairs.append((min(a, b) + 1, max(a, b) + 1))
    return pairs, bye_rank


def _check_inputs(team_count: int, rounds_to_add: int) -> None:
    if team_count < 2:
        raise PairingValidationError(
            f"Round robin requires at least 2 teams, got {team_count}",
            code="INVALID_TEAM_COUNT",
            context={"team_count": team_count},
        )
    if rounds_to_add < 1 or rounds_to_add > MAX_BLOCK_ROUNDS:
        raise PairingValidationError(
            f"rounds_to_add must be between 1 and {MAX_BLOCK_ROUNDS}, got {rounds_to_add}",
            code="INVALID_ROUND_COUNT",
            context={"rounds_to_add": rounds_to_add},
        )


def generate_round_robin_block(
    team_count: int,
    rounds_to_add: int,
    existing_max_round: int,
    next_game_number: int,
    pairing_type: PairingType = PairingType.T,
) -> List[GeneratedPairing]:
    """
    Build `rounds_to_add` round-robin rounds for ranks 1..team_count.

    Args:
        team_count: Authoritative team count at call time (>= 2)
        rounds_to_add: Rounds in this block (>= 1)
        existing_max_round: Highest round already in the division (0 if none)
        next_game_number: First game number to assign
        pairing_type: T, or RRDk when generating for sub-pool k

    Returns:
        floor(n/2) pairings per round, numbered sequentially by round then board
    """
    _check_inputs(team_count, rounds_to_add)
    if pairing_type not in ROUND_ROBIN_TYPES:
        raise PairingValidationError(
            f"Round robin pairings must be typed T or RRD1..RRD8, got {pairing_type}",
            code="INVALID_TYPE",
        )

    result: List[GeneratedPairing] = []
    game_number = next_game_number
    for k in range(1, rounds_to_add + 1):
        absolute_round = existing_max_round + k
        pairs, _ = round_pairs(team_count, absolute_round)
        for rank_a, rank_b in pairs:
            result.append(
                GeneratedPairing(
                    game_number=game_number,
                    round=absolute_round,
                    team1=TeamSlot(rank_a),
                    team2=TeamSlot(rank_b),
                    team1_type=pairing_type,
                    team2_type=pairing_type,
                )
            )
            game_number += 1
    return result


def round_robin_byes(team_count: int, rounds_to_add: int, existing_max_round: int) -> Dict[int, int]:
    """Rank sitting out in each generated round (empty for even team counts)."""
    _check_inputs(team_count, rounds_to_add)
    byes: Dict[int, int] = {}
    if team_count % 2 == 0:
        return byes
    for k in range(1, rounds_to_add + 1):
        absolute_round = existing_max_round + k
        _, bye_rank = round_pairs(team_count, absolute_round)
        if bye_rank is not None:
            byes[absolute_round] = bye_rank
    return byes
