"""
Single-Elimination Bracket Generator

Cascades from a starting stage down to the Final:

    Z (64) -> Y (32) -> X (16) -> Q (8) -> S (4) -> F (2)

Seeding uses the standard bracket order (1 v N, 2 v N-1, ... placed so the top
two seeds can only meet in the Final). Seeds above the team count are byes.

Each bracket position is one of:
- empty            (bye, no team)
- TeamSlot(rank)   (a seed, or a team passed through by a bye)
- GameRefSlot(g)   (Winner of game g)

Two non-empty positions produce a game; an empty position passes its
neighbour through unchanged, so a team that meets a bye lands as a concrete
slot in the next stage instead of a cross-reference.
"""

import logging
from typing import Dict, List, Optional

from pairing_engine.models.pairing import PairingType, RefOutcome
from pairing_engine.services.errors import PairingValidationError
from pairing_engine.services.pairing_slots import GameRefSlot, GeneratedPairing, Side, TeamSlot

logger = logging.getLogger(__name__)

STAGE_SIZES: Dict[PairingType, int] = {
    PairingType.Z: 64,
    PairingType.Y: 32,
    PairingType.X: 16,
    PairingType.Q: 8,
    PairingType.S: 4,
    PairingType.F: 2,
}

# Bracket cascade order: Z -> Y -> X -> Q -> S -> F
BRACKET_CASCADE: Dict[PairingType, PairingType] = {
    PairingType.Z: PairingType.Y,
    PairingType.Y: PairingType.X,
    PairingType.X: PairingType.Q,
    PairingType.Q: PairingType.S,
    PairingType.S: PairingType.F,
}


def parse_stage(start_key: str) -> PairingType:
    """Normalize a start key ("q", " Q ") to its stage tag."""
    key = (start_key or "").strip().upper()
    try:
        stage = PairingType(key)
    except ValueError:
        stage = None
    if stage not in STAGE_SIZES:
        raise PairingValidationError(
            f"Unknown bracket start key: {start_key!r}. Expected one of Z, Y, X, Q, S, F",
            code="INVALID_STAGE",
            context={"start_key": start_key},
        )
    return stage


def stages_from(start_stage: PairingType) -> List[PairingType]:
    """Stages from start_stage through the Final, in play order."""
    stages = [start_stage]
    while stages[-1] in BRACKET_CASCADE:
        stages.append(BRACKET_CASCADE[stages[-1]])
    return stages


def smallest_stage_for(team_count: int) -> PairingType:
    """Smallest supported stage whose bracket holds team_count teams."""
    for stage in reversed(list(STAGE_SIZES)):
        if STAGE_SIZES[stage] >= team_count:
            return stage
    raise PairingValidationError(
        f"No supported bracket holds {team_count} teams (max 64)",
        code="BRACKET_TOO_SMALL",
        context={"team_count": team_count},
    )


def seeding_order(bracket_size: int) -> List[int]:
    """
    Standard bracket seeding, top to bottom.

    2 -> [1, 2]
    4 -> [1, 4, 2, 3]
    8 -> [1, 8, 4, 5, 2, 7, 3, 6]

    Adjacent entries meet in the first round; each pair sums to size + 1.
    """
    order = [1]
    size = 1
    while size < bracket_size:
        size *= 2
        order = [seed for s in order for seed in (s, size + 1 - s)]
    return order


def generate_elimination_bracket(
    team_count: int,
    start_stage: PairingType,
    existing_max_round: int,
    next_game_number: int,
    consolation: bool = False,
) -> List[GeneratedPairing]:
    """
    Build a single-elimination bracket from start_stage down to the Final.

    Args:
        team_count: Teams to seed (ranks 1..team_count)
        start_stage: First stage to generate (Z, Y, X, Q, S or F)
        existing_max_round: Highest round already in the division (0 if none)
        next_game_number: First game number to assign
        consolation: Also add a third-place game (type C) between the
            semifinal losers, played in the Final's round

    Returns:
        Pairings ordered by round, then bracket position. One round per stage
        that has at least one playable game; later stages reference the
        Winner of their feeder games.

    Raises:
        PairingValidationError: INVALID_STAGE, INVALID_TEAM_COUNT,
            BRACKET_TOO_SMALL or CONSOLATION_UNAVAILABLE
    """
    start_stage = parse_stage(start_stage)
    if team_count < 2:
        raise PairingValidationError(
            f"Elimination bracket requires at least 2 teams, got {team_count}",
            code="INVALID_TEAM_COUNT",
            context={"team_count": team_count},
        )
    bracket_size = STAGE_SIZES[start_stage]
    if team_count > bracket_size:
        raise PairingValidationError(
            f"{team_count} teams do not fit a {bracket_size}-team bracket starting at {start_stage.value}; "
            f"start at {smallest_stage_for(team_count).value} or larger",
            code="BRACKET_TOO_SMALL",
            context={"team_count": team_count, "bracket_size": bracket_size},
        )

    positions: List[Optional[Side]] = [
        TeamSlot(seed) if seed <= team_count else None for seed in seeding_order(bracket_size)
    ]

    result: List[GeneratedPairing] = []
    round_number = existing_max_round
    game_number = next_game_number
    semifinal_games: List[int] = []

    for stage in stages_from(start_stage):
        playable = any(positions[i] is not None and positions[i + 1] is not None for i in range(0, len(positions), 2))
        if playable:
            round_number += 1

        advanced: List[Optional[Side]] = []
        for i in range(0, len(positions), 2):
            side_a, side_b = positions[i], positions[i + 1]
            if side_a is None or side_b is None:
                # Bye: the remaining side (if any) moves on without a game
                advanced.append(side_a if side_b is None else side_b)
                continue
            result.append(
                GeneratedPairing(
                    game_number=game_number,
                    round=round_number,
                    team1=side_a,
                    team2=side_b,
                    team1_type=stage,
                    team2_type=stage,
                )
            )
            if stage == PairingType.S:
                semifinal_games.append(game_number)
            advanced.append(GameRefSlot(game_number, RefOutcome.winner))
            game_number += 1
        positions = advanced

    if consolation:
        if len(semifinal_games) != 2:
            raise PairingValidationError(
                f"Consolation game needs two semifinal games, bracket has {len(semifinal_games)}",
                code="CONSOLATION_UNAVAILABLE",
                context={"team_count": team_count, "start_key": start_stage.value},
            )
        result.append(
            GeneratedPairing(
                game_number=game_number,
                round=round_number,
                team1=GameRefSlot(semifinal_games[0], RefOutcome.loser),
                team2=GameRefSlot(semifinal_games[1], RefOutcome.loser),
                team1_type=PairingType.C,
                team2_type=PairingType.C,
            )
        )

    logger.debug(
        "Bracket %s->F for %d teams: %d games over rounds %d..%d",
        start_stage.value,
        team_count,
        len(result),
        existing_max_round + 1,
        round_number,
    )
    return result
