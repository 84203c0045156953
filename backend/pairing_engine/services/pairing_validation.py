"""
Pairing Set Invariants

Checked against the complete set of a division's pairings (after a proposed
edit is applied) before anything is committed:

  DUPLICATE_GAME_NUMBER  game numbers are unique within the division
  INVALID_NUMBER         game_number, round and team_count are positive
  SLOT_CONFLICT          a side is a team slot OR a game reference, never both
  SLOT_OUT_OF_RANGE      team slots lie in 1..team_count
  SELF_PAIRING           a team never plays itself
  ORPHANED_REFERENCE     game references point at an existing game number
  FORWARD_REFERENCE      referenced game is in a strictly earlier round
                         (rules out self and circular references)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from pairing_engine.services.errors import PairingValidationError
from pairing_engine.services.pairing_slots import GameRefSlot, TeamSlot, side_of


@dataclass
class Violation:
    code: str
    message: str
    game_number: Optional[int] = None
    side: Optional[int] = None


@dataclass
class ValidationReport:
    ok: bool
    violations: List[Violation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "violations": [
                {"code": v.code, "message": v.message, "game_number": v.game_number, "side": v.side}
                for v in self.violations
            ],
        }


def check_pairings(pairings: Iterable[Any]) -> ValidationReport:
    """Collect every invariant violation in a pairing set (does not raise)."""
    pairings = list(pairings)
    violations: List[Violation] = []

    rounds_by_game: Dict[int, int] = {}
    for p in pairings:
        if p.game_number in rounds_by_game:
            violations.append(
                Violation(
                    code="DUPLICATE_GAME_NUMBER",
                    message=f"Game number {p.game_number} is used more than once",
                    game_number=p.game_number,
                )
            )
        else:
            rounds_by_game[p.game_number] = p.round

    for p in pairings:
        for name in ("game_number", "round", "team_count"):
            value = getattr(p, name)
            if value is None or value < 1:
                violations.append(
                    Violation(
                        code="INVALID_NUMBER",
                        message=f"Game {p.game_number}: {name} must be a positive integer, got {value}",
                        game_number=p.game_number,
                    )
                )

        sides = {}
        for side in (1, 2):
            try:
                sides[side] = side_of(p, side)
            except PairingValidationError as e:
                violations.append(Violation(code=e.code, message=e.message, game_number=p.game_number, side=side))

        for side, value in sides.items():
            if isinstance(value, TeamSlot):
                if p.team_count and not 1 <= value.rank <= p.team_count:
                    violations.append(
                        Violation(
                            code="SLOT_OUT_OF_RANGE",
                            message=(
                                f"Game {p.game_number}: team{side} rank {value.rank} "
                                f"is outside 1..{p.team_count}"
                            ),
                            game_number=p.game_number,
                            side=side,
                        )
                    )
            elif isinstance(value, GameRefSlot):
                if value.game_number not in rounds_by_game:
                    violations.append(
                        Violation(
                            code="ORPHANED_REFERENCE",
                            message=(
                                f"Game {p.game_number}: team{side} references game "
                                f"{value.game_number}, which does not exist"
                            ),
                            game_number=p.game_number,
                            side=side,
                        )
                    )
                    continue
                # Rounds that are missing are already reported as INVALID_NUMBER
                ref_round = rounds_by_game[value.game_number]
                if p.round is None or ref_round is None:
                    continue
                if ref_round >= p.round:
                    violations.append(
                        Violation(
                            code="FORWARD_REFERENCE",
                            message=(
                                f"Game {p.game_number} (round {p.round}): team{side} references game "
                                f"{value.game_number} in round {ref_round}; references must point "
                                f"to an earlier round"
                            ),
                            game_number=p.game_number,
                            side=side,
                        )
                    )

        team1, team2 = sides.get(1), sides.get(2)
        if isinstance(team1, TeamSlot) and isinstance(team2, TeamSlot) and team1.rank == team2.rank:
            violations.append(
                Violation(
                    code="SELF_PAIRING",
                    message=f"Game {p.game_number}: team {team1.rank} cannot play itself",
                    game_number=p.game_number,
                )
            )

    return ValidationReport(ok=not violations, violations=violations)


def validate_pairings(pairings: Iterable[Any]) -> None:
    """
    Raise PairingValidationError for the first violated invariant.

    The error code names the invariant; every violation found is listed in
    the error context.
    """
    report = check_pairings(pairings)
    if report.ok:
        return
    first = report.violations[0]
    raise PairingValidationError(first.message, code=first.code, context=report.to_dict())


def referencing_games(pairings: Iterable[Any], game_number: int) -> List[int]:
    """Game numbers of pairings whose team1/team2 reference `game_number`."""
    return sorted(
        p.game_number
        for p in pairings
        if p.game_number != game_number and game_number in (p.team1_game_ref, p.team2_game_ref)
    )
