"""
Pairing side representation.

A pairing side is exactly one of:
- TeamSlot      concrete team rank (1..team_count)
- GameRefSlot   filled by the Winner/Loser of an earlier game number
- OpenSlot      manual placeholder, not filled yet (annotation only)

The database row keeps the flat teamX_* columns; ``side_of`` / ``side_columns``
convert between the two so the generators and validation never handle the
"one of these must be null" convention directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from pairing_engine.models.pairing import Pairing, PairingType, RefOutcome
from pairing_engine.services.errors import PairingValidationError


@dataclass(frozen=True)
class TeamSlot:
    rank: int
    annotation: Optional[str] = None


@dataclass(frozen=True)
class GameRefSlot:
    game_number: int
    outcome: RefOutcome = RefOutcome.winner
    annotation: Optional[str] = None


@dataclass(frozen=True)
class OpenSlot:
    annotation: Optional[str] = None


Side = Union[TeamSlot, GameRefSlot, OpenSlot]


@dataclass
class GeneratedPairing:
    """A pairing produced by a generator, not yet bound to a division."""

    game_number: int
    round: int
    team1: Side
    team2: Side
    team1_type: PairingType = PairingType.T
    team2_type: PairingType = PairingType.T

    def to_model(self, division_id: int, team_count: int) -> Pairing:
        return Pairing(
            division_id=division_id,
            team_count=team_count,
            game_number=self.game_number,
            round=self.round,
            team1_type=self.team1_type,
            team2_type=self.team2_type,
            **side_columns(1, self.team1),
            **side_columns(2, self.team2),
        )


def side_of(pairing: Any, side: int) -> Side:
    """
    Read one side of a pairing row as a tagged slot.

    Raises PairingValidationError(SLOT_CONFLICT) when the row holds both a
    concrete slot and a game reference, or an outcome with no reference.
    A reference without an outcome reads as Winner.
    """
    slot = getattr(pairing, f"team{side}_slot")
    ref = getattr(pairing, f"team{side}_game_ref")
    outcome = getattr(pairing, f"team{side}_ref_outcome")
    annotation = getattr(pairing, f"team{side}_annotation")
    game_number = getattr(pairing, "game_number", None)

    if slot is not None and ref is not None:
        raise PairingValidationError(
            f"Game {game_number}: team{side} has both a team slot ({slot}) and a game reference ({ref})",
            code="SLOT_CONFLICT",
            context={"game_number": game_number, "side": side},
        )
    if ref is None and outcome is not None:
        raise PairingValidationError(
            f"Game {game_number}: team{side} has a reference outcome but no game reference",
            code="SLOT_CONFLICT",
            context={"game_number": game_number, "side": side},
        )

    if slot is not None:
        return TeamSlot(rank=slot, annotation=annotation)
    if ref is not None:
        return GameRefSlot(
            game_number=ref,
            outcome=RefOutcome(outcome) if outcome is not None else RefOutcome.winner,
            annotation=annotation,
        )
    return OpenSlot(annotation=annotation)


def side_columns(side: int, value: Side) -> Dict[str, Any]:
    """Flatten a tagged slot into the teamX_* column values."""
    columns: Dict[str, Any] = {
        f"team{side}_slot": None,
        f"team{side}_game_ref": None,
        f"team{side}_ref_outcome": None,
        f"team{side}_annotation": value.annotation,
    }
    if isinstance(value, TeamSlot):
        columns[f"team{side}_slot"] = value.rank
    elif isinstance(value, GameRefSlot):
        columns[f"team{side}_game_ref"] = value.game_number
        columns[f"team{side}_ref_outcome"] = value.outcome
    return columns


def is_concrete(pairing: Any) -> bool:
    """True when both sides are concrete team ranks."""
    return getattr(pairing, "team1_slot", None) is not None and getattr(pairing, "team2_slot", None) is not None
