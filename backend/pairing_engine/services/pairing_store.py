"""
Pairing Store and Single-Pairing Editor

Division-scoped persistence for pairings. Every mutation:
1. takes the division write lock
2. reads the current max game number / round
3. builds and validates the change
4. commits the whole batch, or rolls all of it back

Generators only append. Existing pairings change through edit_pairing and
disappear through delete_pairing / remove_all.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from pairing_engine.models.pairing import Pairing, PairingType, RefOutcome
from pairing_engine.services.divisions import active_team_count, get_division
from pairing_engine.services.elimination_bracket import generate_elimination_bracket, parse_stage
from pairing_engine.services.errors import (
    NotFoundError,
    PairingConflictError,
    PairingValidationError,
    ReferentialIntegrityError,
)
from pairing_engine.services.pairing_slots import GeneratedPairing, OpenSlot
from pairing_engine.services.pairing_validation import referencing_games, validate_pairings
from pairing_engine.services.round_robin import generate_round_robin_block, pool_type, round_robin_byes
from pairing_engine.utils.division_locks import PAIRING_WRITE_RETRIES, division_write_lock

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {
        "game_number",
        "round",
        "team1_slot",
        "team2_slot",
        "team1_type",
        "team2_type",
        "team1_game_ref",
        "team2_game_ref",
        "team1_ref_outcome",
        "team2_ref_outcome",
        "team1_annotation",
        "team2_annotation",
    }
)

# NOT NULL columns; an edit may change them but never clear them
REQUIRED_FIELDS = frozenset({"game_number", "round", "team1_type", "team2_type"})

Builder = Callable[[int, int], List[GeneratedPairing]]


# ============================================================================
# Reads
# ============================================================================


def list_pairings(session: Session, division_id: int) -> List[Pairing]:
    """All pairings of a division ordered by round, then game number."""
    return list(
        session.exec(
            select(Pairing).where(Pairing.division_id == division_id).order_by(Pairing.round, Pairing.game_number)
        ).all()
    )


def max_game_and_round(session: Session, division_id: int) -> Tuple[int, int]:
    """(max game_number, max round) for the division; (0, 0) when empty."""
    row = session.exec(
        select(func.max(Pairing.game_number), func.max(Pairing.round)).where(Pairing.division_id == division_id)
    ).one()
    max_game, max_round = row
    return max_game or 0, max_round or 0


def get_pairing(session: Session, division_id: int, game_number: int) -> Pairing:
    pairing = session.exec(
        select(Pairing).where(Pairing.division_id == division_id, Pairing.game_number == game_number)
    ).first()
    if pairing is None:
        raise NotFoundError(
            f"Game {game_number} not found in division {division_id}",
            context={"division_id": division_id, "game_number": game_number},
        )
    return pairing


# ============================================================================
# Batch append (generators + AddSingle)
# ============================================================================


def append_generated(session: Session, division_id: int, team_count: int, build: Builder) -> List[Pairing]:
    """
    Allocate game numbers and append a generated batch atomically.

    `build(max_game, max_round)` is called under the division lock and must
    return pairings numbered from max_game + 1 and rounds above max_round.
    A unique-constraint collision (another writer won the race) rolls the
    batch back and retries with fresh maxima, up to PAIRING_WRITE_RETRIES.

    Raises:
        NotFoundError: Division does not exist
        PairingValidationError: Builder rejected its inputs
        PairingConflictError: Still colliding after all retries
    """
    for attempt in range(1, PAIRING_WRITE_RETRIES + 1):
        try:
            with division_write_lock(session, division_id):
                max_game, max_round = max_game_and_round(session, division_id)
                rows = [g.to_model(division_id, team_count) for g in build(max_game, max_round)]
                validate_pairings(rows)
                session.add_all(rows)
                session.commit()
        except IntegrityError:
            session.rollback()
            logger.warning(
                "Game number collision in division %d (attempt %d/%d), retrying",
                division_id,
                attempt,
                PAIRING_WRITE_RETRIES,
            )
            continue
        except Exception:
            session.rollback()
            raise

        for row in rows:
            session.refresh(row)
        logger.debug(
            "Division %d: appended %d pairings (games %s..%s)",
            division_id,
            len(rows),
            rows[0].game_number if rows else "-",
            rows[-1].game_number if rows else "-",
        )
        return rows

    raise PairingConflictError(
        f"Could not allocate game numbers for division {division_id} after {PAIRING_WRITE_RETRIES} attempts; "
        f"re-fetch the division and retry",
        context={"division_id": division_id},
    )


def add_block(
    session: Session, division_id: int, team_count: int, no_rounds: int, pool: Optional[int] = None
) -> List[Pairing]:
    """AddBlock: append `no_rounds` round-robin rounds for `team_count` teams."""
    pairing_type = pool_type(pool)

    def build(max_game: int, max_round: int) -> List[GeneratedPairing]:
        return generate_round_robin_block(
            team_count=team_count,
            rounds_to_add=no_rounds,
            existing_max_round=max_round,
            next_game_number=max_game + 1,
            pairing_type=pairing_type,
        )

    rows = append_generated(session, division_id, team_count, build)
    logger.info(
        "AddBlock: division %d, %d teams, %d rounds, type %s", division_id, team_count, no_rounds, pairing_type.value
    )
    return rows


def block_byes(session: Session, division_id: int, team_count: int, no_rounds: int) -> Dict[str, Any]:
    """Ranks that would sit out in the next `no_rounds` round-robin rounds (odd team counts only)."""
    get_division(session, division_id)
    _, max_round = max_game_and_round(session, division_id)
    byes = round_robin_byes(team_count, no_rounds, max_round)
    return {
        "division_id": division_id,
        "team_count": team_count,
        "byes": [{"round": r, "rank": rank} for r, rank in sorted(byes.items())],
    }


def add_elimination(
    session: Session, division_id: int, team_count: int, start_key: str, consolation: bool = False
) -> List[Pairing]:
    """AddElimination: append a bracket from `start_key` down to the Final."""
    stage = parse_stage(start_key)

    def build(max_game: int, max_round: int) -> List[GeneratedPairing]:
        return generate_elimination_bracket(
            team_count=team_count,
            start_stage=stage,
            existing_max_round=max_round,
            next_game_number=max_game + 1,
            consolation=consolation,
        )

    rows = append_generated(session, division_id, team_count, build)
    logger.info(
        "AddElimination: division %d, %d teams, %s->F, %d games", division_id, team_count, stage.value, len(rows)
    )
    return rows


def add_single(session: Session, division_id: int, team_count: int) -> Pairing:
    """AddSingle: one blank T/T pairing in a new round for manual entry."""
    if team_count < 2:
        raise PairingValidationError(
            f"team_count must be >= 2, got {team_count}",
            code="INVALID_TEAM_COUNT",
            context={"team_count": team_count},
        )

    def build(max_game: int, max_round: int) -> List[GeneratedPairing]:
        return [GeneratedPairing(game_number=max_game + 1, round=max_round + 1, team1=OpenSlot(), team2=OpenSlot())]

    return append_generated(session, division_id, team_count, build)[0]


# ============================================================================
# Edit / delete
# ============================================================================


def _coerce(field: str, value: Any) -> Any:
    if value is None:
        return None
    try:
        if field.endswith("_type"):
            return PairingType(value)
        if field.endswith("_ref_outcome"):
            return RefOutcome(value)
    except ValueError:
        raise PairingValidationError(f"Invalid value for {field}: {value!r}", code="INVALID_TYPE")
    return value


def edit_pairing(session: Session, division_id: int, game_number: int, changes: Dict[str, Any]) -> Pairing:
    """
    EditPairing: apply a partial update, then revalidate the whole division.

    Only keys present in `changes` are touched; an explicit None clears a
    nullable field. Nothing is committed if any invariant fails.

    Raises:
        NotFoundError: Division or game number does not exist
        PairingValidationError: Unknown or cleared required field, or violated
            invariant (code names it)
        PairingConflictError: Concurrent writer took the new game number
    """
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise PairingValidationError(
            f"Fields cannot be edited: {', '.join(sorted(unknown))}", code="INVALID_FIELD"
        )
    cleared = sorted(f for f in REQUIRED_FIELDS if f in changes and changes[f] is None)
    if cleared:
        raise PairingValidationError(
            f"Fields cannot be cleared: {', '.join(cleared)}",
            code="FIELD_REQUIRED",
            context={"game_number": game_number, "fields": cleared},
        )

    try:
        with division_write_lock(session, division_id):
            pairing = get_pairing(session, division_id, game_number)
            with session.no_autoflush:
                for field, value in changes.items():
                    setattr(pairing, field, _coerce(field, value))
                pairing.modified_at = datetime.utcnow()
                validate_pairings(list_pairings(session, division_id))
            session.add(pairing)
            session.commit()
    except IntegrityError:
        session.rollback()
        if "game_number" not in changes:
            raise
        raise PairingConflictError(
            f"Game number {changes['game_number']} was taken by a concurrent change; re-fetch and retry",
            context={"division_id": division_id, "game_number": game_number},
        )
    except Exception:
        session.rollback()
        raise

    session.refresh(pairing)
    logger.info("EditPairing: division %d, game %d -> %s", division_id, game_number, sorted(changes))
    return pairing


def delete_pairing(session: Session, division_id: int, game_number: int) -> None:
    """
    DeletePairing: remove one pairing that nothing else references.

    Raises:
        NotFoundError: Division or game number does not exist
        ReferentialIntegrityError: Another pairing references this game
    """
    try:
        with division_write_lock(session, division_id):
            pairing = get_pairing(session, division_id, game_number)
            referenced_by = referencing_games(list_pairings(session, division_id), game_number)
            if referenced_by:
                raise ReferentialIntegrityError(
                    f"Game {game_number} is referenced by game(s) {', '.join(map(str, referenced_by))}; "
                    f"delete or clear those references first",
                    context={"game_number": game_number, "referenced_by": referenced_by},
                )
            session.delete(pairing)
            session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info("DeletePairing: division %d, game %d", division_id, game_number)


def remove_all(session: Session, division_id: int) -> int:
    """RemoveAll: delete every pairing of the division, referenced chains included."""
    try:
        with division_write_lock(session, division_id):
            pairings = list_pairings(session, division_id)
            for pairing in pairings:
                session.delete(pairing)
            session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info("RemoveAll: division %d, deleted %d pairings", division_id, len(pairings))
    return len(pairings)


def division_pairings(session: Session, division_id: int) -> Dict[str, Any]:
    """Division header plus its pairings, for the pairing grid."""
    division = get_division(session, division_id)
    return {
        "division_id": division.id,
        "division_name": division.name,
        "team_count": active_team_count(session, division_id),
        "pairings": list_pairings(session, division_id),
    }
