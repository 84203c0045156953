"""Division lookup: the scheduling scope and its active team count."""

from typing import List

from sqlalchemy import func
from sqlmodel import Session, select

from pairing_engine.models.division import Division
from pairing_engine.models.division_team import DivisionTeam
from pairing_engine.services.errors import NotFoundError, PairingValidationError


def get_division(session: Session, division_id: int) -> Division:
    division = session.get(Division, division_id)
    if division is None:
        raise NotFoundError(f"Division {division_id} not found", context={"division_id": division_id})
    return division


def list_divisions(session: Session) -> List[Division]:
    return list(session.exec(select(Division).order_by(Division.id)).all())


def create_division(session: Session, name: str) -> Division:
    name = (name or "").strip()
    if not name:
        raise PairingValidationError("Division name cannot be empty", code="INVALID_NAME")
    division = Division(name=name)
    session.add(division)
    session.commit()
    session.refresh(division)
    return division


def active_team_count(session: Session, division_id: int) -> int:
    """Number of active teams in the division (the authoritative N)."""
    count = session.exec(
        select(func.count())
        .select_from(DivisionTeam)
        .where(DivisionTeam.division_id == division_id, DivisionTeam.active == True)  # noqa: E712
    ).one()
    return int(count)
