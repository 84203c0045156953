"""
Division Team Ranking Manager

Keeps each division's active teams ranked 1..N with no gaps and no
duplicates. Ranks are resequenced when a team is admitted, removed or moved.

Rank changes never rewrite existing pairings: pairings captured the ranks at
generation time. Re-seeding a schedule is an explicit remove-all followed by
a fresh generator call.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, select

from pairing_engine.models.division_team import DivisionTeam
from pairing_engine.services.divisions import get_division
from pairing_engine.services.errors import NotFoundError, PairingValidationError
from pairing_engine.utils.division_locks import division_write_lock

logger = logging.getLogger(__name__)


def _active_teams(session: Session, division_id: int) -> List[DivisionTeam]:
    teams = session.exec(
        select(DivisionTeam).where(DivisionTeam.division_id == division_id, DivisionTeam.active == True)  # noqa: E712
    ).all()

    # rank ascending (nulls last), then id for a stable order
    def sort_key(team: DivisionTeam):
        return (team.rank is None, team.rank if team.rank is not None else 0, team.id)

    return sorted(teams, key=sort_key)


def _resequence(ordered: List[DivisionTeam]) -> None:
    """Assign ranks 1..N in list order, touching only rows that change."""
    now = datetime.utcnow()
    for rank, team in enumerate(ordered, start=1):
        if team.rank != rank:
            team.rank = rank
            team.modified_at = now


def _get_team(session: Session, division_id: int, team_id: int) -> DivisionTeam:
    team = session.get(DivisionTeam, team_id)
    if team is None or team.division_id != division_id:
        raise NotFoundError(
            f"Team {team_id} not found in division {division_id}",
            context={"division_id": division_id, "team_id": team_id},
        )
    return team


def get_division_teams(session: Session, division_id: int) -> List[DivisionTeam]:
    """Active teams of the division in rank order."""
    get_division(session, division_id)
    return _active_teams(session, division_id)


def renumber_ranks(session: Session, division_id: int) -> List[DivisionTeam]:
    """Close any gaps or duplicates in the current rank order (no commit)."""
    teams = _active_teams(session, division_id)
    _resequence(teams)
    for team in teams:
        session.add(team)
    return teams


def admit_team(
    session: Session, division_id: int, team_name: str, club_name: Optional[str] = None
) -> List[DivisionTeam]:
    """Add a team to the division at the bottom of the ranking (rank N+1)."""
    team_name = (team_name or "").strip()
    if not team_name:
        raise PairingValidationError("team_name cannot be empty", code="INVALID_NAME")

    try:
        with division_write_lock(session, division_id):
            teams = renumber_ranks(session, division_id)
            team = DivisionTeam(
                division_id=division_id,
                team_name=team_name,
                club_name=club_name,
                rank=len(teams) + 1,
            )
            session.add(team)
            session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info("Division %d: admitted team %r at rank %d", division_id, team_name, team.rank)
    return get_division_teams(session, division_id)


def remove_team(session: Session, division_id: int, team_id: int) -> List[DivisionTeam]:
    """Deactivate a team; every team ranked below it moves up one place."""
    try:
        with division_write_lock(session, division_id):
            team = _get_team(session, division_id, team_id)
            old_rank = team.rank
            team.active = False
            team.rank = None
            team.modified_at = datetime.utcnow()
            session.add(team)
            renumber_ranks(session, division_id)
            session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info("Division %d: removed team %d (was rank %s)", division_id, team_id, old_rank)
    return get_division_teams(session, division_id)


def _move(teams: List[DivisionTeam], team: DivisionTeam, new_rank: int) -> None:
    if not 1 <= new_rank <= len(teams):
        raise PairingValidationError(
            f"rank must be between 1 and {len(teams)}, got {new_rank}",
            code="INVALID_RANK",
            context={"team_id": team.id, "rank": new_rank},
        )
    teams.remove(team)
    teams.insert(new_rank - 1, team)
    _resequence(teams)


def reorder(session: Session, division_id: int, team_id: int, new_rank: int) -> List[DivisionTeam]:
    """
    Move a team to new_rank, shifting every team in between by one.

    Raises:
        NotFoundError: Team not in this division
        PairingValidationError: Team inactive, or new_rank outside 1..N
    """
    return edit_division_team(session, division_id, team_id, rank=new_rank)


def rename(session: Session, division_id: int, team_id: int, team_name: str) -> DivisionTeam:
    """Change a team's display name; its rank is untouched."""
    edit_division_team(session, division_id, team_id, team_name=team_name)
    return _get_team(session, division_id, team_id)


def edit_division_team(
    session: Session,
    division_id: int,
    team_id: int,
    rank: Optional[int] = None,
    team_name: Optional[str] = None,
) -> List[DivisionTeam]:
    """Apply a rank move and/or rename in one commit; returns the refreshed ranking."""
    if team_name is not None and not team_name.strip():
        raise PairingValidationError("team_name cannot be empty", code="INVALID_NAME")

    try:
        with division_write_lock(session, division_id):
            team = _get_team(session, division_id, team_id)
            if not team.active:
                raise PairingValidationError(
                    f"Team {team_id} is not active in division {division_id}",
                    code="TEAM_INACTIVE",
                    context={"team_id": team_id},
                )
            teams = renumber_ranks(session, division_id)
            old_rank = team.rank
            if rank is not None and rank != team.rank:
                _move(teams, team, rank)
            name_changed = team_name is not None and team_name.strip() != team.team_name
            if name_changed:
                team.team_name = team_name.strip()
                team.modified_at = datetime.utcnow()
            for t in teams:
                session.add(t)
            session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(
        "Division %d: team %d rank %s -> %s, name_changed=%s",
        division_id,
        team_id,
        old_rank,
        rank if rank is not None else old_rank,
        name_changed,
    )
    return get_division_teams(session, division_id)
