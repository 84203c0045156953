"""
Division Team API Routes
Ranked team list for a division: admit, re-rank, rename, remove.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlmodel import Session

from pairing_engine.database import get_session
from pairing_engine.services import division_ranking
from pairing_engine.services.errors import PairingEngineError
from pairing_engine.utils.http_errors import raise_http

router = APIRouter()


class DivisionTeamCreate(BaseModel):
    team_name: str
    club_name: Optional[str] = None


class DivisionTeamEdit(BaseModel):
    rank: int
    team_name: Optional[str] = None


class DivisionTeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    division_id: int
    rank: int
    team_name: str
    club_name: Optional[str] = None
    modified_at: datetime


@router.get("/divisions/{division_id}/teams", response_model=List[DivisionTeamResponse])
def get_division_teams(division_id: int, session: Session = Depends(get_session)):
    """Active teams in rank order (rank 1 = top seed)"""
    try:
        return division_ranking.get_division_teams(session, division_id)
    except PairingEngineError as e:
        raise_http(e)


@router.post("/divisions/{division_id}/teams", response_model=List[DivisionTeamResponse], status_code=201)
def admit_team(division_id: int, request: DivisionTeamCreate, session: Session = Depends(get_session)):
    """Admit a team at the bottom of the ranking"""
    try:
        return division_ranking.admit_team(session, division_id, request.team_name, request.club_name)
    except PairingEngineError as e:
        raise_http(e)


@router.put("/divisions/{division_id}/teams/{team_id}", response_model=List[DivisionTeamResponse])
def edit_division_team(
    division_id: int, team_id: int, request: DivisionTeamEdit, session: Session = Depends(get_session)
):
    """
    Move a team to `rank` and/or rename it.

    Teams between the old and new rank shift by one. Existing pairings keep
    the ranks they were generated with.
    """
    try:
        return division_ranking.edit_division_team(
            session, division_id, team_id, rank=request.rank, team_name=request.team_name
        )
    except PairingEngineError as e:
        raise_http(e)


@router.delete("/divisions/{division_id}/teams/{team_id}", response_model=List[DivisionTeamResponse])
def remove_team(division_id: int, team_id: int, session: Session = Depends(get_session)):
    """Remove a team from the ranking; teams below it move up"""
    try:
        return division_ranking.remove_team(session, division_id, team_id)
    except PairingEngineError as e:
        raise_http(e)
