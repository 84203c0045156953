"""
Pairing API Routes
Round-robin blocks, elimination brackets, single-pairing edits and the
who-plays-who matrix for one division.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session

from pairing_engine.database import get_session
from pairing_engine.models.pairing import PairingType, RefOutcome
from pairing_engine.services import pairing_store
from pairing_engine.services.divisions import active_team_count, get_division
from pairing_engine.services.errors import PairingEngineError, PairingValidationError
from pairing_engine.services.who_plays_who import MAX_MATRIX_TEAMS, matchup_summary
from pairing_engine.utils.http_errors import raise_http

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class AddBlockRequest(BaseModel):
    no_rounds: int
    team_count: int
    pool: Optional[int] = None  # 1..8 tags the block RRD<pool>


class AddEliminationRequest(BaseModel):
    start_key: str  # Z | Y | X | Q | S | F
    team_count: int
    consolation: bool = False

    @field_validator("start_key")
    @classmethod
    def normalize_start_key(cls, v):
        return v.strip().upper() if v else v


class AddSingleRequest(BaseModel):
    team_count: int


class RemoveAllRequest(BaseModel):
    team_count: Optional[int] = None


class PairingUpdate(BaseModel):
    game_number: Optional[int] = None
    round: Optional[int] = None
    team1_slot: Optional[int] = None
    team2_slot: Optional[int] = None
    team1_type: Optional[PairingType] = None
    team2_type: Optional[PairingType] = None
    team1_game_ref: Optional[int] = None
    team2_game_ref: Optional[int] = None
    team1_ref_outcome: Optional[RefOutcome] = None
    team2_ref_outcome: Optional[RefOutcome] = None
    team1_annotation: Optional[str] = None
    team2_annotation: Optional[str] = None


class PairingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    division_id: int
    team_count: int
    game_number: int
    round: int
    team1_slot: Optional[int] = None
    team2_slot: Optional[int] = None
    team1_type: PairingType
    team2_type: PairingType
    team1_game_ref: Optional[int] = None
    team2_game_ref: Optional[int] = None
    team1_ref_outcome: Optional[RefOutcome] = None
    team2_ref_outcome: Optional[RefOutcome] = None
    team1_annotation: Optional[str] = None
    team2_annotation: Optional[str] = None
    modified_at: datetime


class DivisionPairingsResponse(BaseModel):
    division_id: int
    division_name: str
    team_count: int
    pairings: List[PairingResponse]


class RemoveAllResponse(BaseModel):
    division_id: int
    deleted_pairings: int


class ByeResponse(BaseModel):
    round: int
    rank: int


class BlockByesResponse(BaseModel):
    division_id: int
    team_count: int
    byes: List[ByeResponse]


class WhoPlaysWhoResponse(BaseModel):
    team_count: int
    matrix: List[List[int]]
    games_per_team: List[int]
    concrete_pairings: int
    placeholder_pairings: int


# ============================================================================
# Pairing Endpoints
# ============================================================================


@router.get("/divisions/{division_id}/pairings", response_model=DivisionPairingsResponse)
def get_division_pairings(division_id: int, session: Session = Depends(get_session)):
    """All pairings for a division, ordered by round then game number"""
    try:
        return pairing_store.division_pairings(session, division_id)
    except PairingEngineError as e:
        raise_http(e)


@router.post("/divisions/{division_id}/pairings/add-block", response_model=List[PairingResponse])
def add_block(division_id: int, request: AddBlockRequest, session: Session = Depends(get_session)):
    """
    Append a block of round-robin rounds.

    Rounds continue from the division's current max round, so repeated calls
    carry on the rotation instead of restarting it.
    """
    try:
        return pairing_store.add_block(
            session, division_id, team_count=request.team_count, no_rounds=request.no_rounds, pool=request.pool
        )
    except PairingEngineError as e:
        raise_http(e)


@router.get("/divisions/{division_id}/pairings/byes", response_model=BlockByesResponse)
def get_block_byes(
    division_id: int,
    team_count: int = Query(..., description="Teams in the next round-robin block"),
    no_rounds: int = Query(..., description="Rounds in the next round-robin block"),
    session: Session = Depends(get_session),
):
    """
    Preview who sits out in the next add-block call.

    Rounds continue from the division's current max round, matching add-block.
    Even team counts have no byes.
    """
    try:
        return pairing_store.block_byes(session, division_id, team_count=team_count, no_rounds=no_rounds)
    except PairingEngineError as e:
        raise_http(e)


@router.post("/divisions/{division_id}/pairings/add-elimination", response_model=List[PairingResponse])
def add_elimination(division_id: int, request: AddEliminationRequest, session: Session = Depends(get_session)):
    """Append a single-elimination bracket from start_key down to the Final"""
    try:
        return pairing_store.add_elimination(
            session,
            division_id,
            team_count=request.team_count,
            start_key=request.start_key,
            consolation=request.consolation,
        )
    except PairingEngineError as e:
        raise_http(e)


@router.post("/divisions/{division_id}/pairings/add-single", response_model=PairingResponse, status_code=201)
def add_single(division_id: int, request: AddSingleRequest, session: Session = Depends(get_session)):
    """Append one blank pairing for manual entry"""
    try:
        return pairing_store.add_single(session, division_id, team_count=request.team_count)
    except PairingEngineError as e:
        raise_http(e)


@router.post("/divisions/{division_id}/pairings/remove-all", response_model=RemoveAllResponse)
def remove_all(division_id: int, request: RemoveAllRequest, session: Session = Depends(get_session)):
    """Delete every pairing in the division (the only bulk delete of referenced chains)"""
    try:
        deleted = pairing_store.remove_all(session, division_id)
    except PairingEngineError as e:
        raise_http(e)
    return RemoveAllResponse(division_id=division_id, deleted_pairings=deleted)


@router.patch("/divisions/{division_id}/pairings/{game_number}", response_model=PairingResponse)
def edit_pairing(
    division_id: int, game_number: int, request: PairingUpdate, session: Session = Depends(get_session)
):
    """
    Edit one pairing.

    Only fields present in the body change; send null to clear a field.
    The division's full pairing set is revalidated before commit.
    """
    try:
        return pairing_store.edit_pairing(
            session, division_id, game_number, request.model_dump(exclude_unset=True)
        )
    except PairingEngineError as e:
        raise_http(e)


@router.delete("/divisions/{division_id}/pairings/{game_number}", status_code=204)
def delete_pairing(division_id: int, game_number: int, session: Session = Depends(get_session)):
    """Delete one pairing; rejected while another pairing references it"""
    try:
        pairing_store.delete_pairing(session, division_id, game_number)
    except PairingEngineError as e:
        raise_http(e)
    return None


@router.get("/divisions/{division_id}/who-plays-who", response_model=WhoPlaysWhoResponse)
def get_who_plays_who(
    division_id: int,
    team_count: Optional[int] = Query(None, description="Matrix size; defaults to the division's active team count"),
    session: Session = Depends(get_session),
):
    """N x N count of how often each pair of ranks is scheduled to meet"""
    try:
        get_division(session, division_id)
        if team_count is None:
            team_count = active_team_count(session, division_id)
        if not 0 <= team_count <= MAX_MATRIX_TEAMS:
            raise PairingValidationError(
                f"team_count must be between 0 and {MAX_MATRIX_TEAMS}, got {team_count}",
                code="INVALID_TEAM_COUNT",
                context={"team_count": team_count},
            )
        pairings = pairing_store.list_pairings(session, division_id)
    except PairingEngineError as e:
        raise_http(e)
    return matchup_summary(pairings, team_count)
