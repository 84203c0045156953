from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from sqlmodel import Session

from pairing_engine.database import get_session
from pairing_engine.services.divisions import active_team_count, create_division, get_division, list_divisions
from pairing_engine.services.errors import PairingEngineError
from pairing_engine.utils.http_errors import raise_http

router = APIRouter()


class DivisionCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name cannot be empty")
        return v.strip()


class DivisionResponse(BaseModel):
    id: int
    name: str
    team_count: int
    created_at: datetime


def _to_response(session: Session, division) -> DivisionResponse:
    return DivisionResponse(
        id=division.id,
        name=division.name,
        team_count=active_team_count(session, division.id),
        created_at=division.created_at,
    )


@router.get("/divisions", response_model=List[DivisionResponse])
def get_divisions(session: Session = Depends(get_session)):
    """List divisions with their active team counts"""
    return [_to_response(session, d) for d in list_divisions(session)]


@router.post("/divisions", response_model=DivisionResponse, status_code=201)
def post_division(request: DivisionCreate, session: Session = Depends(get_session)):
    """Create a division (scheduling scope)"""
    try:
        division = create_division(session, request.name)
    except PairingEngineError as e:
        raise_http(e)
    return _to_response(session, division)


@router.get("/divisions/{division_id}", response_model=DivisionResponse)
def get_division_detail(division_id: int, session: Session = Depends(get_session)):
    """Get one division"""
    try:
        division = get_division(session, division_id)
    except PairingEngineError as e:
        raise_http(e)
    return _to_response(session, division)
