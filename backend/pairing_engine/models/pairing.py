from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from pairing_engine.models.division import Division


class PairingType(str, Enum):
    """Slot type tag. T = round-robin team, RRDk = round-robin sub-pool k,
    Z..F = elimination stage (64 down to 2), C = consolation."""

    T = "T"
    Z = "Z"
    Y = "Y"
    X = "X"
    Q = "Q"
    S = "S"
    F = "F"
    C = "C"
    RRD1 = "RRD1"
    RRD2 = "RRD2"
    RRD3 = "RRD3"
    RRD4 = "RRD4"
    RRD5 = "RRD5"
    RRD6 = "RRD6"
    RRD7 = "RRD7"
    RRD8 = "RRD8"


class RefOutcome(str, Enum):
    winner = "Winner"
    loser = "Loser"


class Pairing(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("division_id", "game_number", name="uq_pairing_division_game"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    division_id: int = Field(foreign_key="division.id", index=True)
    team_count: int  # Division size the pairing was generated for
    game_number: int
    round: int

    # Concrete sides (team rank 1..team_count); null when the side is a placeholder
    team1_slot: Optional[int] = Field(default=None)
    team2_slot: Optional[int] = Field(default=None)
    team1_type: PairingType = Field(default=PairingType.T, sa_column=Column(String, nullable=False))
    team2_type: PairingType = Field(default=PairingType.T, sa_column=Column(String, nullable=False))

    # Placeholder sides: earlier game_number + which outcome fills the side
    team1_game_ref: Optional[int] = Field(default=None)
    team2_game_ref: Optional[int] = Field(default=None)
    team1_ref_outcome: Optional[RefOutcome] = Field(default=None, sa_column=Column(String, nullable=True))
    team2_ref_outcome: Optional[RefOutcome] = Field(default=None, sa_column=Column(String, nullable=True))

    # Display-only labels ("Winner of Pool A")
    team1_annotation: Optional[str] = Field(default=None)
    team2_annotation: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    modified_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    division: "Division" = Relationship(back_populates="pairings")
