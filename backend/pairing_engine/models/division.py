from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from pairing_engine.models.division_team import DivisionTeam
    from pairing_engine.models.pairing import Pairing


class Division(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    teams: List["DivisionTeam"] = Relationship(back_populates="division")
    pairings: List["Pairing"] = Relationship(back_populates="division")
