from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from pairing_engine.models.division import Division


class DivisionTeam(SQLModel, table=True):
    # No unique constraint on (division_id, rank): reorders shift several rows in
    # one flush and would trip it mid-statement. Density is enforced by
    # services.division_ranking.
    id: Optional[int] = Field(default=None, primary_key=True)
    division_id: int = Field(foreign_key="division.id", index=True)
    team_name: str
    club_name: Optional[str] = Field(default=None)
    rank: Optional[int] = Field(default=None)  # 1-based, dense among active teams; null when inactive
    active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    modified_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    division: "Division" = Relationship(back_populates="teams")
