"""Initial migration: create division, divisionteam, pairing tables

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create division table
    op.create_table(
        "division",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # Create divisionteam table (rank is dense 1..N among active teams)
    op.create_table(
        "divisionteam",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("division_id", sa.Integer(), nullable=False),
        sa.Column("team_name", sa.String(), nullable=False),
        sa.Column("club_name", sa.String(), nullable=True),
        sa.Column("rank", sa.Integer(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("modified_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["division_id"], ["division.id"]),
    )
    op.create_index("ix_divisionteam_division_id", "divisionteam", ["division_id"])

    # Create pairing table
    op.create_table(
        "pairing",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("division_id", sa.Integer(), nullable=False),
        sa.Column("team_count", sa.Integer(), nullable=False),
        sa.Column("game_number", sa.Integer(), nullable=False),
        sa.Column("round", sa.Integer(), nullable=False),
        sa.Column("team1_slot", sa.Integer(), nullable=True),
        sa.Column("team2_slot", sa.Integer(), nullable=True),
        sa.Column("team1_type", sa.String(), nullable=False),
        sa.Column("team2_type", sa.String(), nullable=False),
        sa.Column("team1_game_ref", sa.Integer(), nullable=True),
        sa.Column("team2_game_ref", sa.Integer(), nullable=True),
        sa.Column("team1_ref_outcome", sa.String(), nullable=True),
        sa.Column("team2_ref_outcome", sa.String(), nullable=True),
        sa.Column("team1_annotation", sa.String(), nullable=True),
        sa.Column("team2_annotation", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("modified_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["division_id"], ["division.id"]),
        sa.UniqueConstraint("division_id", "game_number", name="uq_pairing_division_game"),
    )
    op.create_index("ix_pairing_division_id", "pairing", ["division_id"])


def downgrade() -> None:
    op.drop_index("ix_pairing_division_id", table_name="pairing")
    op.drop_table("pairing")
    op.drop_index("ix_divisionteam_division_id", table_name="divisionteam")
    op.drop_table("divisionteam")
    op.drop_table("division")
