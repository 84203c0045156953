"""
Tests for division team ranking: admit, remove, reorder, rename.
"""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from pairing_engine.services import division_ranking
from pairing_engine.services.errors import NotFoundError, PairingValidationError
from pairing_engine.services.pairing_store import add_block, list_pairings


def _names(teams):
    return [t.team_name for t in teams]


def _ranks(teams):
    return [t.rank for t in teams]


def test_admit_appends_at_bottom(session: Session, make_division):
    division = make_division(3)
    teams = division_ranking.admit_team(session, division.id, "  Late Entry  ", club_name="Club X")

    assert _ranks(teams) == [1, 2, 3, 4]
    assert teams[-1].team_name == "Late Entry"
    assert teams[-1].club_name == "Club X"


def test_admit_rejects_empty_name(session: Session, make_division):
    division = make_division(1)
    with pytest.raises(PairingValidationError) as exc:
        division_ranking.admit_team(session, division.id, "   ")
    assert exc.value.code == "INVALID_NAME"


def test_remove_closes_the_gap(session: Session, make_division):
    division = make_division(5)
    team_3 = division_ranking.get_division_teams(session, division.id)[2]

    teams = division_ranking.remove_team(session, division.id, team_3.id)

    assert _names(teams) == ["Team 1", "Team 2", "Team 4", "Team 5"]
    assert _ranks(teams) == [1, 2, 3, 4]


def test_reorder_moves_down_and_shifts_others_up(session: Session, make_division):
    division = make_division(5)
    team_2 = division_ranking.get_division_teams(session, division.id)[1]

    teams = division_ranking.reorder(session, division.id, team_2.id, 4)

    assert _names(teams) == ["Team 1", "Team 3", "Team 4", "Team 2", "Team 5"]
    assert _ranks(teams) == [1, 2, 3, 4, 5]


def test_reorder_moves_up_and_shifts_others_down(session: Session, make_division):
    division = make_division(5)
    team_5 = division_ranking.get_division_teams(session, division.id)[4]

    teams = division_ranking.reorder(session, division.id, team_5.id, 1)

    assert _names(teams) == ["Team 5", "Team 1", "Team 2", "Team 3", "Team 4"]


@pytest.mark.parametrize("rank", [0, 6, -1])
def test_reorder_rejects_rank_out_of_range(session: Session, make_division, rank):
    division = make_division(5)
    team_1 = division_ranking.get_division_teams(session, division.id)[0]

    with pytest.raises(PairingValidationError) as exc:
        division_ranking.reorder(session, division.id, team_1.id, rank)
    assert exc.value.code == "INVALID_RANK"
    assert _ranks(division_ranking.get_division_teams(session, division.id)) == [1, 2, 3, 4, 5]


def test_rename_keeps_rank(session: Session, make_division):
    division = make_division(3)
    team_2 = division_ranking.get_division_teams(session, division.id)[1]

    renamed = division_ranking.rename(session, division.id, team_2.id, "Renamed FC")

    assert renamed.team_name == "Renamed FC"
    assert renamed.rank == 2


def test_removed_team_cannot_be_edited(session: Session, make_division):
    division = make_division(3)
    team_1 = division_ranking.get_division_teams(session, division.id)[0]
    division_ranking.remove_team(session, division.id, team_1.id)

    with pytest.raises(PairingValidationError) as exc:
        division_ranking.reorder(session, division.id, team_1.id, 1)
    assert exc.value.code == "TEAM_INACTIVE"


def test_team_from_another_division_not_found(session: Session, make_division):
    first = make_division(2)
    second = make_division(2, name="U10 Mixed")
    foreign = division_ranking.get_division_teams(session, second.id)[0]

    with pytest.raises(NotFoundError):
        division_ranking.remove_team(session, first.id, foreign.id)


def test_rank_changes_do_not_touch_pairings(session: Session, make_division):
    division = make_division(4)
    add_block(session, division.id, team_count=4, no_rounds=3)
    before = [(p.game_number, p.team1_slot, p.team2_slot) for p in list_pairings(session, division.id)]

    teams = division_ranking.get_division_teams(session, division.id)
    division_ranking.reorder(session, division.id, teams[0].id, 4)
    division_ranking.remove_team(session, division.id, teams[1].id)

    after = [(p.game_number, p.team1_slot, p.team2_slot) for p in list_pairings(session, division.id)]
    assert after == before


# ============================================================================
# HTTP
# ============================================================================


def test_team_endpoints(client: TestClient, make_division):
    division = make_division(3)
    base = f"/api/divisions/{division.id}/teams"

    listing = client.get(base)
    assert listing.status_code == 200
    assert [t["rank"] for t in listing.json()] == [1, 2, 3]

    response = client.post(base, json={"team_name": "Team 4", "club_name": "Club 4"})
    assert response.status_code == 201
    assert [t["team_name"] for t in response.json()][-1] == "Team 4"

    team_4 = response.json()[-1]["id"]
    response = client.put(f"{base}/{team_4}", json={"rank": 1, "team_name": "Seeded"})
    assert response.status_code == 200
    assert [t["team_name"] for t in response.json()] == ["Seeded", "Team 1", "Team 2", "Team 3"]

    response = client.put(f"{base}/{team_4}", json={"rank": 9})
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "INVALID_RANK"

    response = client.delete(f"{base}/{team_4}")
    assert response.status_code == 200
    assert [t["rank"] for t in response.json()] == [1, 2, 3]

    assert client.delete(f"{base}/9999").status_code == 404


def test_division_endpoints(client: TestClient):
    response = client.post("/api/divisions", json={"name": " U16 Girls "})
    assert response.status_code == 201
    division = response.json()
    assert division["name"] == "U16 Girls"
    assert division["team_count"] == 0

    client.post(f"/api/divisions/{division['id']}/teams", json={"team_name": "Hawks"})
    detail = client.get(f"/api/divisions/{division['id']}").json()
    assert detail["team_count"] == 1

    assert [d["name"] for d in client.get("/api/divisions").json()] == ["U16 Girls"]
    assert client.get("/api/divisions/999").status_code == 404
    assert client.post("/api/divisions", json={"name": "  "}).status_code == 422


def test_health(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
