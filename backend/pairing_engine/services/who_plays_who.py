"""
Who-Plays-Who matrix (read model for schedule-balance review).

matrix[i][j] = number of pairings between rank i+1 and rank j+1.
Only pairings with two concrete team slots count; cross-reference
placeholders are not resolved yet and contribute nothing.
"""

import os
from typing import Any, Dict, Iterable, List

from pairing_engine.services.pairing_slots import is_concrete

# Largest matrix served; ranks above it belong to no real division
MAX_MATRIX_TEAMS = int(os.getenv("MAX_MATRIX_TEAMS", "256"))


def compute_matrix(pairings: Iterable[Any], team_count: int) -> List[List[int]]:
    """Build the symmetric N x N matchup count matrix (zero diagonal)."""
    matrix = [[0] * team_count for _ in range(team_count)]
    for p in pairings:
        if not is_concrete(p):
            continue
        a, b = p.team1_slot - 1, p.team2_slot - 1
        if a == b:
            continue
        if 0 <= a < team_count and 0 <= b < team_count:
            matrix[a][b] += 1
            matrix[b][a] += 1
    return matrix


def matchup_summary(pairings: Iterable[Any], team_count: int) -> Dict[str, Any]:
    """
    Matrix plus balance figures:
    - games_per_team: concrete games scheduled for each rank
    - concrete_pairings: pairings counted in the matrix
    - placeholder_pairings: pairings skipped because a side is not concrete
    """
    pairings = list(pairings)
    matrix = compute_matrix(pairings, team_count)
    games_per_team = [sum(row) for row in matrix]
    concrete = sum(games_per_team) // 2
    return {
        "team_count": team_count,
        "matrix": matrix,
        "games_per_team": games_per_team,
        "concrete_pairings": concrete,
        "placeholder_pairings": sum(1 for p in pairings if not is_concrete(p)),
    }
