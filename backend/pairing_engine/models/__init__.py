from pairing_engine.models.division import Division
from pairing_engine.models.division_team import DivisionTeam
from pairing_engine.models.pairing import Pairing, PairingType, RefOutcome

__all__ = [
    "Division",
    "DivisionTeam",
    "Pairing",
    "PairingType",
    "RefOutcome",
]
