# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from pairing_engine.models.division import Division  # noqa: F401
from pairing_engine.models.division_team import DivisionTeam  # noqa: F401
from pairing_engine.models.pairing import Pairing  # noqa: F401
