import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from pairing_engine.database import get_session
from pairing_engine.main import app

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models imported before create_all() (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
# 5. Tables dropped and recreated per test so game numbers start from 1
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema"""
    from pairing_engine.models.division import Division  # noqa: F401
    from pairing_engine.models.division_team import DivisionTeam  # noqa: F401
    from pairing_engine.models.pairing import Pairing  # noqa: F401

    SQLModel.metadata.drop_all(test_engine)
    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override is set BEFORE TestClient() and stays in place for the entire
    duration, so the app never touches its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_division(session: Session):
    """Factory: create a division with `team_count` ranked teams"""
    from pairing_engine.services.division_ranking import admit_team
    from pairing_engine.services.divisions import create_division

    def _make(team_count: int = 8, name: str = "U12 Boys Gold"):
        division = create_division(session, name)
        for i in range(1, team_count + 1):
            admit_team(session, division.id, f"Team {i}", club_name=f"Club {i}")
        return division

    return _make
