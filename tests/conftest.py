"""
Shared fixtures: an in-memory database and a few ways to get a match ready to score.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from app.database import Base
from app.models import Team, Player, Match, MatchPhase
from app.engine.match_phase import MatchPhaseMachine
from app.engine.scoring_engine import ScoringEngine


@pytest.fixture
def db_engine():
    """In-memory SQLite shared by every connection (TestClient runs in worker threads)."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import app.models  # noqa
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def test_db(db_engine):
    """Create an in-memory test database session."""
    session = Session(db_engine)
    yield session
    session.close()


def create_team(session: Session, name: str, players: int = 11) -> Team:
    """Create a team with a full roster."""
    team = Team(name=name, short_name=name[:3].upper())
    session.add(team)
    session.flush()
    for i in range(1, players + 1):
        session.add(Player(name=f"{name} Player {i}", team_id=team.id))
    session.commit()
    return team


@pytest.fixture
def teams(test_db):
    """Two teams of eleven."""
    return create_team(test_db, "Lions"), create_team(test_db, "Tigers")


@pytest.fixture
def match(test_db, teams):
    """A standalone 20-over match, still at the toss."""
    lions, tigers = teams
    return ScoringEngine(test_db).create_match(lions.id, tigers.id, overs_limit=20)


def roster_ids(team: Team) -> list[int]:
    return [p.id for p in team.players]


def ready_for_first_innings(session: Session, match: Match, toss_winner: Team, decision: str = "bat"):
    """Toss, both lineups and the move to inning_one."""
    machine = MatchPhaseMachine(session)
    machine.record_toss(match.id, toss_winner.id, decision)
    for team in (match.team1, match.team2):
        machine.submit_lineup(match.id, team.id, roster_ids(team))
    machine.set_phase(match.id, MatchPhase.INNING_ONE)


@pytest.fixture
def seed_teams(db_engine):
    """
    Factory that creates teams in a short-lived session and returns
    {team_id: [player ids]}, so API tests only hold on to plain ids.
    """
    def seed(names: list[str]) -> dict[int, list[int]]:
        session = Session(db_engine)
        try:
            teams = [create_team(session, name) for name in names]
            return {team.id: roster_ids(team) for team in teams}
        finally:
            session.close()
    return seed


@pytest.fixture
def make_team(test_db):
    """Factory for extra teams"""
    return lambda name, players=11: create_team(test_db, name, players)


@pytest.fixture
def prepare_match(test_db):
    """Factory that takes a match from the toss to inning_one"""
    def prepare(match: Match, toss_winner: Team, decision: str = "bat"):
        ready_for_first_innings(test_db, match, toss_winner, decision)
    return prepare


@pytest.fixture
def first_innings(test_db, teams, match):
    """Lions won the toss and bat first; returns (innings_id, batting team, bowling team)."""
    lions, tigers = teams
    ready_for_first_innings(test_db, match, lions, "bat")
    started = ScoringEngine(test_db).start_inning(match.id, lions.id, tigers.id)
    return started.innings_id, lions, tigers
