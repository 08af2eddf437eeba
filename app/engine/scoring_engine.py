"""
Scoring Engine - the organizer's ball-by-ball operations on a match
"""
import logging
from dataclasses import dataclass
from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from app.config import settings
from app.models.team import Team
from app.models.tournament import Tournament
from app.models.match import Match, Innings, Delivery
from app.engine.ledger import DeliveryLedger, DeliveryInput, BallCoordinate
from app.engine.innings_aggregator import InningsAggregator, InningsTotals
from app.engine.match_phase import MatchPhaseMachine, InningOnePhase, InningTwoPhase
from app.engine.errors import ValidationError, NotFoundError, PhaseTransitionError

logger = logging.getLogger(__name__)


@dataclass
class StartedInnings:
    innings_id: int
    innings_number: int


@dataclass
class MatchScore:
    """Both innings of a match with the chase target"""
    match_id: int
    phase: str
    innings: list[Innings]
    target: Optional[int]
    winner_id: Optional[int]


class ScoringEngine:
    """
    Starts innings, appends deliveries and keeps innings totals current.
    One organizer scores a match at a time; every call is its own transaction.
    """

    def __init__(self, session: Session):
        self.session = session
        self.ledger = DeliveryLedger(session)
        self.aggregator = InningsAggregator(session)
        self.phases = MatchPhaseMachine(session)

    def create_match(self, team1_id: int, team2_id: int, tournament_id: Optional[int] = None,
                     overs_limit: Optional[int] = None) -> Match:
        """A standalone (non-bracket) match set up directly by an organizer"""
        if team1_id == team2_id:
            raise ValidationError("A team can't play itself")
        for team_id in (team1_id, team2_id):
            if not self.session.get(Team, team_id):
                raise NotFoundError(f"Team {team_id} not found")

        if tournament_id is not None:
            tournament = self.session.get(Tournament, tournament_id)
            if not tournament:
                raise NotFoundError(f"Tournament {tournament_id} not found")
            overs_limit = overs_limit or tournament.overs_limit

        match = Match(
            team1_id=team1_id,
            team2_id=team2_id,
            tournament_id=tournament_id,
            overs_limit=overs_limit or settings.DEFAULT_OVERS_LIMIT,
        )
        self.session.add(match)
        self.session.commit()
        return match

    def start_inning(self, match_id: int, batting_team_id: int, bowling_team_id: int) -> StartedInnings:
        match = self.phases.get_match(match_id)
        if not batting_team_id or not bowling_team_id:
            raise ValidationError("batting_team_id and bowling_team_id are required")

        state = self.phases.load(match)
        if not isinstance(state, (InningOnePhase, InningTwoPhase)):
            raise PhaseTransitionError(
                f"Innings can't start while match {match_id} is in {match.phase.value}"
            )
        if state.innings_id is not None:
            raise ValidationError(f"Innings {state.innings_id} is already under way")
        if (batting_team_id, bowling_team_id) != (state.batting_team_id, state.bowling_team_id):
            raise ValidationError(
                f"Team {state.batting_team_id} bats and team {state.bowling_team_id} bowls in this innings"
            )

        innings_number = self.session.scalar(
            select(func.count(Innings.id)).filter_by(match_id=match_id)
        ) + 1
        innings = Innings(
            match_id=match_id,
            batting_team_id=batting_team_id,
            bowling_team_id=bowling_team_id,
            innings_number=innings_number,
        )
        self.session.add(innings)
        self.session.commit()

        logger.info("Match %s: innings %s started (id %s)", match_id, innings_number, innings.id)
        return StartedInnings(innings_id=innings.id, innings_number=innings_number)

    def next_ball(self, innings_id: int) -> BallCoordinate:
        return self.ledger.next_ball(innings_id)

    def record_delivery(self, innings_id: int, ball: DeliveryInput) -> Delivery:
        """Append a ball and rederive the innings totals in the same transaction"""
        try:
            delivery = self.ledger.append(innings_id, ball)
            self.aggregator.refresh(innings_id)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return delivery

    def finalize_inning(self, innings_id: int) -> InningsTotals:
        return self.aggregator.finalize(innings_id)

    def get_innings(self, innings_id: int) -> Innings:
        return self.ledger.get_innings(innings_id)

    def match_score(self, match_id: int) -> MatchScore:
        match = self.phases.get_match(match_id)
        innings = list(match.innings)
        target = innings[0].total_runs + 1 if innings and innings[0].is_completed else None
        return MatchScore(
            match_id=match.id,
            phase=match.phase.value,
            innings=innings,
            target=target,
            winner_id=match.winner_id,
        )
