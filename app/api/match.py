"""
Match API endpoints - creation, phase lifecycle, toss, lineups, results
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.match import MatchPhase
from app.engine.scoring_engine import ScoringEngine
from app.engine.match_phase import MatchPhaseMachine, PhaseInfo
from app.engine.bracket_engine import BracketEngine
from app.api.schemas import (
    MatchCreate, MatchResponse, PhaseResponse, PhaseUpdateRequest, TossRequest,
    LineupRequest, LineupResponse, WinnerRequest, AdvanceResponse,
    StartInningRequest, StartInningResponse, MatchScoreResponse,
)
from app.api.innings import innings_response

router = APIRouter(prefix="/matches", tags=["Matches"])


def _match_response(match) -> MatchResponse:
    return MatchResponse(
        id=match.id,
        tournament_id=match.tournament_id,
        team1_id=match.team1_id,
        team2_id=match.team2_id,
        round=match.round,
        match_number=match.match_number,
        phase=match.phase.value,
        overs_limit=match.overs_limit,
        winner_id=match.winner_id,
    )


def _phase_response(info: PhaseInfo) -> PhaseResponse:
    state = info.state
    return PhaseResponse(
        match_id=info.match_id,
        phase=info.phase.value,
        completed_phases=[p.value for p in info.completed_phases],
        batting_team_id=getattr(state, "batting_team_id", None),
        bowling_team_id=getattr(state, "bowling_team_id", None),
        innings_id=getattr(state, "innings_id", None),
        winner_id=getattr(state, "winner_team_id", None),
    )


@router.post("", response_model=MatchResponse, status_code=201)
def create_match(request: MatchCreate, db: Session = Depends(get_db)):
    """Create a standalone match between two teams"""
    match = ScoringEngine(db).create_match(
        request.team1_id, request.team2_id,
        tournament_id=request.tournament_id,
        overs_limit=request.overs_limit,
    )
    return _match_response(match)


@router.get("/{match_id}", response_model=MatchResponse)
def get_match(match_id: int, db: Session = Depends(get_db)):
    match = MatchPhaseMachine(db).get_match(match_id)
    return _match_response(match)


@router.get("/{match_id}/phase", response_model=PhaseResponse)
def get_phase(match_id: int, db: Session = Depends(get_db)):
    """Current phase and the phases already completed"""
    return _phase_response(MatchPhaseMachine(db).get_phase(match_id))


@router.put("/{match_id}/phase", response_model=PhaseResponse)
def set_phase(match_id: int, request: PhaseUpdateRequest, db: Session = Depends(get_db)):
    """Advance the match to the next phase"""
    info = MatchPhaseMachine(db).set_phase(
        match_id, MatchPhase(request.phase.value), winner_team_id=request.winner_team_id
    )
    return _phase_response(info)


@router.post("/{match_id}/toss", response_model=PhaseResponse)
def record_toss(match_id: int, request: TossRequest, db: Session = Depends(get_db)):
    info = MatchPhaseMachine(db).record_toss(match_id, request.toss_winner_id, request.elected_to)
    return _phase_response(info)


@router.post("/{match_id}/lineups", response_model=LineupResponse)
def submit_lineup(match_id: int, request: LineupRequest, db: Session = Depends(get_db)):
    """Set one team's playing XI, in batting order"""
    entries = MatchPhaseMachine(db).submit_lineup(match_id, request.team_id, request.player_ids)
    return LineupResponse(
        match_id=match_id,
        team_id=request.team_id,
        player_ids=[e.player_id for e in entries],
    )


@router.post("/{match_id}/innings", response_model=StartInningResponse, status_code=201)
def start_inning(match_id: int, request: StartInningRequest, db: Session = Depends(get_db)):
    started = ScoringEngine(db).start_inning(match_id, request.batting_team_id, request.bowling_team_id)
    return StartInningResponse(innings_id=started.innings_id, innings_number=started.innings_number)


@router.get("/{match_id}/score", response_model=MatchScoreResponse)
def get_match_score(match_id: int, db: Session = Depends(get_db)):
    """Both innings of the match with the chase target"""
    score = ScoringEngine(db).match_score(match_id)
    return MatchScoreResponse(
        match_id=score.match_id,
        phase=score.phase,
        innings=[innings_response(i) for i in score.innings],
        target=score.target,
        winner_id=score.winner_id,
    )


@router.post("/{match_id}/winner", response_model=AdvanceResponse)
def record_match_winner(match_id: int, request: WinnerRequest, db: Session = Depends(get_db)):
    """Record a knockout result and advance the winner in the bracket"""
    result = BracketEngine(db).record_match_winner(match_id, request.winner_team_id)
    return AdvanceResponse(
        match_id=result.match_id,
        winner_team_id=result.winner_team_id,
        next_match_id=result.next_match_id,
        slot=result.slot,
        champion_team_id=result.champion_team_id,
        already_recorded=result.already_recorded,
    )
