"""
Innings API endpoints - ball-by-ball scoring
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.match import Innings, ExtraType, DismissalType
from app.engine.scoring_engine import ScoringEngine
from app.engine.stats_accumulator import StatsAccumulator
from app.engine.ledger import DeliveryInput
from app.api.schemas import (
    InningsResponse, InningsTotalsResponse, NextBallResponse,
    DeliveryRequest, DeliveryResponse, BatsmanResponse,
)

router = APIRouter(prefix="/innings", tags=["Innings"])


def innings_response(innings: Innings) -> InningsResponse:
    return InningsResponse(
        id=innings.id,
        match_id=innings.match_id,
        innings_number=innings.innings_number,
        batting_team_id=innings.batting_team_id,
        bowling_team_id=innings.bowling_team_id,
        total_runs=innings.total_runs,
        total_wickets=innings.total_wickets,
        overs_played=innings.overs_played,
        extras=innings.extras,
        legal_balls=innings.legal_balls,
        overs_display=innings.overs_display,
        run_rate=innings.run_rate,
        status=innings.status.value,
    )


@router.get("/{innings_id}", response_model=InningsResponse)
def get_innings(innings_id: int, db: Session = Depends(get_db)):
    return innings_response(ScoringEngine(db).get_innings(innings_id))


@router.get("/{innings_id}/next-ball", response_model=NextBallResponse)
def get_next_ball(innings_id: int, db: Session = Depends(get_db)):
    """Coordinate the scorer should record next"""
    coordinate = ScoringEngine(db).next_ball(innings_id)
    return NextBallResponse(over=coordinate.over, ball=coordinate.ball)


@router.post("/{innings_id}/deliveries", response_model=DeliveryResponse, status_code=201)
def record_delivery(innings_id: int, request: DeliveryRequest, db: Session = Depends(get_db)):
    engine = ScoringEngine(db)
    delivery = engine.record_delivery(innings_id, DeliveryInput(
        batsman_id=request.batsman_id,
        bowler_id=request.bowler_id,
        runs=request.runs,
        extras=request.extras,
        is_wicket=request.wicket,
        dismissal_type=DismissalType(request.dismissal_type.value) if request.dismissal_type else None,
        extra_type=ExtraType(request.extra_type.value),
        over_number=request.over_number,
        ball_number=request.ball_number,
    ))
    innings = engine.get_innings(innings_id)
    coordinate = engine.next_ball(innings_id)
    return DeliveryResponse(
        delivery_id=delivery.id,
        over_number=delivery.over_number,
        ball_number=delivery.ball_number,
        innings=InningsTotalsResponse.model_validate(innings),
        next_ball=NextBallResponse(over=coordinate.over, ball=coordinate.ball),
    )


@router.post("/{innings_id}/finalize", response_model=InningsTotalsResponse)
def finalize_inning(innings_id: int, db: Session = Depends(get_db)):
    """Recompute the innings summary from its deliveries and close it"""
    totals = ScoringEngine(db).finalize_inning(innings_id)
    return InningsTotalsResponse.model_validate(totals)


@router.get("/{innings_id}/current-batsmen", response_model=list[BatsmanResponse])
def get_current_batsmen(innings_id: int, db: Session = Depends(get_db)):
    batsmen = StatsAccumulator(db).current_batsmen(innings_id)
    return [BatsmanResponse.model_validate(b) for b in batsmen]
