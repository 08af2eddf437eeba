"""
Tournament API endpoints - entrants and the knockout bracket
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.models.team import Team
from app.models.tournament import Tournament, TournamentEntrant, EntrantStatus
from app.engine.bracket_engine import BracketEngine
from app.api.schemas import (
    TournamentCreate, TournamentResponse, EntrantRequest, EntrantUpdate, EntrantResponse, EntrantStatusEnum,
    BracketMatchResponse, GenerateBracketResponse,
)

router = APIRouter(prefix="/tournaments", tags=["Tournaments"])


def _tournament_response(tournament: Tournament) -> TournamentResponse:
    return TournamentResponse(
        id=tournament.id,
        name=tournament.name,
        overs_limit=tournament.overs_limit,
        status=tournament.status.value,
        champion_team_id=tournament.champion_team_id,
    )


def _entrant_response(entrant: TournamentEntrant) -> EntrantResponse:
    return EntrantResponse(
        id=entrant.id,
        tournament_id=entrant.tournament_id,
        team_id=entrant.team_id,
        status=entrant.status.value,
        is_present=entrant.is_present,
    )


@router.post("", response_model=TournamentResponse, status_code=201)
def create_tournament(request: TournamentCreate, db: Session = Depends(get_db)):
    if not request.name.strip():
        raise HTTPException(status_code=400, detail="Tournament name is required")
    tournament = Tournament(name=request.name.strip(), overs_limit=request.overs_limit)
    db.add(tournament)
    db.commit()
    return _tournament_response(tournament)


@router.get("/{tournament_id}", response_model=TournamentResponse)
def get_tournament(tournament_id: int, db: Session = Depends(get_db)):
    return _tournament_response(BracketEngine(db).get_tournament(tournament_id))


@router.post("/{tournament_id}/entrants", response_model=EntrantResponse, status_code=201)
def apply_to_tournament(tournament_id: int, request: EntrantRequest, db: Session = Depends(get_db)):
    """A team applies to play in the tournament"""
    BracketEngine(db).get_tournament(tournament_id)
    if not db.get(Team, request.team_id):
        raise HTTPException(status_code=404, detail="Team not found")

    existing = db.query(TournamentEntrant).filter_by(
        tournament_id=tournament_id, team_id=request.team_id
    ).first()
    if existing:
        raise HTTPException(status_code=400, detail="Team already applied")

    entrant = TournamentEntrant(tournament_id=tournament_id, team_id=request.team_id)
    db.add(entrant)
    db.commit()
    return _entrant_response(entrant)


@router.get("/{tournament_id}/entrants", response_model=list[EntrantResponse])
def get_entrants(tournament_id: int, status: Optional[EntrantStatusEnum] = None, db: Session = Depends(get_db)):
    BracketEngine(db).get_tournament(tournament_id)
    query = db.query(TournamentEntrant).filter_by(tournament_id=tournament_id)
    if status:
        query = query.filter_by(status=EntrantStatus(status.value))
    return [_entrant_response(e) for e in query.order_by(TournamentEntrant.id).all()]


@router.patch("/{tournament_id}/entrants/{team_id}", response_model=EntrantResponse)
def update_entrant(tournament_id: int, team_id: int, request: EntrantUpdate, db: Session = Depends(get_db)):
    """Accept/reject an application or mark attendance"""
    entrant = db.query(TournamentEntrant).filter_by(tournament_id=tournament_id, team_id=team_id).first()
    if not entrant:
        raise HTTPException(status_code=404, detail="No matching entrant found")

    if request.status is not None:
        entrant.status = EntrantStatus(request.status.value)
    if request.is_present is not None:
        entrant.is_present = request.is_present
    db.commit()
    return _entrant_response(entrant)


@router.post("/{tournament_id}/bracket", response_model=GenerateBracketResponse, status_code=201)
def generate_bracket(tournament_id: int, db: Session = Depends(get_db)):
    """Create the knockout draw from accepted, present entrants"""
    engine = BracketEngine(db)
    matches = engine.generate_bracket(tournament_id)
    bracket = engine.get_bracket(tournament_id)
    return GenerateBracketResponse(
        tournament_id=tournament_id,
        total_matches=len(matches),
        matches=[BracketMatchResponse.model_validate(entry) for entry in bracket],
    )


@router.get("/{tournament_id}/bracket", response_model=list[BracketMatchResponse])
def get_bracket(tournament_id: int, db: Session = Depends(get_db)):
    bracket = BracketEngine(db).get_bracket(tournament_id)
    if not bracket:
        raise HTTPException(status_code=404, detail="Bracket not found")
    return [BracketMatchResponse.model_validate(entry) for entry in bracket]
