"""
Player statistics API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.engine.stats_accumulator import StatsAccumulator
from app.api.schemas import FoldStatsResponse, PlayerMatchStatResponse, PlayerSummaryResponse

router = APIRouter(tags=["Stats"])


@router.post("/matches/{match_id}/player-stats", response_model=FoldStatsResponse)
def fold_player_stats(match_id: int, db: Session = Depends(get_db)):
    """Recompute every player's figures for the match from its deliveries"""
    rows = StatsAccumulator(db).fold_player_stats(match_id)
    return FoldStatsResponse(
        match_id=match_id,
        players=len(rows),
        stats=[PlayerMatchStatResponse.model_validate(r) for r in rows],
    )


@router.get("/teams/{team_id}/player-stats", response_model=list[PlayerSummaryResponse])
def get_team_player_stats(team_id: int, db: Session = Depends(get_db)):
    summaries = StatsAccumulator(db).team_player_summaries(team_id)
    return [PlayerSummaryResponse.model_validate(s) for s in summaries]
