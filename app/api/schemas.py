"""
Pydantic schemas for API request/response models
"""
from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


# Enums
class MatchPhaseEnum(str, Enum):
    TOSS = "toss"
    TEAM_SELECTION = "team_selection"
    INNING_ONE = "inning_one"
    INNING_TWO = "inning_two"
    FINISHED = "finished"


class ExtraTypeEnum(str, Enum):
    NONE = "none"
    WIDE = "wide"
    NO_BALL = "no_ball"
    OTHER = "other"


class DismissalTypeEnum(str, Enum):
    BOWLED = "bowled"
    CAUGHT = "caught"
    LBW = "lbw"
    RUN_OUT = "run_out"
    STUMPED = "stumped"
    HIT_WICKET = "hit_wicket"
    CAUGHT_BEHIND = "caught_behind"
    RETIRED_OUT = "retired_out"


class EntrantStatusEnum(str, Enum):
    APPLIED = "applied"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# Match Schemas
class MatchCreate(BaseModel):
    team1_id: int
    team2_id: int
    tournament_id: Optional[int] = None
    overs_limit: Optional[int] = Field(default=None, ge=1)


class MatchResponse(BaseModel):
    id: int
    tournament_id: Optional[int] = None
    team1_id: Optional[int] = None
    team2_id: Optional[int] = None
    round: int
    match_number: int
    phase: MatchPhaseEnum
    overs_limit: Optional[int] = None
    winner_id: Optional[int] = None


class PhaseResponse(BaseModel):
    match_id: int
    phase: MatchPhaseEnum
    completed_phases: list[MatchPhaseEnum]
    batting_team_id: Optional[int] = None
    bowling_team_id: Optional[int] = None
    innings_id: Optional[int] = None
    winner_id: Optional[int] = None


class PhaseUpdateRequest(BaseModel):
    phase: MatchPhaseEnum
    winner_team_id: Optional[int] = None  # Overrides the computed result when finishing


class TossRequest(BaseModel):
    toss_winner_id: int
    elected_to: str  # "bat" or "bowl"


class LineupRequest(BaseModel):
    team_id: int
    player_ids: list[int]


class LineupResponse(BaseModel):
    match_id: int
    team_id: int
    player_ids: list[int]


class WinnerRequest(BaseModel):
    winner_team_id: int


class AdvanceResponse(BaseModel):
    match_id: int
    winner_team_id: int
    next_match_id: Optional[int] = None
    slot: Optional[str] = None
    champion_team_id: Optional[int] = None
    already_recorded: bool = False


# Innings Schemas
class StartInningRequest(BaseModel):
    batting_team_id: int
    bowling_team_id: int


class StartInningResponse(BaseModel):
    innings_id: int
    innings_number: int


class InningsResponse(BaseModel):
    id: int
    match_id: int
    innings_number: int
    batting_team_id: int
    bowling_team_id: int
    total_runs: int
    total_wickets: int
    overs_played: float
    extras: int
    legal_balls: int
    overs_display: str
    run_rate: float
    status: str

    class Config:
        from_attributes = True


class InningsTotalsResponse(BaseModel):
    total_runs: int
    total_wickets: int
    overs_played: float
    extras: int
    legal_balls: int
    overs_display: str
    run_rate: float

    class Config:
        from_attributes = True


class NextBallResponse(BaseModel):
    over: int
    ball: int


class DeliveryRequest(BaseModel):
    over_number: Optional[int] = Field(default=None, ge=1)
    ball_number: Optional[int] = Field(default=None, ge=1, le=6)
    batsman_id: int
    bowler_id: int
    runs: int = Field(default=0, ge=0)
    extras: int = Field(default=0, ge=0)
    wicket: bool = False
    dismissal_type: Optional[DismissalTypeEnum] = None
    extra_type: ExtraTypeEnum = ExtraTypeEnum.NONE


class DeliveryResponse(BaseModel):
    delivery_id: int
    over_number: int
    ball_number: int
    innings: InningsTotalsResponse
    next_ball: NextBallResponse


class BatsmanResponse(BaseModel):
    player_id: int
    name: str
    runs: int

    class Config:
        from_attributes = True


class MatchScoreResponse(BaseModel):
    match_id: int
    phase: MatchPhaseEnum
    innings: list[InningsResponse]
    target: Optional[int] = None
    winner_id: Optional[int] = None


# Stats Schemas
class PlayerMatchStatResponse(BaseModel):
    player_id: int
    match_id: int
    runs: int
    balls_faced: int
    fours: int
    sixes: int
    overs_bowled: float
    runs_conceded: int
    wickets: int
    strike_rate: float
    economy_rate: float

    class Config:
        from_attributes = True


class FoldStatsResponse(BaseModel):
    match_id: int
    players: int
    stats: list[PlayerMatchStatResponse]


class PlayerSummaryResponse(BaseModel):
    player_id: int
    name: str
    matches: int
    runs: int
    wickets: int
    batting_average: float
    bowling_economy: float

    class Config:
        from_attributes = True


# Tournament Schemas
class TournamentCreate(BaseModel):
    name: str
    overs_limit: Optional[int] = Field(default=None, ge=1)


class TournamentResponse(BaseModel):
    id: int
    name: str
    overs_limit: Optional[int] = None
    status: str
    champion_team_id: Optional[int] = None


class EntrantRequest(BaseModel):
    team_id: int


class EntrantUpdate(BaseModel):
    status: Optional[EntrantStatusEnum] = None
    is_present: Optional[bool] = None


class EntrantResponse(BaseModel):
    id: int
    tournament_id: int
    team_id: int
    status: EntrantStatusEnum
    is_present: bool


class BracketMatchResponse(BaseModel):
    match_id: int
    round: int
    match_number: int
    team1_id: Optional[int] = None
    team1_name: Optional[str] = None
    team2_id: Optional[int] = None
    team2_name: Optional[str] = None
    winner_id: Optional[int] = None
    winner_name: Optional[str] = None
    phase: MatchPhaseEnum

    class Config:
        from_attributes = True


class GenerateBracketResponse(BaseModel):
    tournament_id: int
    total_matches: int
    matches: list[BracketMatchResponse]
