from app.models.team import Team
from app.models.player import Player
from app.models.tournament import Tournament, TournamentEntrant, TournamentStatus, EntrantStatus
from app.models.match import (
    Match, MatchLineup, Innings, Delivery,
    MatchPhase, PHASE_ORDER, InningsStatus, ExtraType, DismissalType,
)
from app.models.stats import PlayerMatchStat

__all__ = [
    "Team",
    "Player",
    "Tournament",
    "TournamentEntrant",
    "TournamentStatus",
    "EntrantStatus",
    "Match",
    "MatchLineup",
    "Innings",
    "Delivery",
    "MatchPhase",
    "PHASE_ORDER",
    "InningsStatus",
    "ExtraType",
    "DismissalType",
    "PlayerMatchStat",
]
