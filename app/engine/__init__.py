from app.engine.scoring_engine import ScoringEngine
from app.engine.stats_accumulator import StatsAccumulator
from app.engine.match_phase import MatchPhaseMachine
from app.engine.bracket_engine import BracketEngine

__all__ = ["ScoringEngine", "StatsAccumulator", "MatchPhaseMachine", "BracketEngine"]
