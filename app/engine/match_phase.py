"""
Match Phase State Machine - toss -> team selection -> innings -> finished

Each phase is its own state type carrying the data that phase needs, and a
state only offers the transition to its successor. The machine rebuilds the
current state from the persisted match before every transition, so a phase
can't be entered unless the data it depends on exists.
"""
import logging
from dataclasses import dataclass
from typing import ClassVar, Optional, Union
from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from app.models.match import Match, MatchLineup, Innings, MatchPhase, PHASE_ORDER
from app.models.player import Player
from app.validators.lineup_validator import LineupValidator
from app.engine.bracket_engine import BracketEngine
from app.engine.errors import ValidationError, PhaseTransitionError, NotFoundError

logger = logging.getLogger(__name__)

TOSS_DECISIONS = ("bat", "bowl")


@dataclass(frozen=True)
class TossPhase:
    phase: ClassVar[MatchPhase] = MatchPhase.TOSS

    def record_toss(self, team_ids: tuple[int, int], toss_winner_id: int, decision: str) -> "TeamSelectionPhase":
        if toss_winner_id not in team_ids:
            raise ValidationError(f"Team {toss_winner_id} is not playing this match")
        if decision not in TOSS_DECISIONS:
            raise ValidationError(f"Toss decision must be one of {TOSS_DECISIONS}")

        other = team_ids[1] if toss_winner_id == team_ids[0] else team_ids[0]
        if decision == "bat":
            return TeamSelectionPhase(batting_team_id=toss_winner_id, bowling_team_id=other)
        return TeamSelectionPhase(batting_team_id=other, bowling_team_id=toss_winner_id)


@dataclass(frozen=True)
class TeamSelectionPhase:
    phase: ClassVar[MatchPhase] = MatchPhase.TEAM_SELECTION
    batting_team_id: int
    bowling_team_id: int

    def confirm_lineups(self, lineup_team_ids: set[int]) -> "InningOnePhase":
        missing = {self.batting_team_id, self.bowling_team_id} - lineup_team_ids
        if missing:
            raise PhaseTransitionError(f"Lineups missing for teams {sorted(missing)}")
        return InningOnePhase(self.batting_team_id, self.bowling_team_id)


@dataclass(frozen=True)
class InningOnePhase:
    phase: ClassVar[MatchPhase] = MatchPhase.INNING_ONE
    batting_team_id: int
    bowling_team_id: int
    innings_id: Optional[int] = None

    def complete(self, innings: Optional[Innings]) -> "InningTwoPhase":
        if innings is None:
            raise PhaseTransitionError("First innings has not started")
        if not innings.is_completed:
            raise PhaseTransitionError(f"Innings {innings.id} has not been finalized")
        # Sides swap for the chase
        return InningTwoPhase(
            first_innings_id=innings.id,
            batting_team_id=self.bowling_team_id,
            bowling_team_id=self.batting_team_id,
        )


@dataclass(frozen=True)
class InningTwoPhase:
    phase: ClassVar[MatchPhase] = MatchPhase.INNING_TWO
    first_innings_id: int
    batting_team_id: int
    bowling_team_id: int
    innings_id: Optional[int] = None

    def complete(self, first: Innings, second: Optional[Innings],
                 winner_team_id: Optional[int] = None) -> "FinishedPhase":
        if second is None:
            raise PhaseTransitionError("Second innings has not started")
        if not second.is_completed:
            raise PhaseTransitionError(f"Innings {second.id} has not been finalized")

        if winner_team_id is not None:
            if winner_team_id not in (self.batting_team_id, self.bowling_team_id):
                raise ValidationError(f"Team {winner_team_id} is not playing this match")
            return FinishedPhase(winner_team_id)

        if second.total_runs > first.total_runs:
            return FinishedPhase(second.batting_team_id)
        if first.total_runs > second.total_runs:
            return FinishedPhase(first.batting_team_id)
        return FinishedPhase(None)  # Tie


@dataclass(frozen=True)
class FinishedPhase:
    phase: ClassVar[MatchPhase] = MatchPhase.FINISHED
    winner_team_id: Optional[int]


PhaseState = Union[TossPhase, TeamSelectionPhase, InningOnePhase, InningTwoPhase, FinishedPhase]


@dataclass
class PhaseInfo:
    match_id: int
    state: PhaseState

    @property
    def phase(self) -> MatchPhase:
        return self.state.phase

    @property
    def completed_phases(self) -> list[MatchPhase]:
        """Phases strictly before the current one"""
        return PHASE_ORDER[:PHASE_ORDER.index(self.phase)]


class MatchPhaseMachine:
    """
    Loads, advances and persists a match's lifecycle state.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_match(self, match_id: int) -> Match:
        match = self.session.get(Match, match_id)
        if not match:
            raise NotFoundError(f"Match {match_id} not found")
        return match

    def _innings(self, match: Match, number: int) -> Optional[Innings]:
        return self.session.scalars(
            select(Innings).filter_by(match_id=match.id, innings_number=number)
        ).first()

    def load(self, match: Match) -> PhaseState:
        """Rebuild the tagged state from the stored match"""
        if match.phase == MatchPhase.TOSS:
            return TossPhase()

        batting = match.batting_first_team_id
        bowling = match.team2_id if batting == match.team1_id else match.team1_id

        if match.phase == MatchPhase.TEAM_SELECTION:
            return TeamSelectionPhase(batting, bowling)

        first = self._innings(match, 1)
        if match.phase == MatchPhase.INNING_ONE:
            return InningOnePhase(batting, bowling, first.id if first else None)

        if match.phase == MatchPhase.INNING_TWO:
            second = self._innings(match, 2)
            return InningTwoPhase(
                first_innings_id=first.id,
                batting_team_id=bowling,
                bowling_team_id=batting,
                innings_id=second.id if second else None,
            )

        return FinishedPhase(match.winner_id)

    def get_phase(self, match_id: int) -> PhaseInfo:
        match = self.get_match(match_id)
        return PhaseInfo(match_id=match.id, state=self.load(match))

    def record_toss(self, match_id: int, toss_winner_id: int, decision: str) -> PhaseInfo:
        """Toss is complete once the batting side is known"""
        match = self.get_match(match_id)
        state = self.load(match)
        if not isinstance(state, TossPhase):
            raise PhaseTransitionError(f"Toss already recorded for match {match_id}")
        if match.team1_id is None or match.team2_id is None:
            raise ValidationError(f"Match {match_id} is still waiting for its teams")

        new_state = state.record_toss((match.team1_id, match.team2_id), toss_winner_id, decision)
        match.toss_winner_id = toss_winner_id
        match.toss_decision = decision
        match.batting_first_team_id = new_state.batting_team_id
        return self._store(match, new_state)

    def submit_lineup(self, match_id: int, team_id: int, player_ids: list[int]) -> list[MatchLineup]:
        """Replace one team's lineup. Only allowed during team selection."""
        match = self.get_match(match_id)
        if not isinstance(self.load(match), TeamSelectionPhase):
            raise PhaseTransitionError(
                f"Lineups can only be submitted during team selection, match is in {match.phase.value}"
            )
        if team_id not in match.team_ids:
            raise ValidationError(f"Team {team_id} is not playing this match")

        players = list(self.session.scalars(select(Player).filter(Player.id.in_(player_ids))))
        result = LineupValidator.validate(team_id, players, player_ids)
        if not result["valid"]:
            raise ValidationError("; ".join(result["errors"]))

        try:
            self.session.execute(
                delete(MatchLineup).filter_by(match_id=match_id, team_id=team_id)
            )
            entries = []
            for pos, player_id in enumerate(player_ids, 1):
                entry = MatchLineup(match_id=match_id, team_id=team_id, player_id=player_id, position=pos)
                self.session.add(entry)
                entries.append(entry)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return entries

    def lineup_team_ids(self, match_id: int) -> set[int]:
        return set(
            self.session.scalars(select(MatchLineup.team_id).filter_by(match_id=match_id).distinct())
        )

    def set_phase(self, match_id: int, phase: MatchPhase, winner_team_id: Optional[int] = None) -> PhaseInfo:
        """
        Move a match to ``phase``. Only the immediate successor is accepted,
        and only once the current phase's data is complete.
        """
        match = self.get_match(match_id)
        state = self.load(match)

        current_index = PHASE_ORDER.index(state.phase)
        if PHASE_ORDER.index(phase) != current_index + 1:
            logger.warning("Match %s: rejected %s -> %s", match_id, state.phase.value, phase.value)
            raise PhaseTransitionError(
                f"Match {match_id} can't move from {state.phase.value} to {phase.value}"
            )

        if isinstance(state, TossPhase):
            raise PhaseTransitionError("Record the toss to leave the toss phase")

        if isinstance(state, TeamSelectionPhase):
            new_state = state.confirm_lineups(self.lineup_team_ids(match_id))
        elif isinstance(state, InningOnePhase):
            new_state = state.complete(self._innings(match, 1))
        else:
            new_state = state.complete(
                self._innings(match, 1), self._innings(match, 2), winner_team_id
            )

        return self._store(match, new_state)

    def _store(self, match: Match, state: PhaseState) -> PhaseInfo:
        previous = match.phase
        match.phase = state.phase
        try:
            if isinstance(state, FinishedPhase):
                self._record_result(match, state.winner_team_id)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info("Match %s: %s -> %s", match.id, previous.value, state.phase.value)
        return PhaseInfo(match_id=match.id, state=state)

    def _record_result(self, match: Match, winner_team_id: Optional[int]):
        if winner_team_id is None:
            return
        if match.is_bracket_match:
            BracketEngine(self.session).apply_winner(match, winner_team_id)
        else:
            match.winner_id = winner_team_id
