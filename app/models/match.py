from typing import Optional, List
from sqlalchemy import String, Integer, ForeignKey, Enum, DateTime, Float, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
import enum
from app.database import Base


class MatchPhase(enum.Enum):
    TOSS = "toss"
    TEAM_SELECTION = "team_selection"
    INNING_ONE = "inning_one"
    INNING_TWO = "inning_two"
    FINISHED = "finished"


# Lifecycle order, no skips and no backward moves
PHASE_ORDER = [
    MatchPhase.TOSS,
    MatchPhase.TEAM_SELECTION,
    MatchPhase.INNING_ONE,
    MatchPhase.INNING_TWO,
    MatchPhase.FINISHED,
]


class InningsStatus(enum.Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class ExtraType(enum.Enum):
    NONE = "none"
    WIDE = "wide"
    NO_BALL = "no_ball"
    OTHER = "other"  # byes, leg byes, penalty runs

    @property
    def is_illegal(self) -> bool:
        """Wides and no-balls are re-bowled and don't use up a legal ball"""
        return self in (ExtraType.WIDE, ExtraType.NO_BALL)


class DismissalType(enum.Enum):
    BOWLED = "bowled"
    CAUGHT = "caught"
    LBW = "lbw"
    RUN_OUT = "run_out"
    STUMPED = "stumped"
    HIT_WICKET = "hit_wicket"
    CAUGHT_BEHIND = "caught_behind"
    RETIRED_OUT = "retired_out"


class Match(Base):
    __tablename__ = "matches"

    id: Mapped[int] = mapped_column(primary_key=True)
    tournament_id: Mapped[Optional[int]] = mapped_column(ForeignKey("tournaments.id"), nullable=True)

    # Teams (null = slot still to be decided in a bracket)
    team1_id: Mapped[Optional[int]] = mapped_column(ForeignKey("teams.id"), nullable=True)
    team2_id: Mapped[Optional[int]] = mapped_column(ForeignKey("teams.id"), nullable=True)
    team1: Mapped[Optional["Team"]] = relationship("Team", foreign_keys=[team1_id])
    team2: Mapped[Optional["Team"]] = relationship("Team", foreign_keys=[team2_id])

    # Bracket position (round 0 = standalone match)
    round: Mapped[int] = mapped_column(Integer, default=0)
    match_number: Mapped[int] = mapped_column(Integer, default=0)

    # Toss
    toss_winner_id: Mapped[Optional[int]] = mapped_column(ForeignKey("teams.id"), nullable=True)
    toss_decision: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)  # "bat" or "bowl"
    batting_first_team_id: Mapped[Optional[int]] = mapped_column(ForeignKey("teams.id"), nullable=True)

    overs_limit: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Lifecycle
    phase: Mapped[MatchPhase] = mapped_column(Enum(MatchPhase), default=MatchPhase.TOSS)

    # Result
    winner_id: Mapped[Optional[int]] = mapped_column(ForeignKey("teams.id"), nullable=True)
    winner: Mapped[Optional["Team"]] = relationship("Team", foreign_keys=[winner_id])

    # Relationships
    innings: Mapped[List["Innings"]] = relationship(
        "Innings", back_populates="match", order_by="Innings.innings_number"
    )
    lineups: Mapped[List["MatchLineup"]] = relationship("MatchLineup", back_populates="match")

    @property
    def is_bracket_match(self) -> bool:
        return self.round > 0

    @property
    def team_ids(self) -> set[int]:
        return {t for t in (self.team1_id, self.team2_id) if t is not None}

    def __repr__(self):
        return f"<Match #{self.match_number} R{self.round}: {self.team1_id or 'TBD'} vs {self.team2_id or 'TBD'}>"


class MatchLineup(Base):
    __tablename__ = "match_lineups"

    id: Mapped[int] = mapped_column(primary_key=True)
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id"))
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"))
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"))
    position: Mapped[int] = mapped_column(Integer)  # 1-11 batting order

    match = relationship("Match", back_populates="lineups")
    player = relationship("Player")

    __table_args__ = (
        UniqueConstraint('match_id', 'team_id', 'player_id', name='unique_match_lineup'),
    )

    def __repr__(self):
        return f"<MatchLineup match={self.match_id} team={self.team_id} player={self.player_id} pos={self.position}>"


class Innings(Base):
    __tablename__ = "innings"

    id: Mapped[int] = mapped_column(primary_key=True)
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id"))
    match: Mapped["Match"] = relationship("Match", back_populates="innings")

    batting_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"))
    bowling_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"))
    batting_team: Mapped["Team"] = relationship("Team", foreign_keys=[batting_team_id])
    bowling_team: Mapped["Team"] = relationship("Team", foreign_keys=[bowling_team_id])

    innings_number: Mapped[int] = mapped_column(Integer)  # 1 or 2

    # Cached totals, rederived from deliveries after every ball
    total_runs: Mapped[int] = mapped_column(Integer, default=0)
    total_wickets: Mapped[int] = mapped_column(Integer, default=0)
    overs_played: Mapped[float] = mapped_column(Float, default=0.0)
    extras: Mapped[int] = mapped_column(Integer, default=0)
    legal_balls: Mapped[int] = mapped_column(Integer, default=0)

    status: Mapped[InningsStatus] = mapped_column(Enum(InningsStatus), default=InningsStatus.IN_PROGRESS)

    # Ball by ball, in the order they were bowled
    deliveries: Mapped[List["Delivery"]] = relationship(
        "Delivery", back_populates="innings", order_by="Delivery.id"
    )

    @property
    def is_completed(self) -> bool:
        return self.status == InningsStatus.COMPLETED

    @property
    def overs_display(self) -> str:
        return f"{self.legal_balls // 6}.{self.legal_balls % 6}"

    @property
    def run_rate(self) -> float:
        if self.legal_balls == 0:
            return 0.0
        return round((self.total_runs / self.legal_balls) * 6, 2)

    def __repr__(self):
        return f"<Innings {self.innings_number}: {self.total_runs}/{self.total_wickets} ({self.overs_display})>"


class Delivery(Base):
    __tablename__ = "deliveries"

    # Insertion order; breaks ties between deliveries sharing a coordinate
    id: Mapped[int] = mapped_column(primary_key=True)
    innings_id: Mapped[int] = mapped_column(ForeignKey("innings.id"), index=True)
    innings: Mapped["Innings"] = relationship("Innings", back_populates="deliveries")

    over_number: Mapped[int] = mapped_column(Integer)
    ball_number: Mapped[int] = mapped_column(Integer)  # 1-6, legal balls only

    # Players involved
    batsman_id: Mapped[int] = mapped_column(ForeignKey("players.id"))
    bowler_id: Mapped[int] = mapped_column(ForeignKey("players.id"))
    batsman: Mapped["Player"] = relationship("Player", foreign_keys=[batsman_id])
    bowler: Mapped["Player"] = relationship("Player", foreign_keys=[bowler_id])

    # Outcome
    runs: Mapped[int] = mapped_column(Integer, default=0)  # Off the bat
    extras: Mapped[int] = mapped_column(Integer, default=0)
    extra_type: Mapped[ExtraType] = mapped_column(Enum(ExtraType), default=ExtraType.NONE)

    # Wicket
    is_wicket: Mapped[bool] = mapped_column(default=False)
    dismissal_type: Mapped[Optional[DismissalType]] = mapped_column(Enum(DismissalType), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    @property
    def is_legal(self) -> bool:
        return not self.extra_type.is_illegal

    def __repr__(self):
        return f"<Delivery {self.over_number}.{self.ball_number}: {self.runs}+{self.extras}>"
