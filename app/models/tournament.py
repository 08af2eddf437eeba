"""
Tournament and entrant models
"""
from typing import Optional, List
from sqlalchemy import String, Integer, ForeignKey, Enum, DateTime, Boolean, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
import enum
from app.database import Base


class TournamentStatus(enum.Enum):
    ONGOING = "ongoing"  # Taking applications
    MATCHES = "matches"  # Bracket generated, knockouts being played
    COMPLETED = "completed"


class EntrantStatus(enum.Enum):
    APPLIED = "applied"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Tournament(Base):
    __tablename__ = "tournaments"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Overs per innings for every match of the tournament
    overs_limit: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    status: Mapped[TournamentStatus] = mapped_column(Enum(TournamentStatus), default=TournamentStatus.ONGOING)

    # Champion (set when the final is decided)
    champion_team_id: Mapped[Optional[int]] = mapped_column(ForeignKey("teams.id"), nullable=True)

    # Relationships
    entrants: Mapped[List["TournamentEntrant"]] = relationship("TournamentEntrant", back_populates="tournament")

    def __repr__(self):
        return f"<Tournament '{self.name}' - {self.status.value}>"


class TournamentEntrant(Base):
    """
    A team that applied to a tournament.
    Accepted entrants marked present on match day make up the knockout draw.
    """
    __tablename__ = "tournament_entrants"

    id: Mapped[int] = mapped_column(primary_key=True)
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id"))
    tournament: Mapped["Tournament"] = relationship("Tournament", back_populates="entrants")

    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"))
    team: Mapped["Team"] = relationship("Team")

    status: Mapped[EntrantStatus] = mapped_column(Enum(EntrantStatus), default=EntrantStatus.APPLIED)
    is_present: Mapped[bool] = mapped_column(Boolean, default=False)

    __table_args__ = (
        UniqueConstraint('tournament_id', 'team_id', name='unique_tournament_entrant'),
    )

    def __repr__(self):
        return f"<TournamentEntrant tournament={self.tournament_id} team={self.team_id} {self.status.value}>"
