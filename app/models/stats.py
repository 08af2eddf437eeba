"""
Per-match player figures, rederived from the delivery log
"""
from sqlalchemy import Integer, ForeignKey, Float, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base


class PlayerMatchStat(Base):
    """
    Batting and bowling figures for one player in one match.
    Rows are overwritten with full totals on every fold.
    """
    __tablename__ = "player_match_stats"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"))
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id"))

    # Batting stats
    runs: Mapped[int] = mapped_column(Integer, default=0)
    balls_faced: Mapped[int] = mapped_column(Integer, default=0)
    fours: Mapped[int] = mapped_column(Integer, default=0)
    sixes: Mapped[int] = mapped_column(Integer, default=0)

    # Bowling stats
    overs_bowled: Mapped[float] = mapped_column(Float, default=0.0)
    runs_conceded: Mapped[int] = mapped_column(Integer, default=0)
    wickets: Mapped[int] = mapped_column(Integer, default=0)

    # Relationships
    player: Mapped["Player"] = relationship("Player")

    __table_args__ = (
        UniqueConstraint('player_id', 'match_id', name='unique_player_match_stat'),
    )

    @property
    def strike_rate(self) -> float:
        """Calculate strike rate: (runs / balls) * 100"""
        if self.balls_faced == 0:
            return 0.0
        return round((self.runs / self.balls_faced) * 100, 2)

    @property
    def economy_rate(self) -> float:
        """Calculate economy rate: runs per over"""
        if self.overs_bowled == 0:
            return 0.0
        return round(self.runs_conceded / self.overs_bowled, 2)

    def __repr__(self):
        return f"<PlayerMatchStat player={self.player_id} match={self.match_id}: {self.runs} runs, {self.wickets} wkts>"
