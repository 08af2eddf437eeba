"""
Player Statistics Accumulator - per-player match figures from the delivery log
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.match import Match, Innings, Delivery
from app.models.player import Player
from app.models.team import Team
from app.models.stats import PlayerMatchStat
from app.engine.ledger import BALLS_PER_OVER
from app.engine.errors import NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class PlayerFigures:
    """Batting and bowling totals for one player in one match"""
    player_id: int
    runs: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    deliveries_bowled: int = 0
    runs_conceded: int = 0
    wickets: int = 0

    @property
    def overs_bowled(self) -> float:
        return round(self.deliveries_bowled / BALLS_PER_OVER, 1)


@dataclass
class BatsmanAtCrease:
    player_id: int
    name: str
    runs: int


@dataclass
class PlayerSummary:
    """Figures across all matches a player has stats for"""
    player_id: int
    name: str
    matches: int = 0
    runs: int = 0
    wickets: int = 0
    overs_bowled: float = 0.0
    runs_conceded: int = 0
    match_ids: set = field(default_factory=set)

    @property
    def batting_average(self) -> float:
        if self.matches == 0:
            return 0.0
        return round(self.runs / self.matches, 2)

    @property
    def bowling_economy(self) -> float:
        if self.overs_bowled == 0:
            return 0.0
        return round(self.runs_conceded / self.overs_bowled, 2)


def compute_figures(deliveries: list[Delivery]) -> dict[int, PlayerFigures]:
    """Fold a match's deliveries into per-player figures"""
    figures: dict[int, PlayerFigures] = {}

    def for_player(player_id: int) -> PlayerFigures:
        if player_id not in figures:
            figures[player_id] = PlayerFigures(player_id=player_id)
        return figures[player_id]

    for d in deliveries:
        batting = for_player(d.batsman_id)
        batting.runs += d.runs
        batting.balls_faced += 1
        if d.runs == 4:
            batting.fours += 1
        elif d.runs == 6:
            batting.sixes += 1

        bowling = for_player(d.bowler_id)
        bowling.deliveries_bowled += 1
        bowling.runs_conceded += d.runs + d.extras
        if d.is_wicket:
            bowling.wickets += 1

    return figures


class StatsAccumulator:
    """
    Keeps PlayerMatchStat rows in line with the delivery log.

    Every fold recomputes full match totals and overwrites the rows, so
    folding the same deliveries again changes nothing.
    """

    def __init__(self, session: Session):
        self.session = session

    def _match_deliveries(self, match_id: int) -> list[Delivery]:
        return list(
            self.session.scalars(
                select(Delivery)
                .join(Innings, Delivery.innings_id == Innings.id)
                .filter(Innings.match_id == match_id)
                .order_by(Delivery.id)
            )
        )

    def fold_player_stats(self, match_id: int) -> list[PlayerMatchStat]:
        if not self.session.get(Match, match_id):
            raise NotFoundError(f"Match {match_id} not found")

        figures = compute_figures(self._match_deliveries(match_id))
        existing = {
            row.player_id: row
            for row in self.session.scalars(select(PlayerMatchStat).filter_by(match_id=match_id))
        }

        rows = []
        try:
            for player_id, fig in sorted(figures.items()):
                row = existing.get(player_id)
                if row is None:
                    row = PlayerMatchStat(player_id=player_id, match_id=match_id)
                    self.session.add(row)
                row.runs = fig.runs
                row.balls_faced = fig.balls_faced
                row.fours = fig.fours
                row.sixes = fig.sixes
                row.overs_bowled = fig.overs_bowled
                row.runs_conceded = fig.runs_conceded
                row.wickets = fig.wickets
                rows.append(row)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info("Folded stats for match %s: %d players", match_id, len(rows))
        return rows

    def current_batsmen(self, innings_id: int) -> list[BatsmanAtCrease]:
        """
        The two most recently seen batsmen who are not out, with their runs
        in this innings.
        """
        if not self.session.get(Innings, innings_id):
            raise NotFoundError(f"Innings {innings_id} not found")

        deliveries = list(
            self.session.scalars(
                select(Delivery).filter_by(innings_id=innings_id).order_by(Delivery.id.desc())
            )
        )
        dismissed = {d.batsman_id for d in deliveries if d.is_wicket}
        runs = defaultdict(int)
        for d in deliveries:
            runs[d.batsman_id] += d.runs

        at_crease = []
        for d in deliveries:
            if d.batsman_id in dismissed or d.batsman_id in at_crease:
                continue
            at_crease.append(d.batsman_id)
            if len(at_crease) == 2:
                break

        result = []
        for player_id in at_crease:
            player = self.session.get(Player, player_id)
            result.append(BatsmanAtCrease(
                player_id=player_id,
                name=player.name if player else "?",
                runs=runs[player_id],
            ))
        return result

    def team_player_summaries(self, team_id: int) -> list[PlayerSummary]:
        """Career-style figures for every player on a team's roster"""
        team = self.session.get(Team, team_id)
        if not team:
            raise NotFoundError(f"Team {team_id} not found")

        summaries = {p.id: PlayerSummary(player_id=p.id, name=p.name) for p in team.players}
        if not summaries:
            return []

        stats = list(
            self.session.scalars(
                select(PlayerMatchStat).filter(PlayerMatchStat.player_id.in_(list(summaries)))
            )
        )
        for row in stats:
            summary = summaries[row.player_id]
            summary.match_ids.add(row.match_id)
            summary.runs += row.runs
            summary.wickets += row.wickets
            summary.overs_bowled += row.overs_bowled
            summary.runs_conceded += row.runs_conceded

        for summary in summaries.values():
            summary.matches = len(summary.match_ids)
            summary.overs_bowled = round(summary.overs_bowled, 1)

        return sorted(summaries.values(), key=lambda s: s.runs, reverse=True)
