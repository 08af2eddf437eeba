"""
Innings Aggregator - derives an innings' totals from its delivery log
"""
import logging
from dataclasses import dataclass
from typing import Iterable
from sqlalchemy.orm import Session

from app.models.match import Innings, InningsStatus, Delivery
from app.engine.ledger import DeliveryLedger, BALLS_PER_OVER

logger = logging.getLogger(__name__)


@dataclass
class InningsTotals:
    total_runs: int
    total_wickets: int
    overs_played: float
    extras: int
    legal_balls: int

    @property
    def overs_display(self) -> str:
        """Cricket notation from legal balls, e.g. 19.4"""
        return f"{self.legal_balls // BALLS_PER_OVER}.{self.legal_balls % BALLS_PER_OVER}"

    @property
    def run_rate(self) -> float:
        if self.legal_balls == 0:
            return 0.0
        return round((self.total_runs / self.legal_balls) * BALLS_PER_OVER, 2)


def compute_totals(deliveries: Iterable[Delivery]) -> InningsTotals:
    """
    Totals over a full delivery set.

    ``overs_played`` counts every delivery, wides and no-balls included, and
    is kept as a display figure. ``legal_balls`` follows the re-bowl rule and
    is what over counts, caps and run rate are based on.
    """
    total_runs = 0
    total_wickets = 0
    extras = 0
    count = 0
    legal_balls = 0

    for d in deliveries:
        count += 1
        total_runs += d.runs + d.extras
        extras += d.extras
        if d.is_wicket:
            total_wickets += 1
        if d.is_legal:
            legal_balls += 1

    return InningsTotals(
        total_runs=total_runs,
        total_wickets=total_wickets,
        overs_played=round(count / BALLS_PER_OVER, 1),
        extras=extras,
        legal_balls=legal_balls,
    )


class InningsAggregator:
    """Recomputes and overwrites the cached totals on an innings row"""

    def __init__(self, session: Session):
        self.session = session
        self.ledger = DeliveryLedger(session)

    def refresh(self, innings_id: int) -> InningsTotals:
        """Rederive totals from the ledger; last write wins. The caller commits."""
        innings = self.ledger.get_innings(innings_id)
        totals = compute_totals(self.ledger.deliveries(innings_id))
        self._apply(innings, totals)
        return totals

    def finalize(self, innings_id: int) -> InningsTotals:
        """Recompute totals and close the innings"""
        try:
            innings = self.ledger.get_innings(innings_id)
            totals = compute_totals(self.ledger.deliveries(innings_id))
            self._apply(innings, totals)
            innings.status = InningsStatus.COMPLETED
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(
            "Innings %s finalized: %s/%s (%s ov)",
            innings_id, totals.total_runs, totals.total_wickets, totals.overs_display,
        )
        return totals

    @staticmethod
    def _apply(innings: Innings, totals: InningsTotals):
        innings.total_runs = totals.total_runs
        innings.total_wickets = totals.total_wickets
        innings.overs_played = totals.overs_played
        innings.extras = totals.extras
        innings.legal_balls = totals.legal_balls
