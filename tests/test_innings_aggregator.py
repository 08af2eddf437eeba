"""
Tests for innings totals derived from the delivery log.
"""
import pytest
from unittest.mock import patch

from app.models import Delivery, ExtraType, InningsStatus, DismissalType
from app.engine.innings_aggregator import InningsAggregator, compute_totals
from app.engine.ledger import DeliveryInput
from app.engine.scoring_engine import ScoringEngine


def ball(runs=0, extras=0, extra_type=ExtraType.NONE, wicket=False) -> Delivery:
    return Delivery(
        over_number=1, ball_number=1, runs=runs, extras=extras,
        extra_type=extra_type, is_wicket=wicket,
    )


class TestComputeTotals:
    """Pure totals over a delivery list"""

    def test_no_deliveries(self):
        totals = compute_totals([])
        assert totals.total_runs == 0
        assert totals.total_wickets == 0
        assert totals.overs_played == 0.0
        assert totals.extras == 0
        assert totals.legal_balls == 0
        assert totals.run_rate == 0.0
        assert totals.overs_display == "0.0"

    def test_one_clean_over(self):
        """1, 4, 0, 6, 2, 1 makes 14 off exactly one over"""
        totals = compute_totals([ball(r) for r in (1, 4, 0, 6, 2, 1)])
        assert totals.total_runs == 14
        assert totals.total_wickets == 0
        assert totals.overs_played == 1.0
        assert totals.legal_balls == 6
        assert totals.overs_display == "1.0"
        assert totals.run_rate == 14.0

    def test_extras_count_in_total(self):
        totals = compute_totals([ball(1), ball(0, 1, ExtraType.WIDE), ball(0, 2, ExtraType.OTHER)])
        assert totals.total_runs == 4
        assert totals.extras == 3

    def test_wides_count_toward_overs_played_but_not_legal_balls(self):
        """overs_played is a display figure over all deliveries"""
        deliveries = [ball(0, 1, ExtraType.WIDE)] + [ball(1) for _ in range(5)]
        totals = compute_totals(deliveries)
        assert totals.overs_played == 1.0
        assert totals.legal_balls == 5
        assert totals.overs_display == "0.5"

    def test_wickets(self):
        totals = compute_totals([ball(wicket=True), ball(2), ball(wicket=True)])
        assert totals.total_wickets == 2

    def test_overs_played_rounds_to_one_decimal(self):
        totals = compute_totals([ball(1) for _ in range(10)])
        assert totals.overs_played == 1.7


class TestInningsAggregator:
    """Cached totals on the innings row"""

    def test_record_delivery_refreshes_cached_totals(self, test_db, first_innings):
        innings_id, lions, tigers = first_innings
        engine = ScoringEngine(test_db)
        batsman, bowler = lions.players[0].id, tigers.players[10].id

        for runs in (1, 4, 0, 6, 2, 1):
            engine.record_delivery(innings_id, DeliveryInput(batsman_id=batsman, bowler_id=bowler, runs=runs))

        innings = engine.get_innings(innings_id)
        assert innings.total_runs == 14
        assert innings.total_wickets == 0
        assert innings.overs_played == 1.0
        assert innings.legal_balls == 6
        assert innings.status == InningsStatus.IN_PROGRESS

    def test_refresh_is_repeatable(self, test_db, first_innings):
        """Recomputing without new balls changes nothing"""
        innings_id, lions, tigers = first_innings
        engine = ScoringEngine(test_db)
        engine.record_delivery(innings_id, DeliveryInput(
            batsman_id=lions.players[0].id, bowler_id=tigers.players[10].id, runs=3,
        ))
        aggregator = InningsAggregator(test_db)

        first = aggregator.refresh(innings_id)
        second = aggregator.refresh(innings_id)
        assert first == second
        assert engine.get_innings(innings_id).total_runs == 3

    def test_finalize_closes_innings(self, test_db, first_innings):
        innings_id, lions, tigers = first_innings
        engine = ScoringEngine(test_db)
        engine.record_delivery(innings_id, DeliveryInput(
            batsman_id=lions.players[0].id, bowler_id=tigers.players[10].id,
            is_wicket=True, dismissal_type=DismissalType.CAUGHT,
        ))

        totals = engine.finalize_inning(innings_id)
        innings = engine.get_innings(innings_id)

        assert innings.status == InningsStatus.COMPLETED
        assert innings.is_completed
        assert totals.total_wickets == 1
        assert innings.total_wickets == 1

    def test_finalize_empty_innings(self, test_db, first_innings):
        """An innings with no balls finalizes to zeros"""
        innings_id, _, _ = first_innings
        totals = InningsAggregator(test_db).finalize(innings_id)
        assert totals.total_runs == 0
        assert totals.overs_played == 0.0

    def test_failed_finalize_rolls_back(self, test_db, first_innings):
        """A commit failure leaves the innings open and the session clean"""
        innings_id, lions, tigers = first_innings
        engine = ScoringEngine(test_db)
        engine.record_delivery(innings_id, DeliveryInput(
            batsman_id=lions.players[0].id, bowler_id=tigers.players[10].id, runs=2,
        ))

        with patch.object(test_db, "commit", side_effect=RuntimeError("disk full")):
            with pytest.raises(RuntimeError):
                InningsAggregator(test_db).finalize(innings_id)

        assert not test_db.dirty, "Session should have been rolled back"
        innings = engine.get_innings(innings_id)
        assert innings.status == InningsStatus.IN_PROGRESS
        assert innings.total_runs == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
