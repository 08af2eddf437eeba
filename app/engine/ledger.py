"""
Delivery Ledger - append-only ball log for an innings, and the over/ball sequencer
"""
import logging
from dataclasses import dataclass
from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from app.config import settings
from app.models.match import Innings, Delivery, ExtraType, DismissalType
from app.engine.errors import ValidationError, NotFoundError

logger = logging.getLogger(__name__)

BALLS_PER_OVER = 6


@dataclass(frozen=True)
class BallCoordinate:
    """(over, ball) position of a delivery, both 1-based"""
    over: int
    ball: int

    def __str__(self):
        return f"{self.over}.{self.ball}"


FIRST_BALL = BallCoordinate(1, 1)


def next_coordinate(last: Optional[Delivery]) -> BallCoordinate:
    """
    Coordinate of the delivery that follows ``last``.

    A wide or no-ball is re-bowled at the same coordinate, so two illegal
    deliveries in a row share one (over, ball).
    """
    if last is None:
        return FIRST_BALL

    if last.extra_type.is_illegal:
        return BallCoordinate(last.over_number, last.ball_number)

    if last.ball_number == BALLS_PER_OVER:
        return BallCoordinate(last.over_number + 1, 1)

    return BallCoordinate(last.over_number, last.ball_number + 1)


@dataclass
class DeliveryInput:
    """A ball as submitted by the scorer"""
    batsman_id: int
    bowler_id: int
    runs: int = 0
    extras: int = 0
    is_wicket: bool = False
    dismissal_type: Optional[DismissalType] = None
    extra_type: ExtraType = ExtraType.NONE
    over_number: Optional[int] = None
    ball_number: Optional[int] = None


class DeliveryLedger:
    """
    Append-only store of deliveries for innings.
    Chronology is insertion order (delivery id), never the numeric coordinate.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_innings(self, innings_id: int) -> Innings:
        innings = self.session.get(Innings, innings_id)
        if not innings:
            raise NotFoundError(f"Innings {innings_id} not found")
        return innings

    def deliveries(self, innings_id: int) -> list[Delivery]:
        """All deliveries of an innings in the order they were bowled"""
        return list(
            self.session.scalars(
                select(Delivery)
                .filter_by(innings_id=innings_id)
                .order_by(Delivery.id)
            )
        )

    def last_delivery(self, innings_id: int) -> Optional[Delivery]:
        return self.session.scalars(
            select(Delivery)
            .filter_by(innings_id=innings_id)
            .order_by(Delivery.id.desc())
            .limit(1)
        ).first()

    def next_ball(self, innings_id: int) -> BallCoordinate:
        self.get_innings(innings_id)
        return next_coordinate(self.last_delivery(innings_id))

    def legal_ball_count(self, innings_id: int) -> int:
        return self.session.scalar(
            select(func.count(Delivery.id))
            .filter(Delivery.innings_id == innings_id)
            .filter(Delivery.extra_type.not_in([ExtraType.WIDE, ExtraType.NO_BALL]))
        ) or 0

    def wicket_count(self, innings_id: int) -> int:
        return self.session.scalar(
            select(func.count(Delivery.id))
            .filter(Delivery.innings_id == innings_id, Delivery.is_wicket.is_(True))
        ) or 0

    def append(self, innings_id: int, ball: DeliveryInput) -> Delivery:
        """
        Validate and add a delivery. The caller commits.

        The submitted coordinate must be the one the sequencer hands out;
        when it is omitted the sequencer's coordinate is used.
        """
        innings = self.get_innings(innings_id)
        self._check_innings_open(innings)
        self._check_values(ball)

        expected = next_coordinate(self.last_delivery(innings_id))
        if ball.over_number is None and ball.ball_number is None:
            coordinate = expected
        else:
            coordinate = BallCoordinate(ball.over_number or 0, ball.ball_number or 0)
            if coordinate != expected:
                raise ValidationError(
                    f"Out of sequence delivery {coordinate}, next ball is {expected}"
                )

        delivery = Delivery(
            innings_id=innings_id,
            over_number=coordinate.over,
            ball_number=coordinate.ball,
            batsman_id=ball.batsman_id,
            bowler_id=ball.bowler_id,
            runs=ball.runs,
            extras=ball.extras,
            extra_type=ball.extra_type,
            is_wicket=ball.is_wicket,
            dismissal_type=ball.dismissal_type if ball.is_wicket else None,
        )
        self.session.add(delivery)
        self.session.flush()

        logger.debug(
            "Innings %s: delivery %s at %s (%s+%s, %s)",
            innings_id, delivery.id, coordinate, ball.runs, ball.extras, ball.extra_type.value,
        )
        return delivery

    def _check_innings_open(self, innings: Innings):
        if innings.is_completed:
            raise ValidationError(f"Innings {innings.id} is already completed")

        if self.wicket_count(innings.id) >= settings.MAX_WICKETS:
            raise ValidationError(f"Innings {innings.id} is all out")

        overs_limit = innings.match.overs_limit
        if overs_limit and self.legal_ball_count(innings.id) >= overs_limit * BALLS_PER_OVER:
            raise ValidationError(f"Innings {innings.id} has used all {overs_limit} overs")

    @staticmethod
    def _check_values(ball: DeliveryInput):
        if not ball.batsman_id or not ball.bowler_id:
            raise ValidationError("batsman_id and bowler_id are required")
        if ball.runs < 0 or ball.extras < 0:
            raise ValidationError("Runs and extras can't be negative")
