"""
Bracket Engine - builds a single-elimination draw and advances winners through it
"""
import logging
import random
from dataclasses import dataclass
from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import settings
from app.models.team import Team
from app.models.tournament import Tournament, TournamentEntrant, TournamentStatus, EntrantStatus
from app.models.match import Match
from app.engine.errors import (
    ValidationError, NotFoundError, InsufficientEntrants, NoMatchesGenerated, ConcurrencyConflict
)

logger = logging.getLogger(__name__)


def bracket_size(entrant_count: int) -> int:
    """Smallest power of two >= entrant_count"""
    size = 1
    while size < entrant_count:
        size *= 2
    return size


@dataclass
class DrawPlan:
    """Team placement for a draw, before anything is persisted"""
    bye_team_ids: list[int]
    round1_pairs: list[tuple[int, int]]
    round2_slots: list[Optional[int]]  # flattened team1/team2 pairs
    later_round_sizes: list[int]  # match counts for rounds 3+


@dataclass
class SlotAddress:
    """Where a match's winner goes: round, match index in that round, side"""
    round: int
    match_index: int
    is_team1: bool


@dataclass
class AdvanceResult:
    match_id: int
    winner_team_id: int
    next_match_id: Optional[int] = None
    slot: Optional[str] = None  # "team1" / "team2"
    champion_team_id: Optional[int] = None
    already_recorded: bool = False


@dataclass
class BracketEntry:
    """One match of a bracket, as shown to organizers"""
    match_id: int
    round: int
    match_number: int
    team1_id: Optional[int]
    team1_name: Optional[str]
    team2_id: Optional[int]
    team2_name: Optional[str]
    winner_id: Optional[int]
    winner_name: Optional[str]
    phase: str


def plan_draw(team_ids: list[int]) -> DrawPlan:
    """
    Place already-shuffled teams into a draw.

    Byes pad the field to a power of two. The first teams get the byes and go
    straight to round 2; the rest are paired in order for round 1.
    """
    n = len(team_ids)
    if n < 2:
        raise InsufficientEntrants(f"Need at least 2 entrants for a draw, found {n}")

    byes = bracket_size(n) - n
    bye_team_ids = team_ids[:byes]
    remaining = team_ids[byes:]
    round1_pairs = [(remaining[i], remaining[i + 1]) for i in range(0, len(remaining), 2)]

    # Bye teams take the first round-2 slots, team1 before team2
    round2_count = (len(round1_pairs) + byes) // 2
    round2_slots: list[Optional[int]] = [None] * (round2_count * 2)
    for i, team_id in enumerate(bye_team_ids):
        round2_slots[i] = team_id

    later_round_sizes = []
    previous = round2_count
    while previous > 1:
        previous //= 2
        later_round_sizes.append(previous)

    return DrawPlan(
        bye_team_ids=bye_team_ids,
        round1_pairs=round1_pairs,
        round2_slots=round2_slots,
        later_round_sizes=later_round_sizes,
    )


def next_slot(round_number: int, match_index: int, bye_count: int) -> SlotAddress:
    """
    Address of the slot a winner moves into, from the source match's position
    (0-based index inside its round, ordered by match number).

    Round-2 slots 0..bye_count-1 belong to bye teams, so round-1 winners are
    shifted past them. Later rounds feed pairs of matches into one.
    """
    if round_number == 1:
        slot = bye_count + match_index
    else:
        slot = match_index
    return SlotAddress(round=round_number + 1, match_index=slot // 2, is_team1=slot % 2 == 0)


class BracketEngine:
    """
    Generates and advances a tournament's knockout bracket.
    """

    def __init__(self, session: Session, rng: Optional[random.Random] = None):
        self.session = session
        self.rng = rng or random.Random()

    def get_tournament(self, tournament_id: int) -> Tournament:
        tournament = self.session.get(Tournament, tournament_id)
        if not tournament:
            raise NotFoundError(f"Tournament {tournament_id} not found")
        return tournament

    def draw_team_ids(self, tournament_id: int) -> list[int]:
        """Accepted entrants marked present"""
        return list(
            self.session.scalars(
                select(TournamentEntrant.team_id)
                .filter_by(tournament_id=tournament_id, status=EntrantStatus.ACCEPTED, is_present=True)
                .order_by(TournamentEntrant.id)
            )
        )

    def round_matches(self, tournament_id: int, round_number: int, for_update: bool = False) -> list[Match]:
        query = (
            select(Match)
            .filter_by(tournament_id=tournament_id, round=round_number)
            .order_by(Match.match_number)
        )
        if for_update:
            query = query.with_for_update()
        return list(self.session.scalars(query))

    def generate_bracket(self, tournament_id: int) -> list[Match]:
        """
        Build the whole draw and persist it in one transaction.
        Later rounds are created as empty placeholders.
        """
        try:
            tournament = self.get_tournament(tournament_id)
            existing = self.session.scalars(
                select(Match.id).filter(Match.tournament_id == tournament_id, Match.round > 0).limit(1)
            ).first()
            if existing is not None:
                raise ValidationError(f"Bracket already generated for tournament {tournament_id}")

            team_ids = self.draw_team_ids(tournament_id)
            self.rng.shuffle(team_ids)
            plan = plan_draw(team_ids)

            matches = self._build_matches(tournament, plan)
            if not matches:
                raise NoMatchesGenerated(f"No matches generated for tournament {tournament_id}")

            self.session.add_all(matches)
            tournament.status = TournamentStatus.MATCHES
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(
            "Generated bracket for tournament %s: %d entrants, %d byes, %d matches",
            tournament_id, len(team_ids), len(plan.bye_team_ids), len(matches),
        )
        return matches

    def _build_matches(self, tournament: Tournament, plan: DrawPlan) -> list[Match]:
        overs_limit = tournament.overs_limit or settings.DEFAULT_OVERS_LIMIT
        matches = []
        match_number = 1

        def new_match(round_number: int, team1_id=None, team2_id=None) -> Match:
            nonlocal match_number
            match = Match(
                tournament_id=tournament.id,
                round=round_number,
                match_number=match_number,
                team1_id=team1_id,
                team2_id=team2_id,
                overs_limit=overs_limit,
            )
            matches.append(match)
            match_number += 1
            return match

        for team1_id, team2_id in plan.round1_pairs:
            new_match(1, team1_id, team2_id)

        slots = plan.round2_slots
        for i in range(0, len(slots), 2):
            new_match(2, slots[i], slots[i + 1])

        round_number = 2
        for size in plan.later_round_sizes:
            round_number += 1
            for _ in range(size):
                new_match(round_number)

        return matches

    def record_match_winner(self, match_id: int, winner_team_id: int) -> AdvanceResult:
        """Persist a knockout result and move the winner into the next round"""
        try:
            match = self.session.scalars(
                select(Match).filter_by(id=match_id).with_for_update()
            ).first()
            if not match:
                raise NotFoundError(f"Match {match_id} not found")
            result = self.apply_winner(match, winner_team_id)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return result

    def apply_winner(self, match: Match, winner_team_id: int) -> AdvanceResult:
        """
        Record the winner on ``match`` and fill its next-round slot, inside
        the caller's transaction.
        """
        if winner_team_id not in match.team_ids:
            raise ValidationError(f"Team {winner_team_id} is not playing match {match.id}")

        if match.winner_id is not None and match.winner_id != winner_team_id:
            logger.warning(
                "Match %s: winner already recorded as %s, got %s", match.id, match.winner_id, winner_team_id
            )
            raise ConcurrencyConflict(f"Match {match.id} already has a different winner")

        already_recorded = match.winner_id == winner_team_id
        match.winner_id = winner_team_id
        result = AdvanceResult(match_id=match.id, winner_team_id=winner_team_id, already_recorded=already_recorded)

        if not match.is_bracket_match or match.tournament_id is None:
            return result

        current_round = self.round_matches(match.tournament_id, match.round)
        position = [m.id for m in current_round].index(match.id)
        bye_count = self._bye_count(match.tournament_id) if match.round == 1 else 0
        address = next_slot(match.round, position, bye_count)

        next_round = self.round_matches(match.tournament_id, address.round, for_update=True)
        if not next_round:
            # Final
            tournament = self.get_tournament(match.tournament_id)
            tournament.champion_team_id = winner_team_id
            tournament.status = TournamentStatus.COMPLETED
            result.champion_team_id = winner_team_id
            logger.info("Tournament %s won by team %s", match.tournament_id, winner_team_id)
            return result

        target = next_round[address.match_index]
        side = "team1" if address.is_team1 else "team2"
        occupant = getattr(target, f"{side}_id")
        if occupant is not None and occupant != winner_team_id:
            raise ConcurrencyConflict(
                f"Match {target.id} {side} already holds team {occupant}"
            )
        setattr(target, f"{side}_id", winner_team_id)

        result.next_match_id = target.id
        result.slot = side
        logger.info(
            "Match %s won by team %s, advanced to match %s (%s)", match.id, winner_team_id, target.id, side
        )
        return result

    def _bye_count(self, tournament_id: int) -> int:
        """
        Byes recovered from the draw itself: round 2 has twice as many slots
        as it has matches, and every slot not fed by round 1 went to a bye.
        """
        round1 = len(self.round_matches(tournament_id, 1))
        round2 = len(self.round_matches(tournament_id, 2))
        return max(round2 * 2 - round1, 0)

    def get_bracket(self, tournament_id: int) -> list[BracketEntry]:
        self.get_tournament(tournament_id)
        matches = self.session.scalars(
            select(Match)
            .filter(Match.tournament_id == tournament_id, Match.round > 0)
            .order_by(Match.round, Match.match_number)
        )

        def name(team_id: Optional[int]) -> Optional[str]:
            if team_id is None:
                return None
            team = self.session.get(Team, team_id)
            return team.name if team else None

        return [
            BracketEntry(
                match_id=m.id,
                round=m.round,
                match_number=m.match_number,
                team1_id=m.team1_id,
                team1_name=name(m.team1_id),
                team2_id=m.team2_id,
                team2_name=name(m.team2_id),
                winner_id=m.winner_id,
                winner_name=name(m.winner_id),
                phase=m.phase.value,
            )
            for m in matches
        ]
