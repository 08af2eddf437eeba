MAX_LINEUP_SIZE = 11


class LineupValidator:
    @staticmethod
    def validate(team_id: int, players: list, submitted_ids: list[int]) -> dict:
        """
        Validate a match lineup for one team.

        Rules:
        1. At least 1 and at most 11 players
        2. No player listed twice
        3. Every player is on the team's roster
        """
        errors = []

        if not submitted_ids:
            errors.append("Lineup must include at least 1 player")
        elif len(submitted_ids) > MAX_LINEUP_SIZE:
            errors.append(f"Max {MAX_LINEUP_SIZE} players allowed, got {len(submitted_ids)}")

        if len(set(submitted_ids)) != len(submitted_ids):
            errors.append("Lineup lists a player more than once")

        found = {p.id for p in players}
        missing = [pid for pid in submitted_ids if pid not in found]
        if missing:
            errors.append(f"Unknown players: {missing}")

        foreign = [p.id for p in players if p.team_id != team_id]
        if foreign:
            errors.append(f"Players not on team {team_id}: {foreign}")

        return {
            "valid": len(errors) == 0,
            "errors": errors,
            "size": len(submitted_ids),
        }
