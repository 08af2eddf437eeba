"""
Tests for the matches-table migration that adds the phase/winner columns.
"""
import pytest
from sqlalchemy import create_engine, inspect, text

from app.database import Base, init_db, run_migrations


LEGACY_MATCHES = """
CREATE TABLE matches (
    id INTEGER PRIMARY KEY,
    tournament_id INTEGER,
    team1_id INTEGER,
    team2_id INTEGER,
    round INTEGER,
    match_number INTEGER,
    toss_winner_id INTEGER,
    toss_decision VARCHAR(10),
    batting_first_team_id INTEGER,
    overs_limit INTEGER,
    created_at DATETIME
)
"""


@pytest.fixture
def legacy_engine(tmp_path):
    """A database from before matches had a phase or a winner"""
    engine = create_engine(f"sqlite:///{tmp_path / 'legacy.db'}")
    with engine.begin() as conn:
        conn.execute(text(LEGACY_MATCHES))
        conn.execute(text("INSERT INTO matches (id, team1_id, team2_id, round, match_number) VALUES (1, 1, 2, 0, 0)"))
    yield engine
    engine.dispose()


def column_names(engine) -> set[str]:
    return {c["name"] for c in inspect(engine).get_columns("matches")}


class TestRunMigrations:
    def test_adds_missing_columns(self, legacy_engine):
        added = run_migrations(legacy_engine)
        assert added == ["phase", "winner_id"]
        assert {"phase", "winner_id"} <= column_names(legacy_engine)

    def test_second_run_is_a_no_op(self, legacy_engine):
        run_migrations(legacy_engine)
        assert run_migrations(legacy_engine) == []

    def test_existing_rows_default_to_toss(self, legacy_engine):
        run_migrations(legacy_engine)
        with legacy_engine.connect() as conn:
            row = conn.execute(text("SELECT phase, winner_id FROM matches WHERE id = 1")).one()
        assert row.phase == "TOSS"
        assert row.winner_id is None

    def test_no_matches_table(self):
        """A brand-new database has nothing to migrate"""
        engine = create_engine("sqlite:///:memory:")
        assert run_migrations(engine) == []

    def test_current_schema_needs_nothing(self):
        engine = create_engine("sqlite:///:memory:")
        import app.models  # noqa
        Base.metadata.create_all(engine)
        assert run_migrations(engine) == []


class TestInitDb:
    def test_init_db_migrates_then_creates(self, legacy_engine):
        init_db(legacy_engine)
        tables = set(inspect(legacy_engine).get_table_names())
        assert {"matches", "innings", "deliveries", "tournaments", "player_match_stats"} <= tables
        assert "phase" in column_names(legacy_engine)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
