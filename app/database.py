import logging

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from app.config import settings

logger = logging.getLogger(__name__)

engine = create_engine(settings.database_url, echo=False)
SessionLocal = sessionmaker(bind=engine)


class Base(DeclarativeBase):
    pass


# Columns added to "matches" after the first deployment
MATCH_COLUMN_MIGRATIONS = {
    "phase": "VARCHAR(14) NOT NULL DEFAULT 'TOSS'",
    "winner_id": "INTEGER REFERENCES teams(id)",
}


def run_migrations(bind=None) -> list[str]:
    """
    Add the phase/winner columns to an existing matches table.
    Columns already present are skipped, so this is safe to run on every start.
    Returns the names of the columns that were added.
    """
    bind = bind or engine
    inspector = inspect(bind)
    if not inspector.has_table("matches"):
        return []

    existing = {col["name"] for col in inspector.get_columns("matches")}
    added = []
    with bind.begin() as conn:
        for name, ddl in MATCH_COLUMN_MIGRATIONS.items():
            if name in existing:
                continue
            conn.execute(text(f"ALTER TABLE matches ADD COLUMN {name} {ddl}"))
            added.append(name)

    if added:
        logger.info("Migrated matches table, added columns: %s", ", ".join(added))
    return added


def init_db(bind=None):
    """Create all tables"""
    from app.models import team, player, tournament, match, stats  # noqa
    bind = bind or engine
    run_migrations(bind)
    Base.metadata.create_all(bind=bind)


def get_session():
    """Get a database session - for direct use (caller must close)"""
    return SessionLocal()


def get_db():
    """FastAPI dependency - yields session and closes after request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
