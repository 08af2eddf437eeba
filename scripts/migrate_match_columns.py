#!/usr/bin/env python3
"""
Migration script for match lifecycle columns.
Adds matches.phase and matches.winner_id when they are missing; existing data is kept.
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.database import engine, run_migrations


def migrate():
    """Add any missing columns, then report"""
    print(f"Migrating {engine.url}...")
    added = run_migrations(engine)
    if added:
        print(f"Added columns: {', '.join(added)}")
    else:
        print("Columns already present, nothing to do.")
    print("Migration complete!")


if __name__ == "__main__":
    migrate()
