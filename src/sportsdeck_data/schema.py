"""
Database schema management for the stats database.

The DDL is portable between SQLite and PostgreSQL: JSON payloads are stored
as TEXT and timestamps as ISO-8601 strings.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .connection import Database

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS teams (
    league TEXT NOT NULL,
    team_id TEXT NOT NULL,
    name TEXT NOT NULL,
    display_name TEXT NOT NULL,
    abbreviation TEXT,
    city TEXT,
    logo TEXT,
    standings TEXT,
    last_updated TEXT,
    PRIMARY KEY (league, team_id)
);

CREATE TABLE IF NOT EXISTS players (
    league TEXT NOT NULL,
    player_id TEXT NOT NULL,
    name TEXT NOT NULL,
    team_id TEXT,
    position TEXT,
    number TEXT,
    age INTEGER,
    nationality TEXT,
    height TEXT,
    weight TEXT,
    image TEXT,
    detail_ref TEXT,
    stats TEXT NOT NULL DEFAULT '{}',
    last_updated TEXT,
    PRIMARY KEY (league, player_id)
);

CREATE INDEX IF NOT EXISTS idx_players_team ON players (league, team_id);

CREATE TABLE IF NOT EXISTS player_stat_documents (
    league TEXT NOT NULL,
    player_id TEXT NOT NULL,
    name TEXT NOT NULL,
    profile TEXT NOT NULL DEFAULT '{}',
    last_updated TEXT,
    PRIMARY KEY (league, player_id)
);

CREATE TABLE IF NOT EXISTS player_season_entries (
    league TEXT NOT NULL,
    player_id TEXT NOT NULL,
    season INTEGER NOT NULL,
    phase TEXT NOT NULL,
    team TEXT,
    team_id TEXT,
    position TEXT,
    age INTEGER,
    last_updated TEXT,
    PRIMARY KEY (league, player_id, season, phase)
);

CREATE INDEX IF NOT EXISTS idx_season_entries_season
    ON player_season_entries (league, season, phase);

CREATE TABLE IF NOT EXISTS player_season_categories (
    league TEXT NOT NULL,
    player_id TEXT NOT NULL,
    season INTEGER NOT NULL,
    phase TEXT NOT NULL,
    category TEXT NOT NULL,
    data TEXT NOT NULL DEFAULT '{}',
    last_updated TEXT,
    PRIMARY KEY (league, player_id, season, phase, category)
);

CREATE TABLE IF NOT EXISTS system_info (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""

TABLES = (
    "teams",
    "players",
    "player_stat_documents",
    "player_season_entries",
    "player_season_categories",
    "system_info",
)


def init_database(db: "Database") -> None:
    """
    Create every table and index if missing and record the schema version.

    Safe to call on every start.
    """
    logger.info("Initializing stats database (schema %s)", SCHEMA_VERSION)
    db.executescript(SCHEMA_SQL)
    db.execute(
        """
        INSERT INTO system_info (key, value, updated_at)
        VALUES (?, ?, ?)
        ON CONFLICT (key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """,
        (
            "schema_version",
            json.dumps({"version": SCHEMA_VERSION}),
            datetime.now(timezone.utc).isoformat(),
        ),
    )


def get_table_counts(db: "Database") -> dict[str, int]:
    """Get row counts for the pipeline tables."""
    counts = {}
    for table in TABLES:
        result = db.fetchone(f"SELECT COUNT(*) AS count FROM {table}")
        counts[table] = result["count"] if result else 0
    return counts
