"""
PostgreSQL tests for sportsdeck-data.

These tests verify PostgreSQL compatibility:
- Placeholder translation (? to %s)
- Connection pooling and transactions
- The shared schema and ON CONFLICT upserts through the SQL repositories

Everything except the placeholder tests needs DATABASE_URL.
"""

import os
import uuid
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from sportsdeck_data.core.models import NbaTotals
from sportsdeck_data.core.types import League, Phase, StatCategory
from sportsdeck_data.pg_connection import to_pg_placeholders
from sportsdeck_data.pipeline.merger import SeasonStatMerger
from sportsdeck_data.pipeline.resolver import resolve_player_group
from sportsdeck_data.pipeline.run_config import RunConfig
from sportsdeck_data.providers.base import PlayerStatRecord
from sportsdeck_data.repositories import sql_repositories
from sportsdeck_data.schema import init_database

STAMP = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestPlaceholders:
    def test_question_marks_become_psycopg_placeholders(self):
        query = "SELECT * FROM teams WHERE league = ? AND team_id = ?"

        assert to_pg_placeholders(query) == "SELECT * FROM teams WHERE league = %s AND team_id = %s"

    def test_query_without_parameters_is_unchanged(self):
        assert to_pg_placeholders("SELECT 1") == "SELECT 1"


class TestPostgresDBConnection:
    """Test PostgresDB connection management."""

    def test_connection_requires_url(self):
        from sportsdeck_data.pg_connection import PostgresDB

        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="DATABASE_URL"):
                PostgresDB()

    def test_simple_query(self, pg_url):
        from sportsdeck_data.pg_connection import PostgresDB

        db = PostgresDB(pg_url)
        try:
            assert db.fetchone("SELECT 1 AS test") == {"test": 1}
        finally:
            db.close()


@pytest.fixture
def pg_db(pg_url):
    from sportsdeck_data.pg_connection import PostgresDB

    db = PostgresDB(pg_url, max_pool_size=2)
    init_database(db)
    yield db
    db.close()


@pytest.fixture
def player_id():
    """Unique id so runs against a shared database do not collide."""
    return f"test-{uuid.uuid4().hex[:12]}"


@pytest.fixture
def cleanup(pg_db, player_id):
    yield
    for table in ("player_season_categories", "player_season_entries", "player_stat_documents", "players"):
        pg_db.execute(f"DELETE FROM {table} WHERE player_id = ?", (player_id,))
    pg_db.execute("DELETE FROM system_info WHERE key = ?", (f"test_{player_id}",))


@pytest.mark.usefixtures("cleanup")
class TestPostgresRepositories:
    def test_transaction_rolls_back(self, pg_db, player_id):
        with pytest.raises(RuntimeError):
            with pg_db.transaction() as tx:
                tx.execute(
                    "INSERT INTO system_info (key, value, updated_at) VALUES (?, ?, ?)",
                    (f"test_{player_id}", "{}", STAMP.isoformat()),
                )
                raise RuntimeError("abort")

        assert pg_db.fetchone("SELECT key FROM system_info WHERE key = ?", (f"test_{player_id}",)) is None

    def test_merge_is_idempotent(self, pg_db, player_id):
        repos = sql_repositories(pg_db)
        merger = SeasonStatMerger(repos.stats)
        run = RunConfig(league=League.NBA, season=2025, current_season=2025, started_at=STAMP)
        record = PlayerStatRecord(
            player_id=player_id,
            player_name="Postgres Player",
            season=2025,
            category=StatCategory.totals,
            stats=NbaTotals(games=40, points=880),
            team="MIA",
            team_id="16",
            record_id=1,
        )

        merger.merge(resolve_player_group([record]), StatCategory.totals, run)
        first = repos.stats.get_document(League.NBA, player_id).model_dump()
        merger.merge(resolve_player_group([record]), StatCategory.totals, run)
        second = repos.stats.get_document(League.NBA, player_id).model_dump()

        assert first == second
        entry = repos.stats.get_document(League.NBA, player_id).entry(2025, Phase.regular)
        assert entry.categories[StatCategory.totals]["points"] == 880
        assert entry.categories[StatCategory.advanced] == {}

    def test_ledger_upsert(self, pg_db, player_id):
        repos = sql_repositories(pg_db)
        key = f"test_{player_id}"

        repos.system.set(key, {"success": False}, STAMP)
        repos.system.set(key, {"success": True}, STAMP)

        assert repos.system.get(key) == {"success": True}
