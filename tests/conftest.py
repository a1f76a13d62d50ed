"""
Pytest configuration for sportsdeck-data tests.
"""

import asyncio
import os
from datetime import datetime, timezone
from typing import Optional

import pytest

from sportsdeck_data.connection import StatsDB
from sportsdeck_data.core.config import Settings
from sportsdeck_data.core.models import NbaAdvanced, NbaTotals
from sportsdeck_data.core.types import League, Phase, StatCategory
from sportsdeck_data.pipeline.run_config import RunConfig
from sportsdeck_data.providers.base import PlayerStatRecord
from sportsdeck_data.repositories import sql_repositories
from sportsdeck_data.schema import init_database

FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def pytest_configure(config):
    """Load DATABASE_URL from a local .env file when present."""
    env_file = os.path.join(os.path.dirname(__file__), "..", ".env")
    if os.path.exists(env_file):
        with open(env_file) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip().strip('"').strip("'")
                    if key not in os.environ:
                        os.environ[key] = value


@pytest.fixture(scope="session")
def pg_url():
    """Get the PostgreSQL database URL."""
    url = os.environ.get("DATABASE_URL")
    if not url:
        pytest.skip("DATABASE_URL not set")
    return url


@pytest.fixture
def db(tmp_path):
    """Fresh SQLite stats database with the schema applied."""
    database = StatsDB(tmp_path / "stats.sqlite")
    init_database(database)
    yield database
    database.close()


@pytest.fixture
def repos(db):
    return sql_repositories(db)


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, database_url=None)


@pytest.fixture
def sleeps(monkeypatch):
    """Record every asyncio.sleep instead of waiting."""
    recorded: list[float] = []

    async def fake_sleep(delay, *args, **kwargs):
        recorded.append(delay)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    return recorded


@pytest.fixture
def nba_run():
    """Factory for NBA run configs pinned to a fixed timestamp."""

    def make(
        season: int = 2025,
        phase: Phase = Phase.regular,
        current_season: int = 2025,
        preserve: bool = True,
        started_at: Optional[datetime] = None,
    ) -> RunConfig:
        return RunConfig(
            league=League.NBA,
            season=season,
            current_season=current_season,
            phase=phase,
            preserve_data_on_failure=preserve,
            started_at=started_at or FIXED_NOW,
        )

    return make


@pytest.fixture
def standings_body():
    """API-Football /standings body with two clubs."""
    return {
        "response": [
            {
                "league": {
                    "id": 39,
                    "season": 2024,
                    "standings": [[
                        {
                            "rank": 1,
                            "team": {"id": 40, "name": "Liverpool", "logo": "https://media/40.png"},
                            "points": 84,
                            "all": {"played": 38, "win": 25, "draw": 9, "lose": 4},
                        },
                        {
                            "rank": 2,
                            "team": {"id": 42, "name": "Arsenal", "logo": "https://media/42.png"},
                            "points": 74,
                            "all": {"played": 38, "win": 20, "draw": 14, "lose": 4},
                        },
                    ]],
                }
            }
        ]
    }


@pytest.fixture
def squad_row():
    """Factory for API-Football /players rows."""

    def make(player_id, appearances, *, team_id=40, league_id=39, season=2024, goals=5):
        return {
            "player": {
                "id": player_id,
                "name": f"Player {player_id}",
                "firstname": "First",
                "lastname": "Last",
                "age": 25,
                "nationality": "England",
                "height": "180 cm",
                "weight": "75 kg",
                "photo": f"https://media/players/{player_id}.png",
            },
            "statistics": [
                {
                    "team": {"id": team_id, "name": "Club"},
                    "league": {"id": league_id, "season": season},
                    "games": {
                        "appearences": appearances,
                        "lineups": appearances,
                        "minutes": appearances * 80,
                        "position": "Midfielder",
                        "rating": "7.10",
                        "number": 8,
                    },
                    "goals": {"total": goals, "assists": 2, "conceded": 0, "saves": None},
                    "cards": {"yellow": 1, "yellowred": 0, "red": 0},
                    "penalty": {"won": 1, "commited": 2, "scored": 0, "missed": 0, "saved": None},
                }
            ],
        }

    return make


@pytest.fixture
def nba_record():
    """Factory for NBA stat records."""

    def make(
        player_id: str = "1",
        team: Optional[str] = "LAL",
        record_id: Optional[int] = 100,
        games: int = 30,
        *,
        name: str = "Test Player",
        category: StatCategory = StatCategory.totals,
        aggregate: Optional[bool] = None,
        **stats,
    ) -> PlayerStatRecord:
        model = NbaTotals if category == StatCategory.totals else NbaAdvanced
        return PlayerStatRecord(
            player_id=player_id,
            player_name=name,
            season=2025,
            category=category,
            stats=model(games=games, **stats),
            team=team,
            team_id={"LAL": "14", "BOS": "2", "MIA": "16"}.get(team or ""),
            record_id=record_id,
            position="SF",
            age=27,
            is_aggregate=aggregate if aggregate is not None else bool(team and team.endswith("TM")),
        )

    return make
