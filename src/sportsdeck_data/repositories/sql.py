"""
SQL repository implementations.

Written once with ``?`` placeholders and ``ON CONFLICT`` upserts, which both
StatsDB (SQLite) and PostgresDB accept. JSON payloads are stored as TEXT.
"""

from __future__ import annotations

import json
import logging
from contextlib import AbstractContextManager
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from ..core.models import PlayerStatsDocument, PlayerSummary, SeasonEntry, Standings, TeamModel
from ..core.types import League, Phase, StatCategory
from .base import (
    PlayerRepository,
    PlayerSeasonStatsRepository,
    RepositorySet,
    SystemInfoRepository,
    TeamRepository,
)

if TYPE_CHECKING:
    from ..connection import Database

logger = logging.getLogger(__name__)


def _dump(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


def _load(value: Optional[str]) -> Any:
    return json.loads(value) if value else {}


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


# =============================================================================
# Teams
# =============================================================================


class SqlTeamRepository(TeamRepository):
    def __init__(self, db: "Database"):
        self.db = db

    def upsert(self, team: TeamModel, updated_at: datetime) -> None:
        standings = _dump(team.standings.model_dump(mode="json")) if team.standings else None
        self.db.execute(
            """
            INSERT INTO teams (
                league, team_id, name, display_name, abbreviation, city, logo,
                standings, last_updated
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (league, team_id) DO UPDATE SET
                name = excluded.name,
                display_name = excluded.display_name,
                abbreviation = COALESCE(excluded.abbreviation, teams.abbreviation),
                city = COALESCE(excluded.city, teams.city),
                logo = COALESCE(excluded.logo, teams.logo),
                standings = COALESCE(excluded.standings, teams.standings),
                last_updated = excluded.last_updated
            """,
            (
                team.league.value,
                team.team_id,
                team.name,
                team.display_name,
                team.abbreviation,
                team.city,
                team.logo,
                standings,
                _ts(updated_at),
            ),
        )

    @staticmethod
    def _to_model(row: dict[str, Any]) -> TeamModel:
        standings = _load(row["standings"])
        return TeamModel(
            league=League(row["league"]),
            team_id=row["team_id"],
            name=row["name"],
            display_name=row["display_name"],
            abbreviation=row["abbreviation"],
            city=row["city"],
            logo=row["logo"],
            standings=Standings.model_validate(standings) if standings else None,
        )

    def find(self, league: League, team_id: str) -> Optional[TeamModel]:
        row = self.db.fetchone(
            "SELECT * FROM teams WHERE league = ? AND team_id = ?",
            (league.value, team_id),
        )
        return self._to_model(row) if row else None

    def list_teams(self, league: League) -> list[TeamModel]:
        rows = self.db.fetchall(
            "SELECT * FROM teams WHERE league = ? ORDER BY name",
            (league.value,),
        )
        return [self._to_model(row) for row in rows]


# =============================================================================
# Player summaries
# =============================================================================


class SqlPlayerRepository(PlayerRepository):
    def __init__(self, db: "Database"):
        self.db = db

    def upsert_summary(self, summary: PlayerSummary) -> None:
        self.db.execute(
            """
            INSERT INTO players (
                league, player_id, name, team_id, position, number, age,
                nationality, height, weight, image, detail_ref, stats, last_updated
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (league, player_id) DO UPDATE SET
                name = excluded.name,
                team_id = COALESCE(excluded.team_id, players.team_id),
                position = COALESCE(excluded.position, players.position),
                number = COALESCE(excluded.number, players.number),
                age = COALESCE(excluded.age, players.age),
                nationality = COALESCE(excluded.nationality, players.nationality),
                height = COALESCE(excluded.height, players.height),
                weight = COALESCE(excluded.weight, players.weight),
                image = COALESCE(excluded.image, players.image),
                detail_ref = excluded.detail_ref,
                stats = excluded.stats,
                last_updated = excluded.last_updated
            """,
            (
                summary.league.value,
                summary.player_id,
                summary.name,
                summary.team_id,
                summary.position,
                summary.number,
                summary.age,
                summary.nationality,
                summary.height,
                summary.weight,
                summary.image,
                summary.detail_ref,
                _dump(summary.stats),
                _ts(summary.last_updated),
            ),
        )

    @staticmethod
    def _to_model(row: dict[str, Any]) -> PlayerSummary:
        return PlayerSummary(
            league=League(row["league"]),
            player_id=row["player_id"],
            name=row["name"],
            team_id=row["team_id"],
            position=row["position"],
            number=row["number"],
            age=row["age"],
            nationality=row["nationality"],
            height=row["height"],
            weight=row["weight"],
            image=row["image"],
            detail_ref=row["detail_ref"],
            stats=_load(row["stats"]),
            last_updated=_parse_ts(row["last_updated"]),
        )

    def find(self, league: League, player_id: str) -> Optional[PlayerSummary]:
        row = self.db.fetchone(
            "SELECT * FROM players WHERE league = ? AND player_id = ?",
            (league.value, player_id),
        )
        return self._to_model(row) if row else None

    def list_by_team(self, league: League, team_id: str) -> list[PlayerSummary]:
        rows = self.db.fetchall(
            "SELECT * FROM players WHERE league = ? AND team_id = ? ORDER BY name",
            (league.value, team_id),
        )
        return [self._to_model(row) for row in rows]


# =============================================================================
# Detail documents
# =============================================================================


class SqlPlayerSeasonStatsRepository(PlayerSeasonStatsRepository):
    def __init__(self, db: "Database"):
        self.db = db

    def transaction(self) -> AbstractContextManager[Any]:
        return self.db.transaction()

    def upsert_document(
        self,
        league: League,
        player_id: str,
        name: str,
        profile: dict[str, Any],
        updated_at: datetime,
    ) -> None:
        clean_profile = {k: v for k, v in profile.items() if v is not None}
        self.db.execute(
            """
            INSERT INTO player_stat_documents (league, player_id, name, profile, last_updated)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT (league, player_id) DO UPDATE SET
                name = CASE WHEN excluded.name = '' THEN player_stat_documents.name
                            ELSE excluded.name END,
                profile = CASE WHEN excluded.profile = '{}' THEN player_stat_documents.profile
                               ELSE excluded.profile END,
                last_updated = excluded.last_updated
            """,
            (league.value, player_id, name, _dump(clean_profile), _ts(updated_at)),
        )

    def upsert_entry(
        self,
        league: League,
        player_id: str,
        season: int,
        phase: Phase,
        *,
        team: Optional[str],
        team_id: Optional[str],
        position: Optional[str],
        age: Optional[int],
        updated_at: datetime,
    ) -> None:
        self.db.execute(
            """
            INSERT INTO player_season_entries (
                league, player_id, season, phase, team, team_id, position, age, last_updated
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (league, player_id, season, phase) DO UPDATE SET
                team = excluded.team,
                team_id = excluded.team_id,
                position = excluded.position,
                age = excluded.age,
                last_updated = excluded.last_updated
            """,
            (
                league.value,
                player_id,
                season,
                phase.value,
                team,
                team_id,
                position,
                age,
                _ts(updated_at),
            ),
        )

    def ensure_categories(
        self,
        league: League,
        player_id: str,
        season: int,
        phase: Phase,
        categories: tuple[StatCategory, ...],
        updated_at: datetime,
    ) -> None:
        for category in categories:
            self.db.execute(
                """
                INSERT INTO player_season_categories (
                    league, player_id, season, phase, category, data, last_updated
                )
                VALUES (?, ?, ?, ?, ?, '{}', ?)
                ON CONFLICT (league, player_id, season, phase, category) DO NOTHING
                """,
                (league.value, player_id, season, phase.value, category.value, _ts(updated_at)),
            )

    def put_category(
        self,
        league: League,
        player_id: str,
        season: int,
        phase: Phase,
        category: StatCategory,
        data: dict[str, Any],
        updated_at: datetime,
    ) -> None:
        self.db.execute(
            """
            INSERT INTO player_season_categories (
                league, player_id, season, phase, category, data, last_updated
            )
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (league, player_id, season, phase, category) DO UPDATE SET
                data = excluded.data,
                last_updated = excluded.last_updated
            """,
            (
                league.value,
                player_id,
                season,
                phase.value,
                category.value,
                _dump(data),
                _ts(updated_at),
            ),
        )

    def clear_category(
        self,
        league: League,
        season: int,
        phase: Phase,
        category: StatCategory,
        updated_at: datetime,
    ) -> int:
        where = "league = ? AND season = ? AND phase = ? AND category = ?"
        params = (league.value, season, phase.value, category.value)
        row = self.db.fetchone(
            f"SELECT COUNT(*) AS count FROM player_season_categories WHERE {where}",
            params,
        )
        self.db.execute(
            f"UPDATE player_season_categories SET data = '{{}}', last_updated = ? WHERE {where}",
            (_ts(updated_at), *params),
        )
        return row["count"] if row else 0

    def get_document(self, league: League, player_id: str) -> Optional[PlayerStatsDocument]:
        header = self.db.fetchone(
            "SELECT * FROM player_stat_documents WHERE league = ? AND player_id = ?",
            (league.value, player_id),
        )
        if header is None:
            return None

        entry_rows = self.db.fetchall(
            """
            SELECT * FROM player_season_entries
            WHERE league = ? AND player_id = ?
            ORDER BY season DESC, phase
            """,
            (league.value, player_id),
        )
        category_rows = self.db.fetchall(
            """
            SELECT season, phase, category, data FROM player_season_categories
            WHERE league = ? AND player_id = ?
            """,
            (league.value, player_id),
        )

        blocks: dict[tuple[int, str], dict[StatCategory, dict[str, Any]]] = {}
        for row in category_rows:
            key = (row["season"], row["phase"])
            blocks.setdefault(key, {})[StatCategory(row["category"])] = _load(row["data"])

        entries = [
            SeasonEntry(
                season=row["season"],
                phase=Phase(row["phase"]),
                team=row["team"],
                team_id=row["team_id"],
                position=row["position"],
                age=row["age"],
                categories=blocks.get((row["season"], row["phase"]), {}),
                last_updated=_parse_ts(row["last_updated"]),
            )
            for row in entry_rows
        ]

        return PlayerStatsDocument(
            league=league,
            player_id=player_id,
            name=header["name"],
            profile=_load(header["profile"]),
            entries=entries,
            last_updated=_parse_ts(header["last_updated"]),
        )

    def list_category(
        self,
        league: League,
        season: int,
        phase: Phase,
        category: StatCategory,
    ) -> list[dict[str, Any]]:
        rows = self.db.fetchall(
            """
            SELECT e.player_id, d.name, e.team, e.position, e.age, c.data
            FROM player_season_entries e
            JOIN player_stat_documents d
                ON d.league = e.league AND d.player_id = e.player_id
            LEFT JOIN player_season_categories c
                ON c.league = e.league AND c.player_id = e.player_id
                AND c.season = e.season AND c.phase = e.phase AND c.category = ?
            WHERE e.league = ? AND e.season = ? AND e.phase = ?
            ORDER BY e.player_id
            """,
            (category.value, league.value, season, phase.value),
        )
        for row in rows:
            row["data"] = _load(row["data"])
        return rows


# =============================================================================
# System ledger
# =============================================================================


class SqlSystemInfoRepository(SystemInfoRepository):
    def __init__(self, db: "Database"):
        self.db = db

    def get(self, key: str) -> Optional[dict[str, Any]]:
        row = self.db.fetchone("SELECT value FROM system_info WHERE key = ?", (key,))
        return _load(row["value"]) if row else None

    def set(self, key: str, value: dict[str, Any], updated_at: datetime) -> None:
        self.db.execute(
            """
            INSERT INTO system_info (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT (key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (key, _dump(value), _ts(updated_at)),
        )


def sql_repositories(db: "Database") -> RepositorySet:
    """Build the SQL repository set over one database handle."""
    return RepositorySet(
        teams=SqlTeamRepository(db),
        players=SqlPlayerRepository(db),
        stats=SqlPlayerSeasonStatsRepository(db),
        system=SqlSystemInfoRepository(db),
    )
