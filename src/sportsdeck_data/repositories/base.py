"""
Base repository protocols.

Defines abstract interfaces for data persistence operations,
enabling database-agnostic data access. Every write is a single-entity
upsert; nothing here deletes teams, players or seasons.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.models import PlayerStatsDocument, PlayerSummary, TeamModel
from ..core.types import League, Phase, StatCategory


class TeamRepository(ABC):
    """Abstract interface for team data access."""

    @abstractmethod
    def upsert(self, team: TeamModel, updated_at: datetime) -> None:
        """
        Insert or update a team.

        A team without standings keeps the standings already stored.
        """
        ...

    @abstractmethod
    def find(self, league: League, team_id: str) -> Optional[TeamModel]:
        ...

    @abstractmethod
    def list_teams(self, league: League) -> list[TeamModel]:
        ...


class PlayerRepository(ABC):
    """Abstract interface for player summary rows."""

    @abstractmethod
    def upsert_summary(self, summary: PlayerSummary) -> None:
        """
        Insert or update a summary row.

        Fields left as None on ``summary`` keep their stored value; ``stats``
        and ``detail_ref`` are always replaced.
        """
        ...

    @abstractmethod
    def find(self, league: League, player_id: str) -> Optional[PlayerSummary]:
        ...

    @abstractmethod
    def list_by_team(self, league: League, team_id: str) -> list[PlayerSummary]:
        ...


class PlayerSeasonStatsRepository(ABC):
    """
    Abstract interface for per-player detail documents.

    A document is a header (id, name, profile) plus one entry per
    (season, phase), and each entry holds one block per stat category.
    """

    @abstractmethod
    def transaction(self) -> AbstractContextManager[Any]:
        """Group the following writes into one atomic unit."""
        ...

    @abstractmethod
    def upsert_document(
        self,
        league: League,
        player_id: str,
        name: str,
        profile: dict[str, Any],
        updated_at: datetime,
    ) -> None:
        """Create the document header, or refresh its name and profile."""
        ...

    @abstractmethod
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
        """Create the (season, phase) entry, or overwrite its metadata."""
        ...

    @abstractmethod
    def ensure_categories(
        self,
        league: League,
        player_id: str,
        season: int,
        phase: Phase,
        categories: tuple[StatCategory, ...],
        updated_at: datetime,
    ) -> None:
        """Create empty blocks for any of ``categories`` the entry lacks."""
        ...

    @abstractmethod
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
        """Overwrite one category block of an entry."""
        ...

    @abstractmethod
    def clear_category(
        self,
        league: League,
        season: int,
        phase: Phase,
        category: StatCategory,
        updated_at: datetime,
    ) -> int:
        """Empty one category block across a league season; returns rows touched."""
        ...

    @abstractmethod
    def get_document(self, league: League, player_id: str) -> Optional[PlayerStatsDocument]:
        ...

    @abstractmethod
    def list_category(
        self,
        league: League,
        season: int,
        phase: Phase,
        category: StatCategory,
    ) -> list[dict[str, Any]]:
        """
        Rows of one category across a league season.

        Each row has player_id, name, team, position and ``data`` (the block,
        empty dict when never filled).
        """
        ...


class SystemInfoRepository(ABC):
    """Key/value store backing the update ledger."""

    @abstractmethod
    def get(self, key: str) -> Optional[dict[str, Any]]:
        ...

    @abstractmethod
    def set(self, key: str, value: dict[str, Any], updated_at: datetime) -> None:
        ...


@dataclass
class RepositorySet:
    """Bundle of every repository the pipeline writes through."""

    teams: TeamRepository
    players: PlayerRepository
    stats: PlayerSeasonStatsRepository
    system: SystemInfoRepository
