"""
Shared updater result types.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from ..core.types import League, Phase, StatCategory


@dataclass
class CategoryOutcome:
    """Result of refreshing one stat category."""

    category: StatCategory
    success: bool = False
    records_fetched: int = 0
    players_resolved: int = 0
    players_merged: int = 0
    players_linked: int = 0
    partial: bool = False
    error: Optional[str] = None


@dataclass
class UpdateResult:
    """Result of one league update run."""

    league: League
    season: int
    phase: Phase = Phase.regular
    success: bool = False
    teams_upserted: int = 0
    categories: list[CategoryOutcome] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "league": self.league.value,
            "season": self.season,
            "phase": self.phase.value,
            "success": self.success,
            "teams_upserted": self.teams_upserted,
            "categories": [
                {
                    "category": c.category.value,
                    "success": c.success,
                    "records_fetched": c.records_fetched,
                    "players_resolved": c.players_resolved,
                    "players_merged": c.players_merged,
                    "players_linked": c.players_linked,
                    "partial": c.partial,
                    "error": c.error,
                }
                for c in self.categories
            ],
            "errors": self.errors,
        }
