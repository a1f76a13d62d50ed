"""
Player grouping and trade resolution.

A player traded mid-season shows up once per team, and some providers add
a combined line across all teams. For each player this picks:

- the stat line to keep: the combined line when there is one, otherwise
  the line with the most games
- the current team: the team of the most recently created per-team line
  (highest provider record id)

The two choices are independent, so the stats can come from the combined
line while the team comes from the latest single-team line.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ..providers.base import PlayerStatRecord

logger = logging.getLogger(__name__)


class ResolutionError(Exception):
    """A player's records cannot produce a usable stat line."""


@dataclass
class ResolvedPlayer:
    """One player's season after trade resolution."""

    player_id: str
    player_name: str
    record: PlayerStatRecord
    team: Optional[str] = None
    team_id: Optional[str] = None
    team_count: int = 1

    @property
    def traded(self) -> bool:
        return self.team_count > 1


def group_by_player(records: Iterable[PlayerStatRecord]) -> dict[str, list[PlayerStatRecord]]:
    """Group records by player id, keeping first-seen order."""
    groups: dict[str, list[PlayerStatRecord]] = {}
    skipped = 0
    for record in records:
        if not record.player_id:
            skipped += 1
            continue
        groups.setdefault(record.player_id, []).append(record)
    if skipped:
        logger.warning("Skipped %d record(s) without a player id", skipped)
    return groups


def _recency(record: PlayerStatRecord) -> int:
    return record.record_id if record.record_id is not None else -1


def resolve_player_group(records: list[PlayerStatRecord]) -> ResolvedPlayer:
    """
    Resolve one player's records into a single season line.

    Raises:
        ResolutionError: If the group is empty
    """
    if not records:
        raise ResolutionError("no records to resolve")

    if len(records) == 1:
        only = records[0]
        return ResolvedPlayer(
            player_id=only.player_id,
            player_name=only.player_name,
            record=only,
            team=None if only.is_aggregate else only.team,
            team_id=None if only.is_aggregate else only.team_id,
        )

    aggregate = next((r for r in records if r.is_aggregate), None)
    if aggregate is not None:
        source = aggregate
    else:
        # most games; the later record wins a tie
        source = max(enumerate(records), key=lambda item: (item[1].games, item[0]))[1]

    team_lines = [r for r in records if not r.is_aggregate]
    latest = max(team_lines, key=_recency) if team_lines else None

    return ResolvedPlayer(
        player_id=source.player_id,
        player_name=source.player_name or next((r.player_name for r in records if r.player_name), ""),
        record=source,
        team=latest.team if latest else None,
        team_id=latest.team_id if latest else None,
        team_count=len(team_lines),
    )


def resolve_records(records: Iterable[PlayerStatRecord]) -> list[ResolvedPlayer]:
    """Group and resolve every player; a player that fails is logged and skipped."""
    resolved = []
    for player_id, group in group_by_player(records).items():
        try:
            resolved.append(resolve_player_group(group))
        except ResolutionError as e:
            logger.warning("Could not resolve player %s: %s", player_id, e)
    return resolved
