"""
Ingestion pipeline stages: fetch, resolve, merge, link.
"""

from .fetcher import FetchResult, PaginatedFetcher
from .linker import SummaryLinker, derive_summary_stats, per_game, should_link
from .merger import MergeError, SeasonStatMerger
from .resolver import ResolutionError, ResolvedPlayer, group_by_player, resolve_player_group, resolve_records
from .run_config import RunConfig

__all__ = [
    "FetchResult",
    "PaginatedFetcher",
    "ResolutionError",
    "ResolvedPlayer",
    "group_by_player",
    "resolve_player_group",
    "resolve_records",
    "MergeError",
    "SeasonStatMerger",
    "SummaryLinker",
    "derive_summary_stats",
    "per_game",
    "should_link",
    "RunConfig",
]
