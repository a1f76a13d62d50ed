"""
Per-league update sequences.
"""

from .base import LeagueUpdater
from .common import CategoryOutcome, UpdateResult
from .epl import EplUpdater
from .nba import NbaUpdater
from .nfl import NflUpdater

__all__ = [
    "LeagueUpdater",
    "CategoryOutcome",
    "UpdateResult",
    "NbaUpdater",
    "NflUpdater",
    "EplUpdater",
]
