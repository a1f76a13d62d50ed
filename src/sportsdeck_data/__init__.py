"""
sportsdeck-data: keeps NBA, NFL and EPL player and team statistics current.

Pipeline:
- providers/   provider clients (NBA API, API-Football, BallDontLie NFL)
- pipeline/    paginated fetch → trade resolution → season merge → summary link
- updaters/    per-league sequences
- orchestrator one update cycle across leagues, plus the update ledger

Usage:
    from sportsdeck_data import UpdateOptions, run_update

    report = await run_update(UpdateOptions(nba_phase="playoff", epl=False))
"""

from .connection import StatsDB, get_db
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.types import League, Phase, StatCategory
from .orchestrator import (
    UpdateOptions,
    UpdateOrchestrator,
    UpdateReport,
    build_orchestrator,
    run_update,
)
from .schema import init_database

__version__ = "1.0.0"

__all__ = [
    "StatsDB",
    "get_db",
    "init_database",
    "Settings",
    "get_settings",
    "configure_logging",
    "League",
    "Phase",
    "StatCategory",
    "UpdateOptions",
    "UpdateOrchestrator",
    "UpdateReport",
    "build_orchestrator",
    "run_update",
]
