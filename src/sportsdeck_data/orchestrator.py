"""
Update orchestrator.

Runs the enabled leagues one after another in a fixed order (NBA, NFL,
EPL), isolates each league's failure, and records the cycle in the
system ledger:

    lastUpdateTime                          end of the whole cycle
    lastUpdate_<LEAGUE>                     latest run of a league
    lastUpdate_<LEAGUE>_<SEASON>            latest run of a league season
    lastUpdate_<LEAGUE>_<SEASON>_<PHASE>    latest run of one phase (NBA only)

Usage:
    orchestrator = build_orchestrator()
    try:
        report = await orchestrator.run_update(UpdateOptions(nba_phase="playoff"))
    finally:
        await orchestrator.aclose()
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel

from .connection import Database, get_db
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.models import LedgerEntry
from .core.types import LEAGUE_ORDER, League, Phase, get_league_config
from .pipeline.run_config import RunConfig
from .providers.api_football import ApiFootballClient
from .providers.balldontlie_nfl import BallDontLieNFL
from .providers.nba_api import NbaStatsClient
from .repositories.base import SystemInfoRepository
from .repositories.sql import sql_repositories
from .schema import init_database
from .updaters.base import LeagueUpdater
from .updaters.epl import EplUpdater
from .updaters.nba import NbaUpdater
from .updaters.nfl import NflUpdater

logger = logging.getLogger(__name__)

GLOBAL_LEDGER_KEY = "lastUpdateTime"


def league_ledger_key(
    league: League,
    season: Optional[int] = None,
    phase: Optional[Phase] = None,
) -> str:
    if season is None:
        return f"lastUpdate_{league.value}"
    if phase is None:
        return f"lastUpdate_{league.value}_{season}"
    return f"lastUpdate_{league.value}_{season}_{Phase(phase).value}"


class UpdateOptions(BaseModel):
    """
    Trigger options for one update cycle.

    League flags left as None fall back to the configured defaults; season
    and phase overrides apply only to leagues that support them.
    """

    nba: Optional[bool] = None
    nfl: Optional[bool] = None
    epl: Optional[bool] = None
    nba_phase: Optional[Phase] = None
    nba_season: Optional[int] = None
    epl_season: Optional[int] = None


@dataclass
class LeagueOutcome:
    """How one league fared in a cycle."""

    league: League
    season: int
    success: bool
    duration: float
    finished_at: datetime
    phase: Optional[Phase] = None
    error: Optional[str] = None


@dataclass
class UpdateReport:
    """Result of one orchestrated update cycle."""

    leagues: dict[League, LeagueOutcome] = field(default_factory=dict)
    duration: float = 0.0
    timestamp: Optional[datetime] = None
    formatted_timestamp: str = ""
    options: UpdateOptions = field(default_factory=UpdateOptions)

    def succeeded(self, league: League) -> Optional[bool]:
        """Success flag of a league, or None if it did not run."""
        outcome = self.leagues.get(league)
        return outcome.success if outcome else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "nba": self.succeeded(League.NBA),
            "nfl": self.succeeded(League.NFL),
            "epl": self.succeeded(League.EPL),
            "duration": round(self.duration, 3),
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "formatted_timestamp": self.formatted_timestamp,
            "options": self.options.model_dump(mode="json"),
        }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UpdateOrchestrator:
    """Sequences league updaters and keeps the update ledger."""

    def __init__(
        self,
        updaters: Mapping[League, LeagueUpdater],
        ledger: SystemInfoRepository,
        settings: Settings,
        *,
        clock: Callable[[], datetime] = _utcnow,
        db: Optional[Database] = None,
    ):
        self.updaters = dict(updaters)
        self.ledger = ledger
        self.settings = settings
        self._clock = clock
        self._db = db
        self._tz = ZoneInfo(settings.display_timezone)

    # =========================================================================
    # Cycle
    # =========================================================================

    async def run_update(self, options: Optional[UpdateOptions] = None) -> UpdateReport:
        """Run one update cycle. Never raises for a single league's failure."""
        options = options or UpdateOptions()
        started = time.monotonic()
        report = UpdateReport(options=options)

        for league in LEAGUE_ORDER:
            if not self.is_enabled(league, options):
                continue
            updater = self.updaters.get(league)
            if updater is None:
                logger.warning("%s is enabled but has no updater configured", league.value)
                continue
            report.leagues[league] = await self._run_league(league, updater, options)

        report.duration = time.monotonic() - started
        report.timestamp = self._clock()
        report.formatted_timestamp = self.format_timestamp(report.timestamp)

        self._write_ledger(report)
        logger.info(
            "Update cycle finished in %.1fs: %s",
            report.duration,
            ", ".join(f"{o.league.value}={'ok' if o.success else 'failed'}" for o in report.leagues.values())
            or "no leagues enabled",
        )
        return report

    def is_enabled(self, league: League, options: UpdateOptions) -> bool:
        flags = {
            League.NBA: (options.nba, self.settings.nba_enabled),
            League.NFL: (options.nfl, self.settings.nfl_enabled),
            League.EPL: (options.epl, self.settings.epl_enabled),
        }
        requested, default = flags[league]
        return default if requested is None else requested

    def run_config(self, league: League, options: UpdateOptions) -> RunConfig:
        """
        Build the immutable per-league run parameters.

        Season and phase overrides only apply where the league registry marks
        them selectable; everything else runs the current regular season.
        """
        config = get_league_config(league)
        current = self.settings.current_seasons[league.value]
        season = current
        phase = Phase.regular

        if config.season_selectable:
            season = self._season_override(league, options) or current
        if config.phase_selectable:
            phase = Phase(options.nba_phase or self.settings.nba_season_type)

        return RunConfig(
            league=league,
            season=season,
            current_season=current,
            phase=phase,
            preserve_data_on_failure=self.settings.preserve_data_on_failure,
            started_at=self._clock(),
        )

    @staticmethod
    def _season_override(league: League, options: UpdateOptions) -> Optional[int]:
        return {
            League.NBA: options.nba_season,
            League.EPL: options.epl_season,
        }.get(league)

    async def _run_league(
        self,
        league: League,
        updater: LeagueUpdater,
        options: UpdateOptions,
    ) -> LeagueOutcome:
        started = time.monotonic()
        season = self.settings.current_seasons[league.value]
        phase = None
        error = None
        try:
            run = self.run_config(league, options)
            season = run.season
            if get_league_config(league).phase_selectable:
                phase = run.phase
            result = await updater.run(run)
            success = result.success
            logger.debug("%s run details: %s", league.value, result.to_dict())
        except Exception as e:
            logger.exception("%s update for %s failed", league.value, season)
            success = False
            error = str(e)

        return LeagueOutcome(
            league=league,
            season=season,
            success=success,
            duration=time.monotonic() - started,
            finished_at=self._clock(),
            phase=phase,
            error=error,
        )

    # =========================================================================
    # Ledger
    # =========================================================================

    def format_timestamp(self, moment: datetime) -> str:
        return moment.astimezone(self._tz).strftime("%Y-%m-%d %I:%M:%S %p %Z")

    def _write_ledger(self, report: UpdateReport) -> None:
        entries: list[tuple[str, LedgerEntry]] = [
            (
                GLOBAL_LEDGER_KEY,
                LedgerEntry(
                    timestamp=report.timestamp,
                    formatted_timestamp=report.formatted_timestamp,
                    duration=round(report.duration, 3),
                ),
            )
        ]
        for outcome in report.leagues.values():
            formatted = self.format_timestamp(outcome.finished_at)
            duration = round(outcome.duration, 3)
            entries.append((
                league_ledger_key(outcome.league),
                LedgerEntry(
                    success=outcome.success,
                    timestamp=outcome.finished_at,
                    formatted_timestamp=formatted,
                    duration=duration,
                    season=outcome.season,
                    phase=outcome.phase,
                ),
            ))
            entries.append((
                league_ledger_key(outcome.league, outcome.season),
                LedgerEntry(
                    success=outcome.success,
                    timestamp=outcome.finished_at,
                    formatted_timestamp=formatted,
                    duration=duration,
                    phase=outcome.phase,
                ),
            ))
            if outcome.phase is not None:
                entries.append((
                    league_ledger_key(outcome.league, outcome.season, outcome.phase),
                    LedgerEntry(
                        success=outcome.success,
                        timestamp=outcome.finished_at,
                        formatted_timestamp=formatted,
                        duration=duration,
                    ),
                ))

        for key, entry in entries:
            try:
                self.ledger.set(key, entry.model_dump(mode="json", exclude_none=True), entry.timestamp)
            except Exception:
                logger.exception("Failed to write ledger entry %s", key)

    async def aclose(self) -> None:
        """Close provider clients and the database this orchestrator owns."""
        for updater in self.updaters.values():
            await updater.close()
        if self._db is not None:
            self._db.close()


# =============================================================================
# Wiring
# =============================================================================


def build_orchestrator(
    settings: Optional[Settings] = None,
    db: Optional[Database] = None,
) -> UpdateOrchestrator:
    """Wire providers, repositories and updaters from settings."""
    settings = settings or get_settings()
    owns_db = db is None
    db = db or get_db(settings)
    init_database(db)
    repos = sql_repositories(db)

    client_options = {
        "timeout": settings.http_timeout,
        "max_retries": settings.provider_max_retries,
        "requests_per_minute": settings.provider_requests_per_minute,
    }

    updaters: dict[League, LeagueUpdater] = {
        League.NBA: NbaUpdater(
            NbaStatsClient(base_url=settings.nba_api_base_url, **client_options),
            repos,
        ),
        League.NFL: NflUpdater(
            BallDontLieNFL(
                settings.balldontlie_api_key,
                base_url=settings.balldontlie_nfl_base_url,
                **client_options,
            ),
            repos,
        ),
        League.EPL: EplUpdater(
            ApiFootballClient(
                settings.epl_api_key,
                league_id=settings.epl_league_id,
                base_url=settings.api_football_base_url,
                **client_options,
            ),
            repos,
            min_appearances=settings.epl_min_appearances,
        ),
    }

    for league, updater in updaters.items():
        if not updater.client.is_configured():
            logger.warning("%s provider has no API key configured", league.value)

    return UpdateOrchestrator(
        updaters,
        repos.system,
        settings,
        db=db if owns_db else None,
    )


async def run_update(
    options: Optional[UpdateOptions] = None,
    settings: Optional[Settings] = None,
) -> UpdateReport:
    """Build an orchestrator, run one cycle and release its resources."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    orchestrator = build_orchestrator(settings)
    try:
        return await orchestrator.run_update(options)
    finally:
        await orchestrator.aclose()
