"""
Tests for the update orchestrator and the system ledger.
"""

from datetime import datetime, timezone

import pytest

from sportsdeck_data import orchestrator as orchestrator_module
from sportsdeck_data.core.types import League, Phase
from sportsdeck_data.orchestrator import (
    GLOBAL_LEDGER_KEY,
    UpdateOptions,
    UpdateOrchestrator,
    build_orchestrator,
    league_ledger_key,
    run_update,
)
from sportsdeck_data.updaters import EplUpdater, NbaUpdater, NflUpdater, UpdateResult

CLOCK_NOW = datetime(2025, 1, 15, 18, 0, tzinfo=timezone.utc)


class FakeUpdater:
    """Stands in for a league updater; records every run it is given."""

    def __init__(self, league, calls, *, success=True, error=None):
        self.league = league
        self.calls = calls
        self.success = success
        self.error = error
        self.runs = []
        self.closed = False

    async def run(self, run):
        self.calls.append(self.league)
        self.runs.append(run)
        if self.error:
            raise self.error
        return UpdateResult(league=self.league, season=run.season, phase=run.phase, success=self.success)

    async def close(self):
        self.closed = True


class BrokenLedger:
    def __init__(self):
        self.attempts = 0

    def get(self, key):
        return None

    def set(self, key, value, updated_at):
        self.attempts += 1
        raise RuntimeError("ledger unavailable")


@pytest.fixture
def calls():
    return []


@pytest.fixture
def updaters(calls):
    return {league: FakeUpdater(league, calls) for league in League}


@pytest.fixture
def orchestrator(updaters, repos, settings):
    return UpdateOrchestrator(updaters, repos.system, settings, clock=lambda: CLOCK_NOW)


class TestSequencing:
    @pytest.mark.asyncio
    async def test_default_cycle_skips_disabled_nfl(self, orchestrator, calls):
        report = await orchestrator.run_update()

        assert calls == [League.NBA, League.EPL]
        assert report.succeeded(League.NBA) is True
        assert report.succeeded(League.NFL) is None
        assert report.to_dict()["nfl"] is None

    @pytest.mark.asyncio
    async def test_leagues_run_in_fixed_order(self, orchestrator, calls):
        await orchestrator.run_update(UpdateOptions(epl=True, nfl=True, nba=True))

        assert calls == [League.NBA, League.NFL, League.EPL]

    @pytest.mark.asyncio
    async def test_option_disables_league(self, orchestrator, calls):
        report = await orchestrator.run_update(UpdateOptions(nba=False))

        assert calls == [League.EPL]
        assert League.NBA not in report.leagues

    @pytest.mark.asyncio
    async def test_one_league_failing_does_not_stop_the_next(self, updaters, repos, settings, calls):
        updaters[League.NBA].error = RuntimeError("provider exploded")
        orchestrator = UpdateOrchestrator(updaters, repos.system, settings, clock=lambda: CLOCK_NOW)

        report = await orchestrator.run_update()

        assert calls == [League.NBA, League.EPL]
        assert report.succeeded(League.NBA) is False
        assert report.leagues[League.NBA].error == "provider exploded"
        assert report.succeeded(League.EPL) is True

    @pytest.mark.asyncio
    async def test_unsuccessful_result_is_reported(self, updaters, repos, settings):
        updaters[League.EPL].success = False
        orchestrator = UpdateOrchestrator(updaters, repos.system, settings, clock=lambda: CLOCK_NOW)

        report = await orchestrator.run_update()

        assert report.to_dict()["epl"] is False
        assert report.to_dict()["nba"] is True


class TestRunConfig:
    @pytest.mark.asyncio
    async def test_defaults_use_current_seasons(self, orchestrator, updaters, settings):
        await orchestrator.run_update()

        nba_run = updaters[League.NBA].runs[0]
        assert nba_run.season == settings.current_season_nba
        assert nba_run.phase == Phase.regular
        assert nba_run.is_current_season is True
        assert nba_run.started_at == CLOCK_NOW
        assert nba_run.preserve_data_on_failure is True

    @pytest.mark.asyncio
    async def test_overrides_reach_the_run(self, orchestrator, updaters):
        await orchestrator.run_update(
            UpdateOptions(nba_phase="playoff", nba_season=2023, epl_season=2022)
        )

        nba_run = updaters[League.NBA].runs[0]
        assert nba_run.season == 2023
        assert nba_run.phase == Phase.playoff
        assert nba_run.is_current_season is False

        epl_run = updaters[League.EPL].runs[0]
        assert epl_run.season == 2022
        assert epl_run.phase == Phase.regular

    def test_nfl_ignores_season_overrides(self, orchestrator, settings):
        run = orchestrator.run_config(League.NFL, UpdateOptions(nba_season=2020, epl_season=2020))

        assert run.season == settings.current_season_nfl

    def test_epl_ignores_phase_override(self, orchestrator):
        run = orchestrator.run_config(League.EPL, UpdateOptions(nba_phase="playoff"))

        assert run.phase == Phase.regular

    def test_configured_phase_is_used_without_override(self, updaters, repos, settings):
        settings = settings.model_copy(update={"nba_season_type": Phase.playoff})
        orchestrator = UpdateOrchestrator(updaters, repos.system, settings, clock=lambda: CLOCK_NOW)

        assert orchestrator.run_config(League.NBA, UpdateOptions()).phase == Phase.playoff

    @pytest.mark.asyncio
    async def test_bad_run_parameters_fail_only_that_league(self, updaters, repos, settings, calls):
        # model_copy skips validation, so the bad phase reaches run_config
        settings = settings.model_copy(update={"nba_season_type": "Regular"})
        orchestrator = UpdateOrchestrator(updaters, repos.system, settings, clock=lambda: CLOCK_NOW)

        report = await orchestrator.run_update()

        assert calls == [League.EPL]
        assert report.succeeded(League.NBA) is False
        assert "Regular" in report.leagues[League.NBA].error
        assert report.succeeded(League.EPL) is True
        assert repos.system.get("lastUpdate_NBA")["success"] is False
        assert repos.system.get("lastUpdate_EPL")["success"] is True


class TestLedger:
    def test_format_timestamp_in_display_timezone(self, orchestrator):
        assert orchestrator.format_timestamp(CLOCK_NOW) == "2025-01-15 12:00:00 PM CST"

    def test_ledger_keys(self):
        assert league_ledger_key(League.NBA) == "lastUpdate_NBA"
        assert league_ledger_key(League.EPL, 2024) == "lastUpdate_EPL_2024"
        assert league_ledger_key(League.NBA, 2025, Phase.playoff) == "lastUpdate_NBA_2025_playoff"

    @pytest.mark.asyncio
    async def test_cycle_writes_global_league_and_season_entries(self, orchestrator, repos, settings):
        report = await orchestrator.run_update()

        assert report.formatted_timestamp == "2025-01-15 12:00:00 PM CST"

        cycle = repos.system.get(GLOBAL_LEDGER_KEY)
        assert cycle["formatted_timestamp"] == "2025-01-15 12:00:00 PM CST"
        assert "duration" in cycle
        assert "success" not in cycle

        nba = repos.system.get("lastUpdate_NBA")
        assert nba["success"] is True
        assert nba["season"] == settings.current_season_nba

        season_key = f"lastUpdate_NBA_{settings.current_season_nba}"
        assert repos.system.get(season_key)["success"] is True
        assert repos.system.get("lastUpdate_NFL") is None

    @pytest.mark.asyncio
    async def test_failed_league_is_recorded_as_failed(self, updaters, repos, settings):
        updaters[League.EPL].error = RuntimeError("standings unavailable")
        orchestrator = UpdateOrchestrator(updaters, repos.system, settings, clock=lambda: CLOCK_NOW)

        await orchestrator.run_update()

        assert repos.system.get("lastUpdate_EPL")["success"] is False
        assert repos.system.get("lastUpdate_NBA")["success"] is True

    @pytest.mark.asyncio
    async def test_ledger_failure_does_not_fail_the_cycle(self, updaters, settings):
        ledger = BrokenLedger()
        orchestrator = UpdateOrchestrator(updaters, ledger, settings, clock=lambda: CLOCK_NOW)

        report = await orchestrator.run_update()

        assert report.succeeded(League.NBA) is True
        # global entry, three for NBA (phase scoped), two for EPL
        assert ledger.attempts == 6

    @pytest.mark.asyncio
    async def test_nba_phases_are_recorded_separately(self, orchestrator, repos, settings):
        season = settings.current_season_nba

        await orchestrator.run_update(UpdateOptions(epl=False))
        await orchestrator.run_update(UpdateOptions(epl=False, nba_phase="playoff"))

        assert repos.system.get("lastUpdate_NBA")["phase"] == "playoff"
        assert repos.system.get(f"lastUpdate_NBA_{season}")["phase"] == "playoff"
        assert repos.system.get(f"lastUpdate_NBA_{season}_regular")["success"] is True
        assert repos.system.get(f"lastUpdate_NBA_{season}_playoff")["success"] is True

    @pytest.mark.asyncio
    async def test_single_phase_leagues_write_no_phase(self, orchestrator, repos, settings):
        await orchestrator.run_update(UpdateOptions(nba=False))

        assert "phase" not in repos.system.get("lastUpdate_EPL")
        assert repos.system.get(f"lastUpdate_EPL_{settings.current_season_epl}_regular") is None


class TestWiring:
    @pytest.mark.asyncio
    async def test_build_orchestrator_over_given_database(self, db, settings):
        orchestrator = build_orchestrator(settings, db=db)

        assert isinstance(orchestrator.updaters[League.NBA], NbaUpdater)
        assert isinstance(orchestrator.updaters[League.NFL], NflUpdater)
        assert isinstance(orchestrator.updaters[League.EPL], EplUpdater)
        assert orchestrator.updaters[League.EPL].client.league_id == 39

        await orchestrator.aclose()
        # the caller's database stays open
        assert db.fetchone("SELECT COUNT(*) AS n FROM teams")["n"] == 0

    @pytest.mark.asyncio
    async def test_aclose_closes_every_updater(self, orchestrator, updaters):
        await orchestrator.aclose()

        assert all(u.closed for u in updaters.values())

    @pytest.mark.asyncio
    async def test_run_update_applies_configured_log_level(self, monkeypatch, orchestrator, updaters, settings):
        levels = []
        monkeypatch.setattr(orchestrator_module, "configure_logging", levels.append)
        monkeypatch.setattr(orchestrator_module, "build_orchestrator", lambda s: orchestrator)
        settings = settings.model_copy(update={"log_level": "DEBUG"})

        report = await run_update(UpdateOptions(nba=False), settings=settings)

        assert levels == ["DEBUG"]
        assert report.succeeded(League.EPL) is True
        assert all(u.closed for u in updaters.values())
