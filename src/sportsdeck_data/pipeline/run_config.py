"""Per-run parameters threaded through every pipeline stage."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..core.types import League, Phase


@dataclass(frozen=True)
class RunConfig:
    """
    Immutable description of one league's update run.

    ``started_at`` doubles as the last-updated stamp of everything the run
    writes, so replaying a run with the same config leaves identical rows.
    """

    league: League
    season: int
    current_season: int
    phase: Phase = Phase.regular
    preserve_data_on_failure: bool = True
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_current_season(self) -> bool:
        return self.season == self.current_season
