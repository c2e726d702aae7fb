"""
Pipeline configuration
======================

Named constants for the fixed analysis choices, collected into a
`PipelineConfig` so a run (or the CLI) can override them.

The year window starts at 1982: before that the database records few
event types per year, and 1982 is the 10th percentile of the year
distribution of the full file.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import FrozenSet

YEAR_MIN = 1982
YEAR_MAX = 2011

# BGN_DATE looks like "4/18/1950 0:00:00"; only the date part is parsed.
DATE_FORMAT = "%m/%d/%Y"

# Event types meaning "unknown" (compared after strip + lower)
EXCLUDED_EVENT_TYPES: FrozenSet[str] = frozenset({"other", "?"})

# How many categories the charts and report tables show
DEFAULT_TOP_N = 10

METRICS = ("fatalities", "injuries", "crop_damage", "property_damage")


@dataclass
class PipelineConfig:
    """Knobs for one pipeline run."""
    year_min: int = YEAR_MIN
    year_max: int = YEAR_MAX
    date_format: str = DATE_FORMAT
    excluded_event_types: FrozenSet[str] = field(default_factory=lambda: EXCLUDED_EVENT_TYPES)
    top_n: int = DEFAULT_TOP_N

    def __post_init__(self) -> None:
        if self.year_min > self.year_max:
            raise ValueError(f"year_min ({self.year_min}) must be <= year_max ({self.year_max})")
        if self.top_n < 1:
            raise ValueError("top_n must be >= 1")
