"""
Column projection and filtering
===============================

Turns the loaded `StormRecord` list into the working set:

1) project each record to a `WorkingRecord` and derive `year`
2) keep a record only if ALL of these hold:
   - year is known and inside [year_min, year_max]
   - at least one impact field (fatalities, injuries, property or crop
     damage magnitude) is > 0
   - event type is not an "unknown" marker ("other" in any case, "?")

The predicates are evaluated together for each record, so the order in
which they are listed does not change the result. `FilterStats` counts
each reason a record was dropped (a record failing several predicates is
counted under the first one listed above).
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Tuple
import logging
import math

from .config import PipelineConfig, DATE_FORMAT
from .models import StormRecord, WorkingRecord

logger = logging.getLogger(__name__)

@dataclass
class FilterStats:
    """How many records each filter removed."""
    total: int = 0
    bad_date: int = 0
    out_of_range: int = 0
    zero_impact: int = 0
    excluded_type: int = 0
    kept: int = 0

    @property
    def dropped(self) -> int:
        return self.total - self.kept


def parse_year(begin_date: str, date_format: str = DATE_FORMAT) -> Optional[int]:
    """Return the calendar year of a `month/day/year` date, or None.

    A trailing time component ("4/18/1950 0:00:00") is ignored.
    """
    if not begin_date:
        return None
    date_part = begin_date.strip().split(" ")[0]
    try:
        return datetime.strptime(date_part, date_format).year
    except ValueError:
        return None


def is_excluded_type(event_type: str, excluded: Iterable[str]) -> bool:
    return event_type.strip().lower() in excluded


def project_and_filter(
    records: Iterable[StormRecord],
    config: Optional[PipelineConfig] = None,
) -> Tuple[List[WorkingRecord], FilterStats]:
    """Build the working set from the raw records.

    The raw records are not modified; every kept row is a new WorkingRecord.
    """
    config = config or PipelineConfig()
    stats = FilterStats()
    out: List[WorkingRecord] = []

    for rec in records:
        stats.total += 1
        year = parse_year(rec.begin_date, config.date_format)
        in_range = year is not None and config.year_min <= year <= config.year_max
        impact = rec.has_impact()
        excluded = is_excluded_type(rec.event_type, config.excluded_event_types)

        if in_range and impact and not excluded:
            out.append(WorkingRecord.from_record(rec, year))
            continue

        if year is None:
            stats.bad_date += 1
            logger.debug("Record %d: unparseable begin date %r", rec.record_id, rec.begin_date)
        elif not in_range:
            stats.out_of_range += 1
        elif not impact:
            stats.zero_impact += 1
        else:
            stats.excluded_type += 1

    stats.kept = len(out)
    logger.info(
        "Filtered %d -> %d records (bad date=%d, out of %d-%d=%d, zero impact=%d, unknown type=%d)",
        stats.total, stats.kept, stats.bad_date, config.year_min, config.year_max,
        stats.out_of_range, stats.zero_impact, stats.excluded_type,
    )
    return out, stats


def year_quantile(records: Iterable[StormRecord], q: float, date_format: str = DATE_FORMAT) -> Optional[int]:
    """Return the q-quantile (0..1) of the parsed years, nearest-rank method.

    Used to pick the start of the year window (q=0.1 gives 1982 on the
    full database). Returns None if no date parses.
    """
    if not 0.0 <= q <= 1.0:
        raise ValueError("q must be between 0 and 1")
    years = sorted(y for y in (parse_year(r.begin_date, date_format) for r in records) if y is not None)
    if not years:
        return None
    rank = max(1, math.ceil(q * len(years)))
    return years[rank - 1]
