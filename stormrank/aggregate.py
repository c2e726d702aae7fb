"""
Aggregation by event type
=========================

For each metric the working set is grouped by (canonical) event type, the
metric is summed per group and the groups are ranked by total, descending.
Groups with equal totals keep the order in which their event type was
first seen in the working set.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Optional
import logging

from .dsa import grouped_sums, merge_sort
from .models import ImpactSummary, RankedTable, WorkingRecord

logger = logging.getLogger(__name__)

# metric -> (value getter, counts are whole people)
METRIC_GETTERS: Dict[str, tuple] = {
    "fatalities": (lambda r: r.fatalities, True),
    "injuries": (lambda r: r.injuries, True),
    "crop_damage": (lambda r: r.crop_damage_total, False),
    "property_damage": (lambda r: r.property_damage_total, False),
}

def rank_metric(records: List[WorkingRecord], metric: str) -> RankedTable:
    """Sum one metric per event type and rank descending."""
    if metric not in METRIC_GETTERS:
        raise ValueError(f"metric must be one of: {', '.join(METRIC_GETTERS)}")
    getter, is_count = METRIC_GETTERS[metric]
    return rank_values(records, getter, metric=metric, is_count=is_count)

def rank_values(
    records: List[WorkingRecord],
    getter: Callable[[WorkingRecord], Optional[float]],
    metric: str,
    is_count: bool = False,
) -> RankedTable:
    sums, excluded = grouped_sums((r.event_type, getter(r)) for r in records)
    if is_count:
        rows = [(k, int(round(v))) for k, v in sums.items()]
    else:
        rows = [(k, float(v)) for k, v in sums.items()]
    rows = merge_sort(rows, key=lambda kv: kv[1], reverse=True)
    if excluded:
        logger.info("%s: %d records excluded (invalid value)", metric, excluded)
    return RankedTable(metric=metric, rows=rows, excluded=excluded)

def aggregate(records: List[WorkingRecord]) -> ImpactSummary:
    """Build the four ranked tables from the working set."""
    summary = ImpactSummary(
        fatalities=rank_metric(records, "fatalities"),
        injuries=rank_metric(records, "injuries"),
        crop_damage=rank_metric(records, "crop_damage"),
        property_damage=rank_metric(records, "property_damage"),
    )
    logger.info("Aggregated %d records into %d event types", len(records), len(summary.fatalities))
    return summary
