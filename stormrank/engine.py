"""
Core engine (StormAnalysis)
===========================

This is the heart of the project. It runs the analysis as a fixed batch
pipeline over an in-memory working set:

1) Load dataset -> list of StormRecord records (immutable)
2) Project + filter -> working set of WorkingRecord rows
3) Canonicalize event types (ordered rule table)
4) Resolve damage totals from exponent codes
5) Aggregate -> four ranked tables (ImpactSummary)

Each stage records a line in `stage_log` so the report can show how the
numbers were produced. Stages must run in this order; the working set is
read-only once aggregated.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging

from .aggregate import aggregate
from .config import PipelineConfig
from .damage import DamageStats, resolve_damages
from .dsa import merge_sort
from .filters import FilterStats, project_and_filter
from .models import ImpactSummary, StormRecord, WorkingRecord
from .rules import RuleStats, canonicalize

logger = logging.getLogger(__name__)

_STAGES = ("filtered", "canonicalized", "resolved", "aggregated")

@dataclass
class StormAnalysis:
    """Storm impact analysis over one loaded dataset.

    The engine stores:
    - records: all StormRecord rows as loaded (never modified)
    - working: the working set produced by the filter stage
    - per-stage statistics and the final ImpactSummary
    """
    records: List[StormRecord]
    config: PipelineConfig = field(default_factory=PipelineConfig)
    dataset_path: Optional[str] = None
    # One line per executed stage (for reproducibility in reports)
    stage_log: List[str] = field(default_factory=list)

    working: List[WorkingRecord] = field(default_factory=list, init=False)
    filter_stats: Optional[FilterStats] = field(default=None, init=False)
    rule_stats: Optional[RuleStats] = field(default=None, init=False)
    damage_stats: Optional[DamageStats] = field(default=None, init=False)
    summary: Optional[ImpactSummary] = field(default=None, init=False)
    _done: List[str] = field(default_factory=list, init=False)

    # ---------------- Stage bookkeeping ----------------
    def _require(self, stage: str) -> None:
        pos = _STAGES.index(stage)
        expected = list(_STAGES[:pos])
        if self._done != expected:
            last = self._done[-1] if self._done else "nothing"
            raise RuntimeError(f"Cannot run '{stage}' stage after {last}; expected order: {', '.join(_STAGES)}")

    def _finish(self, stage: str, line: str) -> None:
        self._done.append(stage)
        self.stage_log.append(line)

    # ---------------- Pipeline stages ----------------
    def project_and_filter(self) -> FilterStats:
        self._require("filtered")
        self.working, self.filter_stats = project_and_filter(self.records, self.config)
        s = self.filter_stats
        self._finish("filtered",
                     f"filter years {self.config.year_min}-{self.config.year_max}, nonzero impact, "
                     f"known type: kept {s.kept} of {s.total}")
        return s

    def canonicalize(self) -> RuleStats:
        self._require("canonicalized")
        self.rule_stats = canonicalize(self.working)
        s = self.rule_stats
        self._finish("canonicalized",
                     f"canonicalize event types: {s.distinct_before} -> {s.distinct_after} distinct "
                     f"({len(s.unmatched)} unmatched)")
        return s

    def resolve_damages(self) -> DamageStats:
        self._require("resolved")
        self.damage_stats = resolve_damages(self.working)
        s = self.damage_stats
        self._finish("resolved",
                     f"resolve damage exponents: {s.invalid_property} property / "
                     f"{s.invalid_crop} crop values invalid")
        return s

    def aggregate(self) -> ImpactSummary:
        self._require("aggregated")
        self.summary = aggregate(self.working)
        self._finish("aggregated", f"aggregate by event type: {len(self.summary.fatalities)} groups")
        return self.summary

    def run(self) -> ImpactSummary:
        """Run every stage that has not run yet and return the summary."""
        steps = {
            "filtered": self.project_and_filter,
            "canonicalized": self.canonicalize,
            "resolved": self.resolve_damages,
            "aggregated": self.aggregate,
        }
        for stage in _STAGES[len(self._done):]:
            steps[stage]()
        return self.summary

    # ---------------- Output operations ----------------
    def event_type_counts(self) -> List[tuple]:
        """(event_type, record count) over the working set, most frequent first."""
        counts: Dict[str, int] = {}
        for r in self.working:
            counts[r.event_type] = counts.get(r.event_type, 0) + 1
        return merge_sort(list(counts.items()), key=lambda kv: kv[1], reverse=True)

    def _require_summary(self) -> ImpactSummary:
        if self.summary is None:
            raise RuntimeError("Pipeline has not been run yet (call run())")
        return self.summary

    def export_csv(self, path: str) -> None:
        import csv
        summary = self._require_summary()
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["metric", "rank", "event_type", "total"])
            for table in summary.tables():
                for rank, (event_type, total) in enumerate(table.rows, start=1):
                    w.writerow([table.metric, rank, event_type, total])

    def export_json(self, path: str) -> None:
        """Export the ranked tables to a JSON file.

        CSV is great for spreadsheets; JSON is great for programs and keeps
        the per-metric excluded counts.
        """
        import json
        summary = self._require_summary()
        payload = {
            table.metric: {
                "excluded": table.excluded,
                "rows": [{"event_type": k, "total": v} for k, v in table.rows],
            }
            for table in summary.tables()
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
