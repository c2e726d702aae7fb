"""
Data model (StormRecord / WorkingRecord)
========================================

Each row of the storm-event file is converted into a `StormRecord`.
We keep it immutable (`frozen=True`) so that:
- the loaded dataset cannot be accidentally modified, and
- every pipeline stage works on its own `WorkingRecord` copies instead.

`WorkingRecord` is the mutable row of the working set. Stages add fields
(year, damage totals) and overwrite `event_type` in place.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

@dataclass(frozen=True)
class StormRecord:
    """Immutable record for one row of the storm-event file."""
    record_id: int
    begin_date: str
    event_type: str
    fatalities: float
    injuries: float
    property_damage_magnitude: float
    property_damage_exponent_code: str
    crop_damage_magnitude: float
    crop_damage_exponent_code: str

    def has_impact(self) -> bool:
        """True if any of the four impact fields is strictly positive."""
        return (self.fatalities > 0 or self.injuries > 0
                or self.property_damage_magnitude > 0 or self.crop_damage_magnitude > 0)


@dataclass
class WorkingRecord:
    """One row of the working set.

    `year` is None when the begin date could not be parsed.
    Damage totals are None until resolved, and stay None when the
    exponent code is invalid.
    """
    record_id: int
    begin_date: str
    event_type: str
    fatalities: float
    injuries: float
    property_damage_magnitude: float
    property_damage_exponent_code: str
    crop_damage_magnitude: float
    crop_damage_exponent_code: str
    year: Optional[int] = None
    # stored in US$ (absolute, exponent applied)
    property_damage_total: Optional[float] = None
    crop_damage_total: Optional[float] = None

    @classmethod
    def from_record(cls, rec: StormRecord, year: Optional[int]) -> "WorkingRecord":
        return cls(
            record_id=rec.record_id,
            begin_date=rec.begin_date,
            event_type=rec.event_type.strip(),
            fatalities=rec.fatalities,
            injuries=rec.injuries,
            property_damage_magnitude=rec.property_damage_magnitude,
            property_damage_exponent_code=rec.property_damage_exponent_code,
            crop_damage_magnitude=rec.crop_damage_magnitude,
            crop_damage_exponent_code=rec.crop_damage_exponent_code,
            year=year,
        )


@dataclass(frozen=True)
class RankedTable:
    """Per-event-type totals for one metric, sorted descending.

    `excluded` counts records left out because their value was invalid.
    """
    metric: str
    rows: List[Tuple[str, float]] = field(default_factory=list)
    excluded: int = 0

    def top(self, n: int) -> List[Tuple[str, float]]:
        return self.rows[:n]

    def total(self) -> float:
        return sum(v for _, v in self.rows)

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class ImpactSummary:
    """The four ranked tables produced by the aggregator."""
    fatalities: RankedTable
    injuries: RankedTable
    crop_damage: RankedTable
    property_damage: RankedTable

    def tables(self) -> List[RankedTable]:
        return [self.fatalities, self.injuries, self.crop_damage, self.property_damage]

    def get(self, metric: str) -> RankedTable:
        for t in self.tables():
            if t.metric == metric:
                return t
        raise KeyError(f"Unknown metric: {metric}. Use one of: {[t.metric for t in self.tables()]}")

    def is_empty(self) -> bool:
        return all(len(t) == 0 for t in self.tables())
