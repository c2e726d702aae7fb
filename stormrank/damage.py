"""
Damage amount resolution
========================

PROPDMG / CROPDMG hold a magnitude and PROPDMGEXP / CROPDMGEXP a code for
its power of ten. The code column mixes letters and digits:

    "K"/"k" -> 3      "M"/"m" -> 6      "B"/"b" -> 9      "H"/"h" -> 2
    "?" "-" "+" ""  -> 0
    digit strings   -> the number itself is the exponent ("0", "5", "12")
    anything else   -> invalid

Decoding returns an `ExponentCode` that says which of these cases applied,
so the caller never has to guess from the type of the value. A record with
an invalid code gets a None total for that damage column only. So does a
digit code whose total does not fit in a float ("400").
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging
import math

from .models import WorkingRecord

logger = logging.getLogger(__name__)

NAMED = "named"
NUMERIC = "numeric"
INVALID = "invalid"

NAMED_EXPONENTS: Dict[str, int] = {
    "h": 2,
    "k": 3,
    "m": 6,
    "b": 9,
}

# placeholder codes that mean "no multiplier"
ZERO_CODES = frozenset({"?", "-", "+", ""})

@dataclass(frozen=True)
class ExponentCode:
    """Decoded exponent code: `kind` is NAMED, NUMERIC or INVALID."""
    code: str
    kind: str
    exponent: Optional[int]

    @property
    def is_valid(self) -> bool:
        return self.kind != INVALID


def decode_exponent(code: Optional[str]) -> ExponentCode:
    """Decode one PROPDMGEXP/CROPDMGEXP value."""
    raw = "" if code is None else str(code)
    c = raw.strip()
    if c in ZERO_CODES:
        return ExponentCode(code=raw, kind=NAMED, exponent=0)
    if c.lower() in NAMED_EXPONENTS:
        return ExponentCode(code=raw, kind=NAMED, exponent=NAMED_EXPONENTS[c.lower()])
    if c.isascii() and c.isdigit():
        return ExponentCode(code=raw, kind=NUMERIC, exponent=int(c))
    return ExponentCode(code=raw, kind=INVALID, exponent=None)


def damage_total(magnitude: float, code: Optional[str]) -> Optional[float]:
    """magnitude * 10**exponent in US$, or None if the code is invalid or the
    total overflows a float."""
    decoded = decode_exponent(code)
    if not decoded.is_valid:
        return None
    try:
        total = float(magnitude) * 10.0 ** decoded.exponent
    except OverflowError:
        return None
    if math.isinf(total):
        return None
    return total


@dataclass
class DamageStats:
    """Counts of records whose damage total could not be computed."""
    invalid_property: int = 0
    invalid_crop: int = 0
    # invalid code -> number of occurrences (property and crop together)
    invalid_codes: Dict[str, int] = field(default_factory=dict)

    @property
    def invalid_total(self) -> int:
        return self.invalid_property + self.invalid_crop


def resolve_damages(records: List[WorkingRecord]) -> DamageStats:
    """Fill `property_damage_total` and `crop_damage_total` in place."""
    stats = DamageStats()
    for rec in records:
        rec.property_damage_total = damage_total(rec.property_damage_magnitude,
                                                 rec.property_damage_exponent_code)
        if rec.property_damage_total is None:
            stats.invalid_property += 1
            _count_code(stats, rec.property_damage_exponent_code)

        rec.crop_damage_total = damage_total(rec.crop_damage_magnitude,
                                             rec.crop_damage_exponent_code)
        if rec.crop_damage_total is None:
            stats.invalid_crop += 1
            _count_code(stats, rec.crop_damage_exponent_code)

    if stats.invalid_total:
        logger.warning(
            "Invalid damage exponent codes %s: %d property and %d crop values excluded from totals",
            sorted(stats.invalid_codes), stats.invalid_property, stats.invalid_crop,
        )
    logger.info("Resolved damage totals for %d records", len(records))
    return stats


def _count_code(stats: DamageStats, code: str) -> None:
    stats.invalid_codes[code] = stats.invalid_codes.get(code, 0) + 1
