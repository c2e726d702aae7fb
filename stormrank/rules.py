"""
Event-type canonicalization
===========================

The EVTYPE column holds ~485 free-text spellings ("TSTM WIND",
"THUNDERSTORM WINDS", "TUNDERSTORM WIND", ...). This module collapses them
into 34 canonical labels.

How it works:
- `RULES` is an ORDERED tuple of (pattern, label) rules.
- Rules run one after another over the current value. Every rule whose
  pattern matches overwrites the value with its label, so a later rule
  sees what earlier rules wrote (cascading overwrite).
- Because of that the ORDER IS PART OF THE RESULT. Example:
  "FLOOD/STRONG WIND" becomes "Flooding" at rule 4, and "Flooding" no
  longer matches the wind rule further down.
- Values that match no rule are kept as they are.

Every canonical label matches only its own rule (or none), so running the
rules a second time changes nothing.
"""

from __future__ import annotations
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple
import logging
import re

from .models import WorkingRecord

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class Rule:
    """One canonicalization rule: any alternative matching -> `label`."""
    pattern: re.Pattern
    label: str

    def matches(self, value: str) -> bool:
        return self.pattern.search(value) is not None

def _rule(alternatives: Iterable[str], label: str, ignore_case: bool = True) -> Rule:
    flags = re.IGNORECASE if ignore_case else 0
    return Rule(pattern=re.compile("|".join(alternatives), flags), label=label)

RULES: Tuple[Rule, ...] = (
    _rule([r"astronomical low tide"], "Astronomical Low Tide"),
    _rule([r"^avalan"], "Avalanche"),
    _rule([r"blizzard"], "Blizzard"),
    _rule([r"erosion", r"astronomical high tide", r"coastal ?flood", r"high tides", r"flood",
           r"dam break", r"drowning", r"high water", r"urban", r"rising"], "Flooding"),
    _rule([r"torn", r"gustnado"], "Tornado"),
    _rule([r"cold", r"cool", r"hypothermia", r"low temp", r"extreme wind ?c"], "Cold/Wind Chill"),
    _rule([r"freezing fog"], "Freezing Fog"),
    # upper case only: must not catch the "Freezing Fog" label written above
    _rule([r"FOG"], "Dense Fog", ignore_case=False),
    _rule([r"dense smoke"], "Dense Smoke"),
    _rule([r"dust", r"whirl", r"landspout"], "Dust Devil/Dust Storm"),
    _rule([r"heat", r"drought", r"warm", r"hyper"], "Heat/Drought"),
    _rule([r"fire"], "Wildfire"),
    _rule([r"hurricane", r"typhoon"], "Hurricane (Typhoon)"),
    _rule([r"tsunami"], "Tsunami"),
    _rule([r"waterspout"], "Waterspout"),
    _rule([r"volcanic"], "Volcanic Ash"),
    _rule([r"tropical storm", r"coastal storm", r"coastalstorm"], "Tropical Storm"),
    # "Tropial" spelling is intentional
    _rule([r"tropical depression"], "Tropial Depression"),
    _rule([r"^thu", r"apache", r"^tstm", r"marine tstm", r"burst", r"tunderstorm"], "Thunderstorm"),
    _rule([r"hail"], "Hail"),
    _rule([r"rip current"], "Rip Current"),
    _rule([r"surge"], "Storm Surge/Tide"),
    _rule([r"slide", r"slump"], "Debris Flow"),
    _rule([r"funnel cloud"], "Funnel Cloud"),
    _rule([r"seiche"], "Seiche"),
    _rule([r"heavy rain", r"hvy rain", r"heavy shower", r"heavy precip", r"rainfall", r"rainstorm",
           r"wetness", r"unseasonal rain", r"^rain"], "Heavy Rain"),
    _rule([r"heavy snow", r"blowing snow", r"record snow", r"excessive snow", r"squall",
           r"lake[ -]?effect", r"lake", r"^snow$", r"snow accumulation", r"season snow"], "Heavy Snow"),
    _rule([r"high s(?:ea|urf|ew)", r"heavy s(?:ea|urf|ew)", r"high waves", r"^rough s",
           r"hazardous surf", r"^marine [am]", r"rogue"], "High Surf"),
    _rule([r"lightning", r"lighting", r"ligntning"], "Lightning"),
    _rule([r"winter storm"], "Winter Storm"),
    _rule([r"high wind", r"strong wind", r"^wind", r"wind$", r"winds$", r"wind damage",
           r"turbulence", r"high$", r"gusty"], "Wind"),
    _rule([r"freeze", r"frost"], "Frost/Freeze"),
    _rule([r"sleet", r"ice storm", r"freezing rain", r"mix", r"freezing [ds]"], "Sleet/Ice Storm"),
    _rule([r"winter weather", r"wintry", r"black ice", r"^ice", r"ice$", r"light snow",
           r"icy roads", r"glaze"], "Winter Weather"),
)

CANONICAL_LABELS = frozenset(r.label for r in RULES)


@dataclass
class RuleStats:
    """What one canonicalization pass did to the working set."""
    # label -> number of records that rule overwrote, in rule order
    hits: Dict[str, int] = field(default_factory=OrderedDict)
    distinct_before: int = 0
    distinct_after: int = 0
    # original values that matched no rule -> record count
    unmatched: Dict[str, int] = field(default_factory=dict)


def canonical_label(value: str, rules: Tuple[Rule, ...] = RULES) -> str:
    """Apply every rule, in order, to a single event-type string."""
    for rule in rules:
        if rule.matches(value):
            value = rule.label
    return value


def canonicalize(records: List[WorkingRecord], rules: Tuple[Rule, ...] = RULES) -> RuleStats:
    """Rewrite `event_type` of every record in place, one rule at a time."""
    stats = RuleStats()
    originals = [r.event_type for r in records]
    stats.distinct_before = len(set(originals))

    for rule in rules:
        n = 0
        for rec in records:
            if rule.matches(rec.event_type):
                rec.event_type = rule.label
                n += 1
        stats.hits[rule.label] = n

    for original, rec in zip(originals, records):
        if rec.event_type not in CANONICAL_LABELS:
            stats.unmatched[original] = stats.unmatched.get(original, 0) + 1

    stats.distinct_after = len({r.event_type for r in records})
    logger.info("Canonicalized %d records: %d distinct event types -> %d (%d unmatched)",
                len(records), stats.distinct_before, stats.distinct_after, len(stats.unmatched))
    if stats.unmatched:
        logger.debug("Unmatched event types: %s", sorted(stats.unmatched))
    return stats


def rules_table() -> List[Tuple[int, str, str]]:
    """(position, label, pattern) for every rule, for display."""
    out: List[Tuple[int, str, str]] = []
    for i, rule in enumerate(RULES, start=1):
        out.append((i, rule.label, rule.pattern.pattern))
    return out
