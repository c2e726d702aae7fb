"""
Dataset loader (CSV -> StormRecord list)
========================================

This module reads the NOAA storm-event file and converts each row into a
`StormRecord` object.

Key ideas:
- We try multiple possible column names because exports of the storm
  database differ (upper-case NOAA names vs. snake_case re-exports).
- Only the eight columns the pipeline needs are read.
- Exponent codes are read as text so a digit code like "3" stays a string.
- The loader returns a list of immutable records; the source file is never edited.
"""

from __future__ import annotations
from typing import Dict, List, Optional
import logging
import re
import pandas as pd
from .models import StormRecord

logger = logging.getLogger(__name__)

# field name -> accepted column names, most common first
COLUMN_ALIASES: Dict[str, tuple] = {
    "begin_date": ("BGN_DATE", "BEGIN_DATE", "Begin Date"),
    "event_type": ("EVTYPE", "EVENT_TYPE", "Event Type"),
    "fatalities": ("FATALITIES", "DEATHS", "Fatalities"),
    "injuries": ("INJURIES", "Injuries"),
    "property_damage_magnitude": ("PROPDMG", "PROP_DMG", "Property Damage"),
    "property_damage_exponent_code": ("PROPDMGEXP", "PROP_DMG_EXP", "Property Damage Exp"),
    "crop_damage_magnitude": ("CROPDMG", "CROP_DMG", "Crop Damage"),
    "crop_damage_exponent_code": ("CROPDMGEXP", "CROP_DMG_EXP", "Crop Damage Exp"),
}

_TEXT_FIELDS = ("begin_date", "event_type", "property_damage_exponent_code", "crop_damage_exponent_code")

def _to_float(x) -> Optional[float]:
    """Convert a cell to float, returning None if invalid. Blank cells are 0."""
    if pd.isna(x): return 0.0
    try: return float(x)
    except (TypeError, ValueError): return None

def _to_str(x) -> str:
    if pd.isna(x): return ""
    return str(x).strip()

def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())

def _col(columns: List[str], *names: str) -> str:
    cols = list(columns)
    for n in names:
        if n in cols:
            return n
    norm_map = {_norm(c): c for c in cols}
    for n in names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    raise KeyError(f"Missing required column. Tried={names}. Available={cols}")

def resolve_columns(columns: List[str]) -> Dict[str, str]:
    """Map each record field to the matching column of a file header."""
    return {f: _col(columns, *aliases, f) for f, aliases in COLUMN_ALIASES.items()}

def records_from_frame(df: pd.DataFrame) -> List[StormRecord]:
    """Convert a DataFrame with the storm-event columns into records."""
    mapping = resolve_columns([str(c).strip() for c in df.columns])
    df = df.rename(columns={c: str(c).strip() for c in df.columns})

    records: List[StormRecord] = []
    bad_numbers = 0
    for i, row in enumerate(df[list(mapping.values())].itertuples(index=False, name=None)):
        values = dict(zip(mapping.keys(), row))
        kwargs = {}
        for f, v in values.items():
            if f in _TEXT_FIELDS:
                kwargs[f] = _to_str(v)
                continue
            num = _to_float(v)
            if num is None:
                # unparseable counts/magnitudes carry no impact
                logger.debug("Row %d: unparseable %s=%r, using 0", i, f, v)
                bad_numbers += 1
                num = 0.0
            kwargs[f] = num
        records.append(StormRecord(record_id=i, **kwargs))

    if bad_numbers:
        logger.warning("%d numeric cells could not be parsed and were read as 0", bad_numbers)
    return records

def load_storm_csv(path: str) -> List[StormRecord]:
    """
    Loader for the NOAA storm database file (plain or compressed CSV).
    Compression is inferred from the file extension (e.g. `.csv.bz2`).
    """
    header = pd.read_csv(path, nrows=0)
    columns = [str(c).strip() for c in header.columns]
    raw_names = {str(c).strip(): c for c in header.columns}
    mapping = resolve_columns(columns)
    usecols = [raw_names[c] for c in mapping.values()]
    dtypes = {raw_names[mapping[f]]: str for f in _TEXT_FIELDS}

    logger.info("Reading %s (columns: %s)", path, ", ".join(mapping.values()))
    df = pd.read_csv(path, usecols=usecols, dtype=dtypes, low_memory=False)
    records = records_from_frame(df)
    logger.info("Loaded %d records from %s", len(records), path)
    return records
