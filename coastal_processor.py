# coastal_processor.py
# Filtering and derived quantities for coastal records
# Separated from UI for testing

from typing import Dict, Iterable, List, Optional

import numpy as np

from coastal_models import CoastalRecord

# Placeholder visualization formula, not a model:
# likelihood = intercept + a*seaLevel + b*erosionRate + c*precipitation, clipped to [0, 1]
SCORE_INTERCEPT = 0.1
SCORE_SEA_LEVEL = 0.4
SCORE_EROSION_RATE = 0.3
SCORE_PRECIPITATION = 0.2


# ---------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------
def filter_records(
    records: Iterable[CoastalRecord],
    region: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> List[CoastalRecord]:
    """Records matching region and the inclusive date range; empty filters match all."""
    kept = []
    for rec in records:
        if region and rec.region != region:
            continue
        if date_from and rec.date < date_from:
            continue
        if date_to and rec.date > date_to:
            continue
        kept.append(rec)
    return kept


def sort_by_date(records: Iterable[CoastalRecord]) -> List[CoastalRecord]:
    return sorted(records, key=lambda r: r.date)


def unique_regions(records: Iterable[CoastalRecord]) -> List[str]:
    return list(dict.fromkeys(r.region for r in records))


# ---------------------------------------------------------------------
# Derived score
# ---------------------------------------------------------------------
def derive_score(record: CoastalRecord) -> float:
    raw = (SCORE_INTERCEPT
           + SCORE_SEA_LEVEL * record.sea_level
           + SCORE_EROSION_RATE * record.erosion_rate
           + SCORE_PRECIPITATION * record.precipitation)
    return float(np.clip(raw, 0.0, 1.0))


def chart_series(records: Iterable[CoastalRecord]) -> Dict[str, list]:
    """Date-sorted series for the trend charts."""
    ordered = sort_by_date(records)
    return {
        "labels": [r.date for r in ordered],
        "sea_level": [r.sea_level for r in ordered],
        "erosion_rate": [r.erosion_rate for r in ordered],
        "likelihood": [derive_score(r) for r in ordered],
    }
