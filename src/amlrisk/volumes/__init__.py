"""
Volume aggregation and threshold evaluation.

Provides:
- Per-direction volume summaries (total, daily average, 7-day peak,
  payment method breakdown)
- Day, ISO week and month bucket totals
- Threshold evaluation producing the base risk tier
"""

from amlrisk.volumes.aggregator import (
    Aggregator,
    BucketTotals,
    Granularity,
    MethodShare,
    PeakWindow,
    VolumeSummary,
    day_key,
    month_key,
    week_key,
)
from amlrisk.volumes.thresholds import (
    ThresholdBreach,
    ThresholdEvaluator,
    ThresholdOutcome,
    format_euro,
)

__all__ = [
    "Aggregator",
    "BucketTotals",
    "Granularity",
    "MethodShare",
    "PeakWindow",
    "VolumeSummary",
    "day_key",
    "month_key",
    "week_key",
    "ThresholdBreach",
    "ThresholdEvaluator",
    "ThresholdOutcome",
    "format_euro",
]
