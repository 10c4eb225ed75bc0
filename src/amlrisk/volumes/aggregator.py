"""
Volume aggregation for deposits and withdrawals.

Computes per-direction summaries (total, average per day, 7-day peak,
payment method breakdown) and calendar buckets (day, ISO week, month)
used by threshold evaluation.
"""

import bisect
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from amlrisk.movements.classifier import ClassificationStrategy, KeywordClassifier
from amlrisk.movements.models import Direction, Movement

logger = logging.getLogger(__name__)


class Granularity(str, Enum):
    """Calendar bucket sizes for volume thresholds."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def day_key(timestamp: datetime) -> str:
    """Calendar day, e.g. 2024-03-15."""
    return timestamp.strftime("%Y-%m-%d")


def week_key(timestamp: datetime) -> str:
    """Monday of the ISO week containing the timestamp, e.g. 2024-03-11."""
    monday = timestamp.date() - timedelta(days=timestamp.weekday())
    return monday.isoformat()


def month_key(timestamp: datetime) -> str:
    """Calendar month, e.g. 2024-03."""
    return timestamp.strftime("%Y-%m")


BUCKET_KEYS = {
    Granularity.DAILY: day_key,
    Granularity.WEEKLY: week_key,
    Granularity.MONTHLY: month_key,
}


@dataclass
class PeakWindow:
    """Highest 7-day rolling volume."""

    value: Decimal
    start: datetime
    end: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": float(self.value),
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
        }


@dataclass
class MethodShare:
    """Volume attributed to one payment method."""

    method: str
    volume: Decimal
    percentage: float
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "volume": float(self.volume),
            "percentage": self.percentage,
            "count": self.count,
        }


@dataclass
class VolumeSummary:
    """Summary of one direction's volume."""

    direction: Direction
    total: Decimal
    span_days: int
    average_per_day: Decimal
    peak_window: Optional[PeakWindow] = None
    method_breakdown: list[MethodShare] = field(default_factory=list)
    transactions: list[Movement] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "direction": self.direction.value,
            "total": float(self.total),
            "span_days": self.span_days,
            "average_per_day": float(self.average_per_day),
            "peak_window": self.peak_window.to_dict() if self.peak_window else None,
            "method_breakdown": [m.to_dict() for m in self.method_breakdown],
            "transactions": [t.to_dict() for t in self.transactions],
        }


@dataclass
class BucketTotals:
    """Volume totals per calendar bucket, keys in chronological order."""

    daily: dict[str, Decimal] = field(default_factory=dict)
    weekly: dict[str, Decimal] = field(default_factory=dict)
    monthly: dict[str, Decimal] = field(default_factory=dict)

    def for_granularity(self, granularity: Granularity) -> dict[str, Decimal]:
        if granularity == Granularity.DAILY:
            return self.daily
        if granularity == Granularity.WEEKLY:
            return self.weekly
        return self.monthly


class Aggregator:
    """
    Builds volume summaries and calendar buckets.

    Movements without a usable timestamp are skipped.
    """

    PEAK_WINDOW = timedelta(days=7)

    def __init__(self, classifier: Optional[ClassificationStrategy] = None):
        self.classifier = classifier or KeywordClassifier()

    def summarize(
        self,
        movements: list[Movement],
        direction: Direction,
    ) -> Optional[VolumeSummary]:
        """
        Summarize a classified, reconciled movement subset.

        Returns None when there is nothing to summarize.
        """
        dated = self._dated(movements)
        if not dated:
            return None

        total = sum((m.volume for m in dated), Decimal("0"))

        timestamps = sorted(m.timestamp for m in dated)
        elapsed = (timestamps[-1] - timestamps[0]).total_seconds()
        span_days = max(1, math.ceil(elapsed / 86400))

        return VolumeSummary(
            direction=direction,
            total=total,
            span_days=span_days,
            average_per_day=total / span_days,
            peak_window=self.peak_window(dated),
            method_breakdown=self.method_breakdown(dated, direction, total),
            transactions=dated,
        )

    def peak_window(self, movements: list[Movement]) -> Optional[PeakWindow]:
        """
        Find the 7-day window with the highest volume.

        Windows start at each movement timestamp and include both ends.
        The earliest window wins ties.
        """
        ordered = sorted(self._dated(movements), key=lambda m: m.timestamp)
        if not ordered:
            return None

        timestamps = [m.timestamp for m in ordered]
        prefix = [Decimal("0")]
        for movement in ordered:
            prefix.append(prefix[-1] + movement.volume)

        best: Optional[PeakWindow] = None
        seen_starts = set()

        for start_index, start in enumerate(timestamps):
            if start in seen_starts:
                continue
            seen_starts.add(start)

            end = start + self.PEAK_WINDOW
            end_index = bisect.bisect_right(timestamps, end)
            value = prefix[end_index] - prefix[start_index]

            if value > 0 and (best is None or value > best.value):
                best = PeakWindow(value=value, start=start, end=end)

        return best

    def method_breakdown(
        self,
        movements: list[Movement],
        direction: Direction,
        total: Optional[Decimal] = None,
    ) -> list[MethodShare]:
        """Aggregate volume and count per payment method, largest first."""
        if total is None:
            total = sum((m.volume for m in movements), Decimal("0"))

        volumes: dict[str, Decimal] = {}
        counts: dict[str, int] = {}

        for movement in movements:
            method = self.classifier.payment_method(movement, direction)
            volumes[method] = volumes.get(method, Decimal("0")) + movement.volume
            counts[method] = counts.get(method, 0) + 1

        shares = [
            MethodShare(
                method=method,
                volume=volume,
                percentage=float(volume / total * 100) if total > 0 else 0.0,
                count=counts[method],
            )
            for method, volume in volumes.items()
        ]
        shares.sort(key=lambda s: s.volume, reverse=True)
        return shares

    def bucket_totals(self, movements: list[Movement]) -> BucketTotals:
        """Total volume per calendar day, ISO week and month."""
        buckets = BucketTotals()

        for movement in self._dated(movements):
            for granularity, key_func in BUCKET_KEYS.items():
                totals = buckets.for_granularity(granularity)
                key = key_func(movement.timestamp)
                totals[key] = totals.get(key, Decimal("0")) + movement.volume

        # Keys are ISO formatted, so lexical order is chronological
        return BucketTotals(
            daily=dict(sorted(buckets.daily.items())),
            weekly=dict(sorted(buckets.weekly.items())),
            monthly=dict(sorted(buckets.monthly.items())),
        )

    def _dated(self, movements: list[Movement]) -> list[Movement]:
        dated = [m for m in movements if m.has_valid_timestamp]
        dropped = len(movements) - len(dated)
        if dropped:
            logger.debug(f"Skipped {dropped} movement(s) without a valid timestamp")
        return dated
