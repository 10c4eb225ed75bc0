"""
Volume threshold evaluation.

Compares calendar bucket totals against the configured ceilings and
derives the base risk tier before any aggravating pattern is considered.
"""

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from amlrisk.movements.models import Direction
from amlrisk.risk.config import RiskConfig
from amlrisk.volumes.aggregator import BucketTotals, Granularity

logger = logging.getLogger(__name__)

DIRECTION_LABELS = {
    Direction.DEPOSIT: "di deposito",
    Direction.WITHDRAWAL: "di prelievo",
}

BUCKET_LABELS = {
    Granularity.DAILY: "per il giorno",
    Granularity.WEEKLY: "per la settimana",
    Granularity.MONTHLY: "per il mese",
}


def format_euro(value: Decimal) -> str:
    """
    Format an amount the way it-IT locales do (5000 -> "5.000").

    Up to three fraction digits are kept, trailing zeros dropped.
    """
    quantized = Decimal(value).quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
    sign = "-" if quantized < 0 else ""
    integer, _, fraction = f"{abs(quantized):f}".partition(".")
    grouped = f"{int(integer):,}".replace(",", ".")
    fraction = fraction.rstrip("0")
    if fraction:
        return f"{sign}{grouped},{fraction}"
    return f"{sign}{grouped}"


@dataclass
class ThresholdBreach:
    """The first bucket of a (granularity, direction) pair over its ceiling."""

    granularity: Granularity
    direction: Direction
    bucket_key: str
    total: Decimal
    threshold: Decimal
    motivation: str


@dataclass
class ThresholdOutcome:
    """Result of evaluating all volume thresholds."""

    base_level: str
    daily_exceeded: bool = False
    weekly_exceeded: bool = False
    monthly_exceeded: bool = False
    breaches: list[ThresholdBreach] = field(default_factory=list)

    @property
    def motivations(self) -> list[str]:
        return [b.motivation for b in self.breaches]


class ThresholdEvaluator:
    """
    Checks bucket totals against daily, weekly and monthly ceilings.

    A bucket exceeds its ceiling only when strictly greater. Scanning of a
    (granularity, direction) pair stops at the first exceeding bucket.
    Granularities whose volume motivation is disabled are not evaluated.
    """

    GRANULARITY_ORDER = (Granularity.DAILY, Granularity.WEEKLY, Granularity.MONTHLY)
    DIRECTION_ORDER = (Direction.DEPOSIT, Direction.WITHDRAWAL)

    def evaluate(
        self,
        buckets: dict[Direction, BucketTotals],
        config: RiskConfig,
    ) -> ThresholdOutcome:
        """
        Evaluate thresholds for both directions.

        Args:
            buckets: Bucket totals per direction (missing direction = no volume)
            config: Risk configuration snapshot

        Returns:
            ThresholdOutcome with the base level and one breach per
            exceeded (granularity, direction) pair
        """
        exceeded = {g: False for g in self.GRANULARITY_ORDER}
        breaches: list[ThresholdBreach] = []

        for granularity in self.GRANULARITY_ORDER:
            motivation = config.motivations.for_volume(granularity.value)
            if not motivation.enabled:
                continue

            threshold = getattr(config.volume_thresholds, granularity.value)

            for direction in self.DIRECTION_ORDER:
                totals = buckets.get(direction)
                if totals is None:
                    continue

                breach = self._first_breach(
                    totals.for_granularity(granularity),
                    threshold,
                )
                if breach is None:
                    continue

                bucket_key, total = breach
                exceeded[granularity] = True
                breaches.append(
                    ThresholdBreach(
                        granularity=granularity,
                        direction=direction,
                        bucket_key=bucket_key,
                        total=total,
                        threshold=threshold,
                        motivation=self.format_motivation(
                            motivation.name, granularity, direction, threshold, bucket_key
                        ),
                    )
                )

        base_levels = config.risk_levels.base_levels
        if exceeded[Granularity.MONTHLY]:
            base_level = base_levels.monthly_exceeded
        elif exceeded[Granularity.WEEKLY] or exceeded[Granularity.DAILY]:
            base_level = base_levels.weekly_or_daily_exceeded
        else:
            base_level = base_levels.default

        return ThresholdOutcome(
            base_level=base_level,
            daily_exceeded=exceeded[Granularity.DAILY],
            weekly_exceeded=exceeded[Granularity.WEEKLY],
            monthly_exceeded=exceeded[Granularity.MONTHLY],
            breaches=breaches,
        )

    def _first_breach(
        self,
        totals: dict[str, Decimal],
        threshold: Decimal,
    ) -> Optional[tuple[str, Decimal]]:
        for key, total in totals.items():
            if total > threshold:
                return key, total
        return None

    @staticmethod
    def format_motivation(
        name: str,
        granularity: Granularity,
        direction: Direction,
        threshold: Decimal,
        bucket_key: str,
    ) -> str:
        """E.g. "<name> di deposito (>€5.000) per il giorno 2024-03-15." """
        return (
            f"{name} {DIRECTION_LABELS[direction]} (>€{format_euro(threshold)}) "
            f"{BUCKET_LABELS[granularity]} {bucket_key}."
        )
