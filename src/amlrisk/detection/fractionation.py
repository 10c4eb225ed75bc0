"""
Fractionation (structuring) detection.

Structuring = splitting a large amount into many small movements so that
no single one crosses a reporting limit. Two sides are checked:
- Deposits credited directly to the gaming account (cash at a point of sale)
- Withdrawals paid out as vouchers or at a PVR (point of sale)

For each side, movements are scanned in time order with a 7-day calendar
window. A group closes on the day the running total reaches the threshold
and also absorbs the other movements of that same day.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from amlrisk.movements.models import FractionationGroup, Movement

logger = logging.getLogger(__name__)


class FractionationDetector:
    """Finds fractionation groups among deposits and withdrawals."""

    DEFAULT_THRESHOLD = Decimal("5000")
    DEFAULT_WINDOW_DAYS = 7

    DEPOSIT_KEYWORDS = ("ricarica conto gioco per accredito diretto",)
    WITHDRAWAL_KEYWORDS = ("voucher", "pvr")

    def __init__(
        self,
        threshold: Decimal = DEFAULT_THRESHOLD,
        window_days: int = DEFAULT_WINDOW_DAYS,
        deposit_keywords: Optional[tuple[str, ...]] = None,
        withdrawal_keywords: Optional[tuple[str, ...]] = None,
    ):
        """
        Initialize the detector.

        Args:
            threshold: Running total that closes a group (reached, not exceeded)
            window_days: Calendar days a group may span
            deposit_keywords: Reason substrings selecting deposit movements
            withdrawal_keywords: Reason substrings selecting withdrawal movements
        """
        self.threshold = Decimal(threshold)
        self.window = timedelta(days=window_days)
        self.deposit_keywords = deposit_keywords or self.DEPOSIT_KEYWORDS
        self.withdrawal_keywords = withdrawal_keywords or self.WITHDRAWAL_KEYWORDS

    def detect_deposits(self, movements: list[Movement]) -> list[FractionationGroup]:
        """Fractionation groups among direct-credit deposits."""
        return self._detect(self._select(movements, self.deposit_keywords))

    def detect_withdrawals(self, movements: list[Movement]) -> list[FractionationGroup]:
        """Fractionation groups among voucher and PVR withdrawals."""
        return self._detect(self._select(movements, self.withdrawal_keywords))

    def _select(
        self,
        movements: list[Movement],
        keywords: tuple[str, ...],
    ) -> list[Movement]:
        selected = [
            m for m in movements
            if m.has_valid_timestamp
            and any(kw in m.reason.lower() for kw in keywords)
        ]
        return sorted(selected, key=lambda m: m.timestamp)

    def _detect(self, ordered: list[Movement]) -> list[FractionationGroup]:
        groups: list[FractionationGroup] = []
        i = 0

        while i < len(ordered):
            window_start = ordered[i].timestamp.date()
            window_limit = window_start + self.window

            running = Decimal("0")
            members: list[Movement] = []
            trigger_day: Optional[date] = None

            j = i
            while j < len(ordered):
                day = ordered[j].timestamp.date()
                if day >= window_limit:
                    break

                running += ordered[j].volume
                members.append(ordered[j])
                j += 1

                if running >= self.threshold:
                    trigger_day = day
                    # Absorb the rest of the trigger day
                    while j < len(ordered) and ordered[j].timestamp.date() <= trigger_day:
                        running += ordered[j].volume
                        members.append(ordered[j])
                        j += 1
                    break

            if trigger_day is None:
                i += 1
                continue

            groups.append(
                FractionationGroup(
                    window_start=window_start,
                    window_end=trigger_day,
                    total=running,
                    movements=tuple(members),
                )
            )
            logger.debug(
                f"Fractionation group {window_start} - {trigger_day}: "
                f"{len(members)} movements, total {running}"
            )
            i = j

        return groups
