"""
Reconciliation of cancelled withdrawals.

A withdrawal cancelled by the player or by an admin shows up as two rows:
the original withdrawal and a later cancellation for the same amount.
Neither row is real outgoing volume, so both are removed.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import Optional

from amlrisk.movements.classifier import ClassificationStrategy, KeywordClassifier
from amlrisk.movements.models import Movement, MovementKind

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationResult:
    """Outcome of matching cancellations to withdrawals."""

    # Withdrawals that count towards volume, in input order
    withdrawals: list[Movement] = field(default_factory=list)

    # Withdrawals removed because a cancellation reversed them
    reversed_withdrawals: list[Movement] = field(default_factory=list)

    cancellations: list[Movement] = field(default_factory=list)

    # Cancellations with no matching withdrawal
    unmatched_cancellations: list[Movement] = field(default_factory=list)


class Reconciler:
    """
    Matches withdrawal cancellations back to the withdrawals they reverse.

    For each cancellation, in input order, the first unconsumed withdrawal
    with the same absolute amount (within one cent), a timestamp not after
    the cancellation, and the same reference id (when both rows carry
    one) is consumed. Ties are broken by input order.
    """

    AMOUNT_TOLERANCE = Decimal("0.01")

    def __init__(
        self,
        classifier: Optional[ClassificationStrategy] = None,
        max_lookback_days: Optional[int] = None,
    ):
        """
        Initialize the reconciler.

        Args:
            classifier: Strategy used to recognize withdrawals and cancellations
            max_lookback_days: Ignore withdrawals older than this many days
                before the cancellation (None = no limit)
        """
        self.classifier = classifier or KeywordClassifier()
        self.max_lookback = (
            timedelta(days=max_lookback_days) if max_lookback_days is not None else None
        )

    def reconcile(self, movements: list[Movement]) -> ReconciliationResult:
        """
        Produce the withdrawal subset with reversed withdrawals removed.

        Deposits and other movements are ignored here.
        """
        withdrawals: list[Movement] = []
        cancellations: list[Movement] = []

        for movement in movements:
            kind = self.classifier.classify(movement.reason)
            if kind == MovementKind.WITHDRAWAL:
                withdrawals.append(movement)
            elif kind == MovementKind.WITHDRAWAL_CANCELLATION:
                cancellations.append(movement)

        consumed: set[int] = set()
        unmatched: list[Movement] = []

        for cancellation in cancellations:
            index = self._find_match(cancellation, withdrawals, consumed)
            if index is None:
                unmatched.append(cancellation)
                continue
            consumed.add(index)

        if unmatched:
            logger.debug(
                f"{len(unmatched)} withdrawal cancellation(s) had no matching withdrawal"
            )

        return ReconciliationResult(
            withdrawals=[w for i, w in enumerate(withdrawals) if i not in consumed],
            reversed_withdrawals=[withdrawals[i] for i in sorted(consumed)],
            cancellations=cancellations,
            unmatched_cancellations=unmatched,
        )

    def _find_match(
        self,
        cancellation: Movement,
        withdrawals: list[Movement],
        consumed: set[int],
    ) -> Optional[int]:
        if cancellation.timestamp is None:
            return None

        for index, withdrawal in enumerate(withdrawals):
            if index in consumed or withdrawal.timestamp is None:
                continue

            if abs(withdrawal.volume - cancellation.volume) >= self.AMOUNT_TOLERANCE:
                continue

            if withdrawal.timestamp > cancellation.timestamp:
                continue

            if (
                self.max_lookback is not None
                and cancellation.timestamp - withdrawal.timestamp > self.max_lookback
            ):
                continue

            if (
                cancellation.reference_id
                and withdrawal.reference_id
                and cancellation.reference_id != withdrawal.reference_id
            ):
                continue

            return index

        return None
