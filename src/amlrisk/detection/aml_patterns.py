"""
AML pattern labels for gaming accounts.

Produces the human-readable labels consumed by the risk engine's
pattern detection (e.g. bonus abuse counts as a major aggravant).
"""

import logging
from datetime import timedelta
from typing import Optional

from amlrisk.movements.classifier import ClassificationStrategy, KeywordClassifier
from amlrisk.movements.models import Movement, MovementKind

logger = logging.getLogger(__name__)

RAPID_CYCLE_LABEL = "Ciclo deposito-prelievo rapido rilevato"
BONUS_ABUSE_LABEL = "Abuso bonus sospetto rilevato"


class AMLPatternScanner:
    """
    Scans movements for gaming-specific laundering patterns.

    Patterns:
    - Rapid cycle: a direct-credit deposit followed by a withdrawal
      within `cycle_days` days (cash in, cash out with little play)
    - Bonus abuse: bonus movements make up at least
      `bonus_threshold_percentage` percent of all movements
    """

    DIRECT_CREDIT_KEYWORD = "ricarica conto gioco per accredito diretto"

    def __init__(
        self,
        classifier: Optional[ClassificationStrategy] = None,
        cycle_days: int = 2,
        bonus_threshold_percentage: float = 10.0,
    ):
        self.classifier = classifier or KeywordClassifier()
        self.cycle_window = timedelta(days=cycle_days)
        self.bonus_threshold_percentage = bonus_threshold_percentage

    def scan(self, movements: list[Movement]) -> list[str]:
        """Return the labels of all detected patterns."""
        labels = []

        if self.has_rapid_cycle(movements):
            labels.append(RAPID_CYCLE_LABEL)

        if self.has_bonus_abuse(movements):
            labels.append(BONUS_ABUSE_LABEL)

        if labels:
            logger.debug(f"AML patterns detected: {labels}")
        return labels

    def has_rapid_cycle(self, movements: list[Movement]) -> bool:
        dated = [m for m in movements if m.has_valid_timestamp]
        deposits = [
            m for m in dated
            if self.DIRECT_CREDIT_KEYWORD in m.reason.lower()
        ]
        withdrawals = [
            m for m in dated
            if self.classifier.classify(m.reason) == MovementKind.WITHDRAWAL
        ]

        for deposit in deposits:
            for withdrawal in withdrawals:
                elapsed = withdrawal.timestamp - deposit.timestamp
                if timedelta(0) <= elapsed <= self.cycle_window:
                    return True
        return False

    def has_bonus_abuse(self, movements: list[Movement]) -> bool:
        if not movements:
            return False
        bonus = sum(1 for m in movements if self.classifier.mentions_bonus(m.reason))
        if bonus == 0:
            return False
        return bonus / len(movements) * 100 >= self.bonus_threshold_percentage
