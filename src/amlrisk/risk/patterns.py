"""
Aggravating pattern detection.

Three independent signals, each switchable in the configuration:
- Structuring: fractionation groups were found upstream
- Bonus concentration: bonus abuse label, or a high share of bonus movements
- Casino live concentration: a high share of live-dealer game play
"""

import logging
from dataclasses import dataclass
from typing import Optional

from amlrisk.movements.classifier import ClassificationStrategy, KeywordClassifier
from amlrisk.movements.models import FractionationGroup, Movement
from amlrisk.risk.config import RiskConfig

logger = logging.getLogger(__name__)

# Upstream pattern labels that count as bonus abuse
BONUS_ABUSE_MARKERS = ("abuso bonus", "bonus abuse")


@dataclass
class AggravantSignals:
    """Aggravating conditions detected for one account."""

    structuring: bool = False
    bonus_concentration: bool = False
    casino_live: bool = False

    # Observed ratios (percent), None when the denominator was empty
    bonus_percentage: Optional[float] = None
    live_percentage: Optional[float] = None

    @property
    def has_major(self) -> bool:
        return self.structuring or self.bonus_concentration

    @property
    def has_minor(self) -> bool:
        return self.casino_live

    @property
    def any(self) -> bool:
        return self.has_major or self.has_minor


def _percentage(part: int, whole: int) -> Optional[float]:
    if whole == 0:
        return None
    return part / whole * 100


class PatternDetector:
    """Computes aggravant signals from movements and upstream detections."""

    DEFAULT_BONUS_THRESHOLD = 10.0
    DEFAULT_LIVE_THRESHOLD = 40.0

    def __init__(self, classifier: Optional[ClassificationStrategy] = None):
        self.classifier = classifier or KeywordClassifier()

    def detect(
        self,
        deposit_groups: list[FractionationGroup],
        withdrawal_groups: list[FractionationGroup],
        pattern_labels: list[str],
        movements: list[Movement],
        config: RiskConfig,
    ) -> AggravantSignals:
        motivations = config.motivations

        structuring = motivations.frazionate.enabled and bool(
            deposit_groups or withdrawal_groups
        )

        bonus_percentage = self.bonus_percentage(movements)
        # Unset or zero thresholds fall back to the defaults
        bonus_threshold = (
            motivations.bonus_concentration.threshold_percentage
            or self.DEFAULT_BONUS_THRESHOLD
        )
        bonus_direct = bonus_percentage is not None and (
            bonus_percentage > 0 and bonus_percentage >= bonus_threshold
        )
        bonus_concentration = motivations.bonus_concentration.enabled and (
            self.has_bonus_abuse_label(pattern_labels) or bonus_direct
        )

        live_percentage = self.live_percentage(movements)
        live_threshold = (
            motivations.casino_live.threshold_percentage
            or self.DEFAULT_LIVE_THRESHOLD
        )
        casino_live = (
            motivations.casino_live.enabled
            and live_percentage is not None
            and live_percentage >= live_threshold
        )

        signals = AggravantSignals(
            structuring=structuring,
            bonus_concentration=bonus_concentration,
            casino_live=casino_live,
            bonus_percentage=bonus_percentage,
            live_percentage=live_percentage,
        )
        logger.debug(f"Aggravant signals: {signals}")
        return signals

    def bonus_percentage(self, movements: list[Movement]) -> Optional[float]:
        """Share of all movements whose reason mentions a bonus."""
        bonus = sum(1 for m in movements if self.classifier.mentions_bonus(m.reason))
        return _percentage(bonus, len(movements))

    def live_percentage(self, movements: list[Movement]) -> Optional[float]:
        """Share of game-play movements that are live-dealer sessions."""
        games = [m for m in movements if self.classifier.is_game_play(m.reason)]
        live = sum(1 for m in games if self.classifier.is_live_session(m.reason))
        return _percentage(live, len(games))

    @staticmethod
    def has_bonus_abuse_label(pattern_labels: list[str]) -> bool:
        return any(
            marker in label.lower()
            for label in pattern_labels
            for marker in BONUS_ABUSE_MARKERS
        )
