"""
AML risk engine.

Turns the movement history of one player account into a risk verdict:

    Classifier -> Reconciler -> Aggregator -> ThresholdEvaluator
        -> Escalator (with PatternDetector signals) -> ScoreMapper

An evaluation is a pure, synchronous computation over an in-memory
snapshot. The engine holds no per-evaluation state, so one instance can
serve concurrent evaluations for different accounts.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from amlrisk.movements.classifier import ClassificationStrategy, KeywordClassifier
from amlrisk.movements.models import (
    Direction,
    FractionationGroup,
    Movement,
    MovementKind,
)
from amlrisk.movements.reconciler import Reconciler
from amlrisk.risk.config import RiskConfig
from amlrisk.risk.config_source import ConfigProvider, StaticConfigProvider
from amlrisk.risk.escalation import Escalator
from amlrisk.risk.patterns import AggravantSignals, PatternDetector
from amlrisk.risk.scoring import ScoreMapper
from amlrisk.volumes.aggregator import Aggregator, Granularity, VolumeSummary
from amlrisk.volumes.thresholds import ThresholdEvaluator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MotivationInterval:
    """The bucket that triggered a volume motivation."""

    granularity: Granularity
    bucket_key: str
    direction: Direction

    def to_dict(self) -> dict[str, str]:
        return {
            "granularity": self.granularity.value,
            "bucket_key": self.bucket_key,
            "direction": self.direction.value,
        }


@dataclass
class RiskResult:
    """Risk verdict for one account."""

    score: int
    level: str
    motivations: list[str] = field(default_factory=list)
    deposit_summary: Optional[VolumeSummary] = None
    withdrawal_summary: Optional[VolumeSummary] = None

    # Volume motivation text -> bucket that triggered it
    motivation_intervals: dict[str, MotivationInterval] = field(default_factory=dict)

    # Diagnostics
    base_level: Optional[str] = None
    signals: Optional[AggravantSignals] = None
    config_version: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "level": self.level,
            "base_level": self.base_level,
            "motivations": list(self.motivations),
            "deposit_summary": (
                self.deposit_summary.to_dict() if self.deposit_summary else None
            ),
            "withdrawal_summary": (
                self.withdrawal_summary.to_dict() if self.withdrawal_summary else None
            ),
            "motivation_intervals": {
                text: interval.to_dict()
                for text, interval in self.motivation_intervals.items()
            },
            "config_version": self.config_version,
        }


def _unique(items: list[str]) -> list[str]:
    seen = set()
    unique = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


class RiskEngine:
    """
    Computes risk verdicts from movements and a configuration snapshot.

    All collaborators are injectable; the defaults use the built-in
    keyword vocabulary and configuration.
    """

    def __init__(
        self,
        config_provider: Optional[ConfigProvider] = None,
        classifier: Optional[ClassificationStrategy] = None,
        reconciler: Optional[Reconciler] = None,
        aggregator: Optional[Aggregator] = None,
        threshold_evaluator: Optional[ThresholdEvaluator] = None,
        pattern_detector: Optional[PatternDetector] = None,
        escalator: Optional[Escalator] = None,
        score_mapper: Optional[ScoreMapper] = None,
    ):
        self.config_provider = config_provider or StaticConfigProvider()
        self.classifier = classifier or KeywordClassifier()
        self.reconciler = reconciler or Reconciler(self.classifier)
        self.aggregator = aggregator or Aggregator(self.classifier)
        self.threshold_evaluator = threshold_evaluator or ThresholdEvaluator()
        self.pattern_detector = pattern_detector or PatternDetector(self.classifier)
        self.escalator = escalator or Escalator()
        self.score_mapper = score_mapper or ScoreMapper()

    def evaluate(
        self,
        deposit_groups: Optional[list[FractionationGroup]],
        withdrawal_groups: Optional[list[FractionationGroup]],
        pattern_labels: Optional[list[str]],
        movements: Optional[list[Movement]],
        access_logs: Optional[list[Any]] = None,
        config: Optional[RiskConfig] = None,
    ) -> RiskResult:
        """
        Evaluate the risk of one account.

        Args:
            deposit_groups: Fractionation groups found on deposits
            withdrawal_groups: Fractionation groups found on withdrawals
            pattern_labels: Labels from upstream pattern detection
            movements: Movement history of the account
            access_logs: Accepted for future login-pattern signals, unused
            config: Snapshot to use instead of asking the provider

        Returns:
            RiskResult with score, level and motivations
        """
        config = config or self.config_provider.get_config()

        # Movements without a usable timestamp are treated as absent
        valid = [m for m in (movements or []) if m.has_valid_timestamp]
        if len(valid) != len(movements or []):
            logger.debug(
                f"Ignoring {len(movements) - len(valid)} movement(s) without a valid timestamp"
            )

        if not valid:
            level = config.risk_levels.base_levels.default
            return RiskResult(
                score=self.score_mapper.score(level, config),
                level=level,
                base_level=level,
                config_version=config.version,
            )

        deposits = [
            m for m in valid
            if self.classifier.classify(m.reason) == MovementKind.DEPOSIT
        ]
        withdrawals = self.reconciler.reconcile(valid).withdrawals

        deposit_summary = self.aggregator.summarize(deposits, Direction.DEPOSIT)
        withdrawal_summary = self.aggregator.summarize(withdrawals, Direction.WITHDRAWAL)

        thresholds = self.threshold_evaluator.evaluate(
            {
                Direction.DEPOSIT: self.aggregator.bucket_totals(deposits),
                Direction.WITHDRAWAL: self.aggregator.bucket_totals(withdrawals),
            },
            config,
        )

        signals = self.pattern_detector.detect(
            deposit_groups or [],
            withdrawal_groups or [],
            pattern_labels or [],
            valid,
            config,
        )

        escalation = self.escalator.escalate(thresholds.base_level, signals, config)
        score = self.score_mapper.score(escalation.level, config)

        intervals = {}
        for breach in thresholds.breaches:
            intervals.setdefault(
                breach.motivation,
                MotivationInterval(
                    granularity=breach.granularity,
                    bucket_key=breach.bucket_key,
                    direction=breach.direction,
                ),
            )

        result = RiskResult(
            score=score,
            level=escalation.level,
            motivations=_unique(thresholds.motivations + escalation.motivations),
            deposit_summary=deposit_summary,
            withdrawal_summary=withdrawal_summary,
            motivation_intervals=intervals,
            base_level=thresholds.base_level,
            signals=signals,
            config_version=config.version,
        )

        logger.info(
            f"Risk evaluated: level={result.level} score={result.score} "
            f"motivations={len(result.motivations)}"
        )
        return result
