"""
Risk tier escalation.

The escalation rules form a small directed graph keyed by
(tier, aggravant class). One evaluation performs at most one hop.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from amlrisk.risk.config import AggravantClass, RiskConfig
from amlrisk.risk.patterns import AggravantSignals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """One edge of the escalation graph that was taken."""

    from_level: str
    aggravant: AggravantClass
    to_level: str


@dataclass
class EscalationOutcome:
    """Final tier and the motivations the escalation added."""

    level: str
    motivations: list[str] = field(default_factory=list)
    transition: Optional[Transition] = None

    @property
    def escalated(self) -> bool:
        return self.transition is not None


EscalationTable = dict[str, dict[AggravantClass, str]]


def build_escalation_table(config: RiskConfig) -> EscalationTable:
    """Turn the configured rules into an enum-keyed lookup table."""
    return {
        level: {AggravantClass(key): target for key, target in rules.items()}
        for level, rules in config.risk_levels.escalation_rules.items()
    }


class Escalator:
    """
    Raises the base tier when aggravating conditions are present.

    Lookup order for the current tier:
    1. major_aggravants, if structuring or bonus concentration fired
    2. minor_aggravants, if casino live concentration fired
    3. any_aggravants, if any aggravant fired

    The resulting tier is final; rules are not chained.
    """

    def escalate(
        self,
        base_level: str,
        signals: AggravantSignals,
        config: RiskConfig,
    ) -> EscalationOutcome:
        rules = build_escalation_table(config).get(base_level, {})
        motivations = config.motivations

        major = []
        if signals.structuring:
            major.append(motivations.frazionate.name)
        if signals.bonus_concentration:
            major.append(motivations.bonus_concentration.name)

        minor = []
        if signals.casino_live:
            minor.append(motivations.casino_live.name)

        if major and AggravantClass.MAJOR in rules:
            aggravant, added = AggravantClass.MAJOR, major
        elif minor and AggravantClass.MINOR in rules:
            aggravant, added = AggravantClass.MINOR, minor
        elif (major or minor) and AggravantClass.ANY in rules:
            aggravant, added = AggravantClass.ANY, major + minor
        else:
            return EscalationOutcome(level=base_level)

        transition = Transition(
            from_level=base_level,
            aggravant=aggravant,
            to_level=rules[aggravant],
        )
        logger.debug(
            f"Escalating {transition.from_level} -> {transition.to_level} "
            f"via {aggravant.value}"
        )
        return EscalationOutcome(
            level=transition.to_level,
            motivations=list(added),
            transition=transition,
        )
