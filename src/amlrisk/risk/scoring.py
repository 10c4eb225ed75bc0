"""
Mapping of the final risk tier to a numeric score.
"""

import logging

from amlrisk.risk.config import RiskConfig
from amlrisk.risk.errors import ConfigurationError

logger = logging.getLogger(__name__)


class ScoreMapper:
    """Looks up the score of a tier in the configured score mapping."""

    UNMAPPED_SCORE = 0

    def lookup(self, level: str, config: RiskConfig) -> int:
        """
        Score for a tier.

        Raises:
            ConfigurationError: If the tier has no score
        """
        mapping = config.risk_levels.score_mapping
        if level not in mapping:
            raise ConfigurationError(
                f"Risk level {level!r} has no entry in score_mapping "
                f"(known levels: {sorted(mapping)})"
            )
        return mapping[level]

    def score(self, level: str, config: RiskConfig) -> int:
        """
        Score for a tier, or 0 when the configuration has no entry.

        The mismatch is logged for operators instead of being raised.
        """
        try:
            return self.lookup(level, config)
        except ConfigurationError as e:
            logger.error(f"Risk configuration inconsistency: {e}")
            return self.UNMAPPED_SCORE
