"""
Upstream detectors feeding the risk engine.

Provides:
- Fractionation (structuring) groups for deposits and withdrawals
- AML pattern labels (rapid deposit-withdrawal cycle, bonus abuse)
"""

from amlrisk.detection.aml_patterns import (
    BONUS_ABUSE_LABEL,
    RAPID_CYCLE_LABEL,
    AMLPatternScanner,
)
from amlrisk.detection.fractionation import FractionationDetector

__all__ = [
    "BONUS_ABUSE_LABEL",
    "RAPID_CYCLE_LABEL",
    "AMLPatternScanner",
    "FractionationDetector",
]
