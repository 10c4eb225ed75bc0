"""
Risk configuration, pattern detection, escalation and scoring.

Provides:
- RiskConfig snapshots and the built-in default configuration
- Config providers (static, HTTP with TTL cache and fallback)
- Aggravant pattern detection
- Tier escalation and score mapping
"""

from amlrisk.risk.config import (
    AggravantClass,
    RiskConfig,
    WeightClass,
    default_risk_config,
)
from amlrisk.risk.config_source import (
    ConfigProvider,
    HttpConfigSource,
    StaticConfigProvider,
    build_config_provider,
)
from amlrisk.risk.errors import ConfigFetchError, ConfigurationError, RiskEngineError
from amlrisk.risk.escalation import EscalationOutcome, Escalator, Transition
from amlrisk.risk.patterns import AggravantSignals, PatternDetector
from amlrisk.risk.scoring import ScoreMapper

__all__ = [
    "AggravantClass",
    "RiskConfig",
    "WeightClass",
    "default_risk_config",
    "ConfigProvider",
    "HttpConfigSource",
    "StaticConfigProvider",
    "build_config_provider",
    "ConfigFetchError",
    "ConfigurationError",
    "RiskEngineError",
    "EscalationOutcome",
    "Escalator",
    "Transition",
    "AggravantSignals",
    "PatternDetector",
    "ScoreMapper",
]
