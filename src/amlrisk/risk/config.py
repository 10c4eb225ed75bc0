"""
Risk engine configuration.

Mirrors the JSON served by the configuration endpoint:

    {
      "volumeThresholds": {"daily": 5000, "weekly": 10000, "monthly": 15000},
      "riskMotivations": {"frazionate": {...}, "bonus_concentration": {...}, ...},
      "riskLevels": {"base_levels": {...}, "escalation_rules": {...},
                     "score_mapping": {...}}
    }

A RiskConfig is an immutable snapshot for the duration of one evaluation.
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class WeightClass(str, Enum):
    """How a motivation contributes to the risk tier."""

    BASE = "base"
    MAJOR = "major"
    MINOR = "minor"


class AggravantClass(str, Enum):
    """Keys of an escalation rule."""

    MAJOR = "major_aggravants"
    MINOR = "minor_aggravants"
    ANY = "any_aggravants"


class VolumeThresholds(BaseModel):
    """Volume ceilings per calendar bucket (EUR)."""

    model_config = ConfigDict(frozen=True)

    daily: Decimal = Field(..., ge=0)
    weekly: Decimal = Field(..., ge=0)
    monthly: Decimal = Field(..., ge=0)


class RiskMotivation(BaseModel):
    """A configurable motivation with its display text."""

    model_config = ConfigDict(frozen=True)

    name: str
    weight: WeightClass
    threshold_percentage: Optional[float] = Field(default=None, ge=0)
    enabled: bool = True


class RiskMotivations(BaseModel):
    """All motivations known to the engine."""

    model_config = ConfigDict(frozen=True, extra="allow")

    frazionate: RiskMotivation
    bonus_concentration: RiskMotivation
    casino_live: RiskMotivation
    volumes_daily: RiskMotivation
    volumes_weekly: RiskMotivation
    volumes_monthly: RiskMotivation

    def for_volume(self, granularity: str) -> RiskMotivation:
        """Motivation for a volume granularity (daily, weekly, monthly)."""
        return getattr(self, f"volumes_{granularity}")


class BaseLevels(BaseModel):
    """Tier assigned from volume thresholds alone."""

    model_config = ConfigDict(frozen=True)

    monthly_exceeded: str
    weekly_or_daily_exceeded: str
    default: str


class RiskLevels(BaseModel):
    """Base tiers, escalation graph and score lookup."""

    model_config = ConfigDict(frozen=True)

    base_levels: BaseLevels
    escalation_rules: dict[str, dict[str, str]] = Field(default_factory=dict)
    score_mapping: dict[str, int]

    @field_validator("escalation_rules")
    @classmethod
    def drop_unknown_aggravants(
        cls, v: dict[str, dict[str, str]]
    ) -> dict[str, dict[str, str]]:
        """Ignore rule keys other than major/minor/any aggravants."""
        known = {a.value for a in AggravantClass}
        cleaned = {}
        for level, rules in v.items():
            unknown = set(rules) - known
            if unknown:
                logger.warning(
                    f"Ignoring unknown escalation keys for {level}: {sorted(unknown)}"
                )
            cleaned[level] = {k: t for k, t in rules.items() if k in known}
        return cleaned


class RiskConfig(BaseModel):
    """Complete configuration snapshot for one evaluation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    volume_thresholds: VolumeThresholds = Field(..., alias="volumeThresholds")
    motivations: RiskMotivations = Field(..., alias="riskMotivations")
    risk_levels: RiskLevels = Field(..., alias="riskLevels")
    version: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RiskConfig":
        """
        Parse an endpoint payload.

        Accepts the bare config or the {"success": true, "config": {...}}
        envelope. Missing top-level sections are taken from the default.

        Raises:
            ValueError: If the payload is not a JSON object
            pydantic.ValidationError: If a section is malformed
        """
        if not isinstance(payload, dict):
            raise ValueError("Risk configuration payload must be a JSON object")

        if "config" in payload:
            if payload.get("success") is False or not isinstance(payload["config"], dict):
                raise ValueError("Risk configuration endpoint reported failure")
            payload = payload["config"]

        defaults = DEFAULT_RISK_CONFIG
        version = payload.get("version")
        data = {
            "volumeThresholds": payload.get("volumeThresholds")
            or defaults.volume_thresholds.model_dump(),
            "riskMotivations": payload.get("riskMotivations")
            or defaults.motivations.model_dump(),
            "riskLevels": payload.get("riskLevels") or defaults.risk_levels.model_dump(),
            "version": str(version) if version is not None else None,
        }
        return cls.model_validate(data)

    def unmapped_levels(self) -> list[str]:
        """Tiers reachable by the engine that have no score."""
        levels = self.risk_levels
        reachable = [
            levels.base_levels.monthly_exceeded,
            levels.base_levels.weekly_or_daily_exceeded,
            levels.base_levels.default,
        ]
        for rules in levels.escalation_rules.values():
            reachable.extend(rules.values())

        missing = []
        for level in reachable:
            if level not in levels.score_mapping and level not in missing:
                missing.append(level)
        return missing

    def non_monotonic_transitions(self) -> list[tuple[str, str, str]]:
        """Escalations that would lower the score: (from, aggravant, to)."""
        scores = self.risk_levels.score_mapping
        found = []
        for level, rules in self.risk_levels.escalation_rules.items():
            for aggravant, target in rules.items():
                if level in scores and target in scores and scores[target] < scores[level]:
                    found.append((level, aggravant, target))
        return found


DEFAULT_RISK_CONFIG = RiskConfig.model_validate(
    {
        "volumeThresholds": {
            "daily": 5000,
            "weekly": 10000,
            "monthly": 15000,
        },
        "riskMotivations": {
            "frazionate": {
                "name": "Rilevato structuring tramite operazioni frazionate.",
                "weight": "major",
                "enabled": True,
            },
            "bonus_concentration": {
                "name": "Rilevata concentrazione di bonus.",
                "weight": "major",
                "threshold_percentage": 10,
                "enabled": True,
            },
            "casino_live": {
                "name": "Rilevata attività significativa su casino live.",
                "weight": "minor",
                "threshold_percentage": 40,
                "enabled": True,
            },
            "volumes_daily": {
                "name": "Rilevati volumi significativamente elevati su base giornaliera",
                "weight": "base",
                "enabled": True,
            },
            "volumes_weekly": {
                "name": "Rilevati volumi significativamente elevati su base settimanale",
                "weight": "base",
                "enabled": True,
            },
            "volumes_monthly": {
                "name": "Rilevati volumi significativamente elevati su base mensile",
                "weight": "base",
                "enabled": True,
            },
        },
        "riskLevels": {
            "base_levels": {
                "monthly_exceeded": "High",
                "weekly_or_daily_exceeded": "Medium",
                "default": "Low",
            },
            "escalation_rules": {
                "Low": {
                    "major_aggravants": "High",
                    "minor_aggravants": "Medium",
                },
                "Medium": {
                    "major_aggravants": "High",
                },
                "High": {
                    "any_aggravants": "Elevato",
                },
            },
            "score_mapping": {
                "Elevato": 100,
                "High": 80,
                "Medium": 50,
                "Low": 20,
            },
        },
        "version": "default",
    }
)


def default_risk_config() -> RiskConfig:
    """The built-in configuration used when none can be fetched."""
    return DEFAULT_RISK_CONFIG
