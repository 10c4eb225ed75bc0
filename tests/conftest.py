"""
Pytest configuration and shared fixtures for AML risk tests.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Optional

import pytest

from amlrisk.engine import RiskEngine
from amlrisk.movements.classifier import KeywordClassifier
from amlrisk.movements.models import Movement
from amlrisk.risk.config import RiskConfig, default_risk_config
from amlrisk.risk.config_source import StaticConfigProvider


# Monday
BASE_TIME = datetime(2024, 3, 11, 10, 0, 0)


@pytest.fixture
def base_time() -> datetime:
    """A fixed Monday morning used as time origin."""
    return BASE_TIME


@pytest.fixture
def default_config() -> RiskConfig:
    return default_risk_config()


@pytest.fixture
def config_data() -> dict[str, Any]:
    """A mutable copy of the default configuration in endpoint format."""
    return default_risk_config().model_dump(by_alias=True, mode="json")


@pytest.fixture
def classifier() -> KeywordClassifier:
    return KeywordClassifier()


@pytest.fixture
def engine(default_config) -> RiskEngine:
    """Risk engine bound to the default configuration."""
    return RiskEngine(config_provider=StaticConfigProvider(default_config))


@pytest.fixture
def make_movement() -> Callable[..., Movement]:
    """Factory for movements relative to BASE_TIME."""

    def _make(
        reason: str,
        amount: Any,
        days: float = 0,
        hours: float = 0,
        method: Optional[str] = None,
        reference_id: Optional[str] = None,
    ) -> Movement:
        return Movement(
            timestamp=BASE_TIME + timedelta(days=days, hours=hours),
            reason=reason,
            amount=Decimal(str(amount)),
            payment_method=method,
            reference_id=reference_id,
        )

    return _make


@pytest.fixture
def live_game_movements(make_movement) -> list[Movement]:
    """Five game-play movements, three of them live-dealer sessions."""
    return [
        make_movement("Sessione casino live Evolution", -50, hours=1),
        make_movement("Giocata casino live", -20, hours=2),
        make_movement("Sessione live roulette", -30, hours=3),
        make_movement("Giocata slot", -10, hours=4),
        make_movement("Scommessa sportiva", -5, hours=5),
    ]
