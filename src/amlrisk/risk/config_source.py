"""
Providers of risk configuration snapshots.

The engine asks a ConfigProvider for a RiskConfig at the start of each
evaluation. HttpConfigSource reads the configuration endpoint, caches the
result for a TTL and falls back to the built-in default when the endpoint
is unreachable or returns something unusable.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

import httpx
from pydantic import ValidationError

from amlrisk.config import Settings, settings
from amlrisk.risk.config import RiskConfig, default_risk_config
from amlrisk.risk.errors import ConfigFetchError

logger = logging.getLogger(__name__)


class ConfigProvider(ABC):
    """Source of risk configuration snapshots."""

    @abstractmethod
    def get_config(self) -> RiskConfig:
        """
        Return a complete configuration snapshot.

        Must not raise: implementations recover locally.
        """
        pass


class StaticConfigProvider(ConfigProvider):
    """Always returns the same snapshot (the default one if none given)."""

    def __init__(self, config: Optional[RiskConfig] = None):
        self._config = config or default_risk_config()

    def get_config(self) -> RiskConfig:
        return self._config


@dataclass(frozen=True)
class CachedConfig:
    """A configuration snapshot with its expiry."""

    config: RiskConfig
    expires_at: float
    is_fallback: bool = False


class HttpConfigSource(ConfigProvider):
    """
    Risk configuration read from an HTTP endpoint.

    Snapshots are cached for `ttl_seconds`. On fetch failure the default
    configuration is cached for the same TTL so a down endpoint is not
    hit on every evaluation. The cache entry is replaced in a single
    assignment, so concurrent readers see either the old or the new
    snapshot.
    """

    def __init__(
        self,
        url: str,
        ttl_seconds: float = 300.0,
        timeout_seconds: float = 10.0,
        api_key: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the configuration source.

        Args:
            url: Configuration endpoint (GET, JSON)
            ttl_seconds: How long a snapshot is reused
            timeout_seconds: HTTP timeout
            api_key: Optional bearer token
            client: Preconfigured httpx client (useful for testing)
            clock: Monotonic clock in seconds
        """
        self.url = url
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._cache: Optional[CachedConfig] = None

        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        if client is None:
            client = httpx.Client(headers=headers, timeout=timeout_seconds)
        else:
            client.headers.update(headers)
        self._client = client

    @classmethod
    def from_settings(cls, app_settings: Settings = settings) -> "HttpConfigSource":
        if not app_settings.risk_config_url:
            raise ValueError("RISK_CONFIG_URL is not configured")
        return cls(
            url=app_settings.risk_config_url,
            ttl_seconds=app_settings.risk_config_ttl_seconds,
            timeout_seconds=app_settings.risk_config_timeout_seconds,
            api_key=app_settings.risk_config_api_key,
        )

    def get_config(self) -> RiskConfig:
        cached = self._cache
        if cached and cached.expires_at > self._clock():
            logger.debug("Risk configuration served from cache")
            return cached.config

        with self._lock:
            # Another thread may have refreshed while we waited
            cached = self._cache
            if cached and cached.expires_at > self._clock():
                return cached.config

            try:
                config = self.fetch()
                is_fallback = False
                logger.debug(f"Risk configuration refreshed from {self.url}")
            except ConfigFetchError as e:
                logger.warning(f"{e}; using default risk configuration")
                config = default_risk_config()
                is_fallback = True

            self._cache = CachedConfig(
                config=config,
                expires_at=self._clock() + self.ttl_seconds,
                is_fallback=is_fallback,
            )
            return config

    def fetch(self) -> RiskConfig:
        """
        Fetch and parse the configuration, bypassing the cache.

        Raises:
            ConfigFetchError: On HTTP errors or a malformed payload
        """
        try:
            response = self._client.get(self.url)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ConfigFetchError(f"Failed to fetch risk configuration: {e}") from e
        except ValueError as e:
            raise ConfigFetchError(f"Risk configuration is not valid JSON: {e}") from e

        try:
            config = RiskConfig.from_payload(payload)
        except (ValidationError, ValueError) as e:
            raise ConfigFetchError(f"Malformed risk configuration: {e}") from e

        unmapped = config.unmapped_levels()
        if unmapped:
            logger.warning(f"Risk levels without a score mapping: {unmapped}")

        for from_level, aggravant, to_level in config.non_monotonic_transitions():
            logger.warning(
                f"Escalation {from_level} -> {to_level} ({aggravant}) lowers the score"
            )

        return config

    @property
    def is_fallback(self) -> bool:
        """True if the current snapshot is the built-in default."""
        return bool(self._cache and self._cache.is_fallback)

    def clear_cache(self) -> None:
        self._cache = None

    def close(self) -> None:
        self._client.close()


def build_config_provider(app_settings: Settings = settings) -> ConfigProvider:
    """HTTP source when an endpoint is configured, built-in default otherwise."""
    if app_settings.risk_config_url:
        return HttpConfigSource.from_settings(app_settings)
    logger.info("No risk configuration endpoint configured; using default")
    return StaticConfigProvider()
