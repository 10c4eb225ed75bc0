"""
Exceptions raised inside the risk engine.
"""


class RiskEngineError(Exception):
    """Base class for risk engine errors."""

    pass


class ConfigurationError(RiskEngineError):
    """The risk configuration does not fit what the engine computed."""

    pass


class ConfigFetchError(RiskEngineError):
    """The risk configuration could not be fetched or parsed."""

    pass
