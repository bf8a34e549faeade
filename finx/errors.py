"""
Error taxonomy for market data acquisition
"""

from typing import Optional


class MarketDataError(Exception):
    """Base class for all market data failures surfaced to callers"""


class ProviderError(MarketDataError):
    """A vendor adapter failed (network, HTTP status, unparseable payload)"""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider} error: {message}")


class NotFoundError(MarketDataError):
    """The lookup succeeded but there is no data for the symbol, sector or metric"""

    def __init__(self, message: str, provider: Optional[str] = None):
        self.provider = provider
        super().__init__(message)


class CapabilityUnsupportedError(MarketDataError):
    """No configured provider implements an optional operation"""

    def __init__(self, capability: str, remediation: str = ""):
        self.capability = capability
        self.remediation = remediation
        message = f"No configured provider supports {capability}"
        if remediation:
            message = f"{message}. {remediation}"
        super().__init__(message)
