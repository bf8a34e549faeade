"""
Provider construction and service wiring from configuration
"""

from dataclasses import dataclass
from typing import Optional

from ..config import Config, get_config
from ..utils import RateLimiter, get_logger
from .alpha_vantage import AlphaVantageProvider
from .base import MarketDataProvider
from .cache import TTLCache
from .coalescer import RequestCoalescer
from .market import MarketDataService
from .yahoo import YahooFinanceProvider

logger = get_logger(__name__)

@dataclass
class ProviderConfig:
    """Primary (optional, quota limited) and fallback providers"""
    primary: Optional[MarketDataProvider]
    fallback: MarketDataProvider

def create_providers(config: Optional[Config] = None) -> ProviderConfig:
    """
    Build providers from configuration

    The primary exists only when an Alpha Vantage key is configured. A
    primary that fails to construct is logged and left out, so the service
    still works on the fallback alone.
    """
    config = config or get_config()

    primary = None
    if config.api.has_primary:
        try:
            primary = AlphaVantageProvider(
                config.api.alpha_vantage_key,
                timeout=config.api.http_timeout_seconds
            )
        except Exception as e:
            logger.error(f"Failed to create Alpha Vantage provider: {e}")
    else:
        logger.debug("No Alpha Vantage key configured, primary provider disabled")

    return ProviderConfig(primary=primary, fallback=YahooFinanceProvider())

def build_market_data_service(
    config: Optional[Config] = None,
    providers: Optional[ProviderConfig] = None
) -> MarketDataService:
    """
    Wire cache, rate limiter, coalescer and providers into a service

    Settings are read through Config.get so runtime overrides (CLI flags)
    take precedence over the environment.
    """
    config = config or get_config()
    providers = providers or create_providers(config)

    rate_limiter = RateLimiter(
        max_calls_per_minute=config.get("api.alpha_vantage_calls_per_minute"),
        max_calls_per_day=config.get("api.alpha_vantage_daily_calls"),
        max_wait_seconds=config.get("api.rate_limit_max_wait_seconds")
    )

    return MarketDataService(
        cache=TTLCache(),
        rate_limiter=rate_limiter,
        primary=providers.primary,
        fallback=providers.fallback,
        quote_ttl=config.get("cache.quote_ttl_seconds"),
        company_ttl=config.get("cache.company_ttl_seconds"),
        search_ttl=config.get("cache.search_ttl_seconds"),
        coalescer=RequestCoalescer() if config.get("system.coalesce_requests") else None,
        max_peers=config.get("system.max_peers")
    )
