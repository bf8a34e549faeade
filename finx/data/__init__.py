"""
Data acquisition layer
Handles market data providers, caching and quota-aware fallback
"""

from .base import (
    Period,
    Quote,
    CompanyInfo,
    HistoricalPoint,
    SymbolMatch,
    ProviderCapabilities,
    MarketDataProvider,
    supports_historical_data,
    supports_symbol_search
)
from .cache import CacheEntry, TTLCache
from .coalescer import RequestCoalescer
from .alpha_vantage import AlphaVantageProvider
from .yahoo import YahooFinanceProvider
from .market import (
    CACHE_SOURCE,
    DataResult,
    SeriesResult,
    ComparisonResult,
    ExplanationResult,
    MarketDataService
)
from .factory import ProviderConfig, create_providers, build_market_data_service

__all__ = [
    # Models
    'Period',
    'Quote',
    'CompanyInfo',
    'HistoricalPoint',
    'SymbolMatch',

    # Providers
    'ProviderCapabilities',
    'MarketDataProvider',
    'supports_historical_data',
    'supports_symbol_search',
    'AlphaVantageProvider',
    'YahooFinanceProvider',

    # Main interfaces
    'CacheEntry',
    'TTLCache',
    'RequestCoalescer',
    'CACHE_SOURCE',
    'DataResult',
    'SeriesResult',
    'ComparisonResult',
    'ExplanationResult',
    'MarketDataService',
    'ProviderConfig',
    'create_providers',
    'build_market_data_service'
]
