"""
Market data service with quota-aware fallback
Coordinates the cache, the Alpha Vantage rate limiter and Yahoo Finance
"""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from ..errors import CapabilityUnsupportedError, NotFoundError
from ..domain import (
    PeerData,
    PeerFailure,
    PeerResult,
    find_sector_from_symbol,
    format_metric_explanation,
    format_peer_comparison,
    get_metric_explanation,
    get_peers_by_sector,
    list_available_metrics,
    list_available_sectors,
    resolve_comparison_metrics,
    resolve_sector
)
from ..utils import RateLimiter, RateLimiterStats, get_logger, log_async_performance
from .base import (
    MarketDataProvider,
    Period,
    supports_historical_data,
    supports_symbol_search
)
from .cache import TTLCache
from .coalescer import RequestCoalescer

logger = get_logger(__name__)

CACHE_SOURCE = "Cache"

def _serialize(value: Any) -> Any:
    if isinstance(value, list):
        return [_serialize(item) for item in value]
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    return value

@dataclass
class DataResult:
    """Single record with provenance"""
    data: Any
    source: str
    cached: bool = False
    quota_info: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'data': _serialize(self.data),
            'source': self.source,
            'cached': self.cached
        }
        if self.quota_info:
            result['quota_info'] = self.quota_info
        return result

@dataclass
class SeriesResult:
    """List of records with provenance and a short summary"""
    data: List[Any]
    source: str
    metadata: str
    quota_info: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'data': _serialize(self.data),
            'source': self.source,
            'metadata': self.metadata
        }
        if self.quota_info:
            result['quota_info'] = self.quota_info
        return result

@dataclass
class ComparisonResult:
    """Rendered peer comparison and the per-symbol outcomes behind it"""
    comparison: str
    rows: List[PeerResult] = field(default_factory=list)

    @property
    def failures(self) -> List[PeerFailure]:
        return [row for row in self.rows if isinstance(row, PeerFailure)]

    def to_dict(self) -> Dict[str, Any]:
        rows = []
        for row in self.rows:
            if isinstance(row, PeerData):
                rows.append({'symbol': row.symbol, 'source': row.source, 'data': row.info.to_dict()})
            else:
                rows.append({'symbol': row.symbol, 'error': row.message})
        return {'comparison': self.comparison, 'rows': rows}

@dataclass
class ExplanationResult:
    """Metric explanation, optionally with cached company data as context"""
    explanation: str
    context_data: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {'explanation': self.explanation}
        if self.context_data:
            result['context_data'] = self.context_data
        return result

def _normalize_symbol(symbol: str) -> str:
    normalized = (symbol or "").strip().upper()
    if not normalized:
        raise ValueError("Symbol must not be empty")
    return normalized

class MarketDataService:
    """
    Serves market data from the cheapest source that can answer

    Quotes and company info are looked up in the cache first, then fetched
    from the primary provider through the rate limiter, then from the
    fallback provider. The primary is optional; without it every miss goes
    straight to the fallback.
    """

    def __init__(
        self,
        cache: TTLCache,
        rate_limiter: RateLimiter,
        primary: Optional[MarketDataProvider],
        fallback: MarketDataProvider,
        quote_ttl: float = 300,
        company_ttl: float = 86400,
        search_ttl: float = 3600,
        coalescer: Optional[RequestCoalescer] = None,
        max_peers: int = 5
    ):
        self.cache = cache
        self.rate_limiter = rate_limiter
        self.primary = primary
        self.fallback = fallback
        self.quote_ttl = quote_ttl
        self.company_ttl = company_ttl
        self.search_ttl = search_ttl
        self.coalescer = coalescer
        self.max_peers = max_peers

        # Capabilities are fixed for the lifetime of the service
        self._primary_search = supports_symbol_search(primary)
        self._primary_history = supports_historical_data(primary)
        self._fallback_history = supports_historical_data(fallback)

        logger.info(
            "Market data service ready",
            extra={
                'primary': primary.name if primary else None,
                'fallback': fallback.name
            }
        )

    async def initialize(self):
        """Connect all providers"""
        logger.info("Initializing market data service...")
        for provider in self._providers():
            try:
                await provider.connect()
                logger.info(f"Connected {provider.name} provider")
            except Exception as e:
                logger.error(f"Failed to connect {provider.name}: {e}")

    async def shutdown(self):
        """Disconnect all providers"""
        logger.info("Shutting down market data service...")
        for provider in self._providers():
            try:
                await provider.disconnect()
            except Exception as e:
                logger.error(f"Error disconnecting {provider.name}: {e}")

    async def __aenter__(self) -> "MarketDataService":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.shutdown()

    def _providers(self) -> List[MarketDataProvider]:
        return [p for p in (self.primary, self.fallback) if p is not None]

    async def get_quote(self, symbol: str) -> DataResult:
        """Get current quote, cached for the quote TTL"""
        symbol = _normalize_symbol(symbol)
        return await self._acquire(f"quote:{symbol}", self.quote_ttl, "get_quote", symbol)

    async def get_company_info(self, symbol: str) -> DataResult:
        """Get company profile and fundamentals, cached for the company TTL"""
        symbol = _normalize_symbol(symbol)
        return await self._acquire(f"company:{symbol}", self.company_ttl, "get_company_info", symbol)

    async def get_historical_data(self, symbol: str, period: Any = Period.ONE_YEAR) -> SeriesResult:
        """
        Get daily bars for a period

        The fallback is preferred since it has no quota; the primary is only
        used, through the rate limiter, when it is the sole provider offering
        historical data.
        """
        symbol = _normalize_symbol(symbol)
        period = Period.parse(period)

        if self._fallback_history:
            provider = self.fallback
            points = await provider.get_historical_data(symbol, period)
            quota_info = None
        elif self._primary_history:
            provider = self.primary
            points = await self.rate_limiter.execute(
                lambda: provider.get_historical_data(symbol, period)
            )
            quota_info = self.rate_limiter.describe_usage()
        else:
            raise CapabilityUnsupportedError(
                "historical_data",
                "Configure a provider that offers daily price history"
            )

        return SeriesResult(
            data=points,
            source=provider.name,
            metadata=f"{len(points)} data points over {period.value}",
            quota_info=quota_info
        )

    async def search_symbol(self, query: str) -> SeriesResult:
        """
        Search tickers by company name or partial symbol

        Only the primary provider offers search. Its errors are raised as-is,
        the fallback is never consulted.
        """
        query = (query or "").strip()
        if not query:
            raise ValueError("Search query must not be empty")

        if not self._primary_search:
            raise CapabilityUnsupportedError(
                "symbol_search",
                "Symbol search requires an Alpha Vantage API key. "
                "Please set ALPHA_VANTAGE_API_KEY in your environment."
            )

        key = f"search:{query.lower()}"
        cached = self.cache.get(key)
        if cached is not None:
            return SeriesResult(
                data=cached,
                source=CACHE_SOURCE,
                metadata=f"Found {len(cached)} matches"
            )

        async def fetch() -> SeriesResult:
            primary = self.primary
            matches = await self.rate_limiter.execute(lambda: primary.search_symbol(query))
            self.cache.set(key, matches, self.search_ttl)
            return SeriesResult(
                data=matches,
                source=primary.name,
                metadata=f"Found {len(matches)} matches",
                quota_info=self.rate_limiter.describe_usage()
            )

        return await self._coalesce(key, fetch)

    @log_async_performance()
    async def compare_peers(
        self,
        symbol: str,
        sector: Optional[str] = None,
        metrics: Optional[Sequence[str]] = None
    ) -> ComparisonResult:
        """
        Compare a company against its sector peers

        Args:
            symbol: Target ticker
            sector: Sector name, detected from the peer table when omitted
            metrics: Comparison columns, defaults to market cap, P/E,
                revenue growth and profit margin

        Peers are resolved from the cache or the fallback provider only, so
        a comparison never spends primary quota.
        """
        symbol = _normalize_symbol(symbol)
        columns = resolve_comparison_metrics(metrics)

        resolved = resolve_sector(sector) if sector else find_sector_from_symbol(symbol)
        if not resolved:
            sectors = "\n".join(f"- {name}" for name in list_available_sectors())
            hint = f"Unknown sector '{sector}'" if sector else f"Could not determine sector for {symbol}"
            raise NotFoundError(f"{hint}. Please specify one of:\n{sectors}")

        peers = [p for p in get_peers_by_sector(resolved) if p != symbol][:self.max_peers]
        if not peers:
            raise NotFoundError(f"No peers found for sector: {resolved}")

        symbols = [symbol] + peers
        rows = await asyncio.gather(*(self._peer_company_info(s) for s in symbols))

        failed = sum(1 for row in rows if isinstance(row, PeerFailure))
        if failed:
            logger.warning(f"Peer comparison for {symbol}: {failed}/{len(rows)} lookups failed")

        return ComparisonResult(
            comparison=format_peer_comparison(symbol, resolved, rows, columns),
            rows=list(rows)
        )

    async def explain_fundamental(self, metric: str, symbol: Optional[str] = None) -> ExplanationResult:
        """Explain a financial metric, adding cached company data when available"""
        explanation = get_metric_explanation(metric)
        if explanation is None:
            available = "\n".join(f"- {name}" for name in list_available_metrics())
            raise NotFoundError(f"Metric '{metric}' not found. Available metrics:\n{available}")

        context_data = None
        if symbol and symbol.strip():
            info = self.cache.get(f"company:{symbol.strip().upper()}")
            if info is not None:
                context_data = json.dumps(info.to_dict(), indent=2)

        return ExplanationResult(
            explanation=format_metric_explanation(explanation, symbol),
            context_data=context_data
        )

    def get_quota_status(self) -> RateLimiterStats:
        return self.rate_limiter.get_stats()

    async def _acquire(self, key: str, ttl: float, operation: str, symbol: str) -> DataResult:
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {key}")
            return DataResult(data=cached, source=CACHE_SOURCE, cached=True)

        return await self._coalesce(key, lambda: self._fetch_with_fallback(key, ttl, operation, symbol))

    async def _fetch_with_fallback(self, key: str, ttl: float, operation: str, symbol: str) -> DataResult:
        if self.primary is not None:
            primary_call = getattr(self.primary, operation)
            try:
                data = await self.rate_limiter.execute(lambda: primary_call(symbol))
            except Exception as e:
                logger.warning(
                    f"{self.primary.name} {operation} failed for {symbol}, "
                    f"falling back to {self.fallback.name}: {e}"
                )
            else:
                self.cache.set(key, data, ttl)
                return DataResult(
                    data=data,
                    source=self.primary.name,
                    cached=False,
                    quota_info=self.rate_limiter.describe_usage()
                )

        data = await getattr(self.fallback, operation)(symbol)
        self.cache.set(key, data, ttl)
        return DataResult(data=data, source=self.fallback.name, cached=False)

    async def _peer_company_info(self, symbol: str) -> PeerResult:
        key = f"company:{symbol}"
        cached = self.cache.get(key)
        if cached is not None:
            return PeerData(symbol=symbol, info=cached, source=CACHE_SOURCE)

        try:
            info = await self.fallback.get_company_info(symbol)
        except Exception as e:
            logger.warning(f"Peer lookup failed for {symbol}: {e}")
            return PeerFailure(symbol=symbol, message=str(e))

        self.cache.set(key, info, self.company_ttl)
        return PeerData(symbol=symbol, info=info, source=self.fallback.name)

    async def _coalesce(self, key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        if self.coalescer is None:
            return await fetch()
        return await self.coalescer.run(key, fetch)
