"""
Alpha Vantage REST adapter
Primary data source: richest fundamentals and symbol search,
limited to 5 calls/minute and 25 calls/day on the free tier
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import httpx

from ..config import get_config
from ..errors import NotFoundError, ProviderError
from ..utils import get_logger
from .base import CompanyInfo, MarketDataProvider, Quote, SymbolMatch

logger = get_logger(__name__)

BASE_URL = "https://www.alphavantage.co/query"
MAX_SEARCH_RESULTS = 10

def _to_float(value: Any) -> Optional[float]:
    """Parse Alpha Vantage numeric strings, which use 'None' and '-' for missing"""
    if value is None or value in ("None", "", "-"):
        return None
    try:
        return float(str(value).replace('%', ''))
    except (TypeError, ValueError):
        return None

def _to_int(value: Any) -> int:
    parsed = _to_float(value)
    return int(parsed) if parsed is not None else 0

class AlphaVantageProvider(MarketDataProvider):
    """
    Alpha Vantage client using httpx
    Every method costs one call against the vendor quota, so callers are
    expected to route requests through a RateLimiter
    """

    name = "Alpha Vantage"

    def __init__(self, api_key: str, client: Optional[httpx.AsyncClient] = None, timeout: Optional[float] = None):
        if not api_key:
            raise ValueError("Alpha Vantage API key is required")
        super().__init__()
        self.api_key = api_key
        self.timeout = timeout if timeout is not None else get_config().api.http_timeout_seconds
        self.client = client
        self._owns_client = client is None

    async def connect(self):
        """Initialize HTTP client"""
        if not self.client:
            self.client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
            self._owns_client = True
            logger.info("Alpha Vantage client initialized")
        self.is_connected = True

    async def disconnect(self):
        """Close HTTP client"""
        if self.client and self._owns_client:
            await self.client.aclose()
            self.client = None
        self.is_connected = False

    async def _request(self, function: str, **params) -> Dict[str, Any]:
        """Call one API function and return its JSON body"""
        if not self.client:
            await self.connect()

        query = {"function": function, "apikey": self.api_key, **params}
        try:
            response = await self.client.get(BASE_URL, params=query)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(self.name, f"HTTP {e.response.status_code} for {function}") from e
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"request failed for {function}: {e}") from e
        except ValueError as e:
            raise ProviderError(self.name, f"invalid JSON for {function}") from e

        if not isinstance(data, dict):
            raise ProviderError(self.name, f"unexpected payload for {function}")

        # Throttling and key problems come back as 200 with a message
        for notice in ("Note", "Information"):
            if notice in data:
                logger.warning(f"Alpha Vantage notice: {data[notice]}")
                raise ProviderError(self.name, data[notice])

        if "Error Message" in data:
            raise NotFoundError(data["Error Message"], provider=self.name)

        return data

    async def get_quote(self, symbol: str) -> Quote:
        data = await self._request("GLOBAL_QUOTE", symbol=symbol)

        quote = data.get("Global Quote")
        if not quote:
            raise NotFoundError(f"No quote data available for {symbol}", provider=self.name)

        trading_day = quote.get("07. latest trading day")
        try:
            timestamp = datetime.strptime(trading_day, "%Y-%m-%d") if trading_day else datetime.now()
        except ValueError:
            timestamp = datetime.now()

        return Quote(
            symbol=quote.get("01. symbol") or symbol,
            price=_to_float(quote.get("05. price")) or 0.0,
            change=_to_float(quote.get("09. change")) or 0.0,
            change_percent=_to_float(quote.get("10. change percent")) or 0.0,
            volume=_to_int(quote.get("06. volume")),
            timestamp=timestamp
        )

    async def get_company_info(self, symbol: str) -> CompanyInfo:
        data = await self._request("OVERVIEW", symbol=symbol)

        if not data.get("Symbol"):
            raise NotFoundError(f"No company data available for {symbol}", provider=self.name)

        return CompanyInfo(
            symbol=data["Symbol"],
            name=data.get("Name") or "N/A",
            description=data.get("Description") or "No description available",
            sector=data.get("Sector") or "N/A",
            industry=data.get("Industry") or "N/A",
            market_cap=_to_float(data.get("MarketCapitalization")) or 0.0,
            pe_ratio=_to_float(data.get("PERatio")),
            pb_ratio=_to_float(data.get("PriceToBookRatio")),
            dividend_yield=_to_float(data.get("DividendYield")),
            eps=_to_float(data.get("EPS")),
            beta=_to_float(data.get("Beta")),
            profit_margin=_to_float(data.get("ProfitMargin")),
            operating_margin=_to_float(data.get("OperatingMarginTTM")),
            return_on_equity=_to_float(data.get("ReturnOnEquityTTM")),
            return_on_assets=_to_float(data.get("ReturnOnAssetsTTM")),
            debt_to_equity=_to_float(data.get("DebtToEquity")),
            current_ratio=_to_float(data.get("CurrentRatio")),
            revenue_growth=_to_float(data.get("QuarterlyRevenueGrowthYOY")),
            earnings_growth=_to_float(data.get("QuarterlyEarningsGrowthYOY")),
            revenue=_to_float(data.get("RevenueTTM")),
            gross_profit=_to_float(data.get("GrossProfitTTM")),
            week_high_52=_to_float(data.get("52WeekHigh")),
            week_low_52=_to_float(data.get("52WeekLow"))
        )

    async def search_symbol(self, query: str) -> List[SymbolMatch]:
        data = await self._request("SYMBOL_SEARCH", keywords=query)

        matches = data.get("bestMatches") or []
        return [
            SymbolMatch(
                symbol=match.get("1. symbol", ""),
                name=match.get("2. name", ""),
                exchange=match.get("4. region", ""),
                type=match.get("3. type", "")
            )
            for match in matches[:MAX_SEARCH_RESULTS]
        ]
