"""
Yahoo Finance adapter for market data
Fallback source: no API quota, 15-minute delayed quotes
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Dict, List, Optional
import yfinance as yf

from ..errors import NotFoundError, ProviderError
from ..utils import get_logger
from .base import CompanyInfo, HistoricalPoint, MarketDataProvider, Period, Quote

logger = get_logger(__name__)

# Daily bar fields; rows missing any of them are dropped
BAR_COLUMNS = ['Open', 'High', 'Low', 'Close', 'Volume']

class YahooFinanceProvider(MarketDataProvider):
    """
    Yahoo Finance adapter using the yfinance library
    yfinance is synchronous, so calls run in a thread pool
    """

    name = "Yahoo Finance"

    def __init__(self, max_workers: int = 5):
        super().__init__()
        self.max_workers = max_workers
        self.executor: Optional[ThreadPoolExecutor] = None

    async def connect(self):
        """No connection needed for yfinance, only the worker pool"""
        if self.executor is None:
            self.executor = ThreadPoolExecutor(max_workers=self.max_workers)
        self.is_connected = True
        logger.info("Yahoo Finance adapter ready (15-min delayed data)")

    async def disconnect(self):
        """Cleanup thread pool"""
        if self.executor is not None:
            self.executor.shutdown(wait=False)
            self.executor = None
        self.is_connected = False

    async def _run(self, func, *args, **kwargs):
        if self.executor is None:
            await self.connect()
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, lambda: func(*args, **kwargs))

    async def _info(self, symbol: str) -> Dict[str, Any]:
        try:
            ticker = await self._run(yf.Ticker, symbol)
            info = await self._run(lambda: ticker.info)
        except Exception as e:
            raise ProviderError(self.name, f"lookup failed for {symbol}: {e}") from e
        return info or {}

    async def get_quote(self, symbol: str) -> Quote:
        """Get current quote (15-min delayed)"""
        info = await self._info(symbol)

        price = info.get('regularMarketPrice')
        if price is None:
            price = info.get('currentPrice')
        if price is None:
            raise NotFoundError(f"No quote data available for {symbol}", provider=self.name)

        market_time = info.get('regularMarketTime')
        timestamp = datetime.fromtimestamp(market_time) if isinstance(market_time, (int, float)) else datetime.now()

        return Quote(
            symbol=info.get('symbol', symbol),
            price=float(price),
            change=info.get('regularMarketChange') or 0.0,
            change_percent=info.get('regularMarketChangePercent') or 0.0,
            volume=int(info.get('regularMarketVolume') or 0),
            timestamp=timestamp,
            market_cap=info.get('marketCap'),
            pe_ratio=info.get('trailingPE'),
            week_high_52=info.get('fiftyTwoWeekHigh'),
            week_low_52=info.get('fiftyTwoWeekLow')
        )

    async def get_company_info(self, symbol: str) -> CompanyInfo:
        info = await self._info(symbol)

        name = info.get('longName') or info.get('shortName')
        if not name and info.get('marketCap') is None:
            raise NotFoundError(f"No company data available for {symbol}", provider=self.name)

        return CompanyInfo(
            symbol=info.get('symbol', symbol),
            name=name or symbol,
            description=info.get('longBusinessSummary') or 'No description available',
            sector=info.get('sector') or 'N/A',
            industry=info.get('industry') or 'N/A',
            market_cap=info.get('marketCap') or 0,
            pe_ratio=info.get('trailingPE'),
            pb_ratio=info.get('priceToBook'),
            dividend_yield=info.get('dividendYield'),
            eps=info.get('trailingEps'),
            beta=info.get('beta'),
            profit_margin=info.get('profitMargins'),
            operating_margin=info.get('operatingMargins'),
            return_on_equity=info.get('returnOnEquity'),
            return_on_assets=info.get('returnOnAssets'),
            debt_to_equity=info.get('debtToEquity'),
            current_ratio=info.get('currentRatio'),
            revenue_growth=info.get('revenueGrowth'),
            earnings_growth=info.get('earningsGrowth'),
            revenue=info.get('totalRevenue'),
            gross_profit=info.get('grossProfits'),
            week_high_52=info.get('fiftyTwoWeekHigh'),
            week_low_52=info.get('fiftyTwoWeekLow')
        )

    async def get_historical_data(self, symbol: str, period: Period) -> List[HistoricalPoint]:
        """Get daily bars for the period"""
        try:
            ticker = await self._run(yf.Ticker, symbol)
            df = await self._run(ticker.history, period=period.value, interval="1d")
        except Exception as e:
            raise ProviderError(self.name, f"historical data failed for {symbol}: {e}") from e

        if df is None or df.empty:
            logger.warning(f"No historical data available for {symbol} over {period.value}")
            return []

        try:
            bars = df.dropna(subset=BAR_COLUMNS)
            points = [
                HistoricalPoint(
                    date=idx.strftime("%Y-%m-%d"),
                    open=float(row['Open']),
                    high=float(row['High']),
                    low=float(row['Low']),
                    close=float(row['Close']),
                    volume=int(row['Volume'])
                )
                for idx, row in bars.iterrows()
            ]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ProviderError(self.name, f"malformed historical data for {symbol}: {e}") from e

        skipped = len(df) - len(bars)
        if skipped:
            logger.warning(f"Skipped {skipped} incomplete bars for {symbol}")

        return points
