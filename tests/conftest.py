"""Shared fakes for the FinX test suite."""

import asyncio
from datetime import datetime
from typing import Dict, List, Optional

import pytest

from finx.config import reset_config
from finx.data.base import (
    CompanyInfo,
    HistoricalPoint,
    MarketDataProvider,
    Period,
    Quote,
    SymbolMatch
)


class FakeClock:
    """Manually advanced clock whose sleep advances time instead of waiting."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds

    async def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


def make_quote(symbol: str, price: float = 150.0) -> Quote:
    return Quote(
        symbol=symbol,
        price=price,
        change=1.5,
        change_percent=1.0,
        volume=1_000_000,
        timestamp=datetime(2024, 1, 2, 16, 0)
    )


def make_company(symbol: str, **overrides) -> CompanyInfo:
    fields = dict(
        symbol=symbol,
        name=f"{symbol} Inc.",
        description=f"{symbol} makes things",
        sector="Technology",
        industry="Software",
        market_cap=2.5e12,
        pe_ratio=28.5,
        revenue_growth=0.08,
        profit_margin=0.25
    )
    fields.update(overrides)
    return CompanyInfo(**fields)


class RecordingProvider(MarketDataProvider):
    """Quote and company info only; records every call and can be told to fail."""

    name = "Recording"

    def __init__(self, name: Optional[str] = None, price: float = 150.0):
        super().__init__()
        if name:
            self.name = name
        self.price = price
        self.calls: List[tuple] = []
        self.failures: Dict[str, Exception] = {}
        self.failing_symbols: Dict[str, Exception] = {}
        self.delay: Optional[asyncio.Event] = None

    def fail(self, operation: str, error: Exception):
        self.failures[operation] = error

    def fail_symbol(self, symbol: str, error: Exception):
        self.failing_symbols[symbol] = error

    async def _record(self, operation: str, arg):
        self.calls.append((operation, arg))
        if self.delay is not None:
            await self.delay.wait()
        if operation in self.failures:
            raise self.failures[operation]
        if arg in self.failing_symbols:
            raise self.failing_symbols[arg]

    def calls_for(self, operation: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == operation]

    async def get_quote(self, symbol: str) -> Quote:
        await self._record("get_quote", symbol)
        return make_quote(symbol, self.price)

    async def get_company_info(self, symbol: str) -> CompanyInfo:
        await self._record("get_company_info", symbol)
        return make_company(symbol)


class SearchingProvider(RecordingProvider):
    """Adds symbol search, like the Alpha Vantage adapter."""

    async def search_symbol(self, query: str) -> List[SymbolMatch]:
        await self._record("search_symbol", query)
        return [
            SymbolMatch(symbol="AAPL", name="Apple Inc.", exchange="United States", type="Equity"),
            SymbolMatch(symbol="APLE", name="Apple Hospitality REIT", exchange="United States", type="Equity"),
        ]


class HistoryProvider(RecordingProvider):
    """Adds historical data, like the Yahoo Finance adapter."""

    async def get_historical_data(self, symbol: str, period: Period) -> List[HistoricalPoint]:
        await self._record("get_historical_data", symbol)
        return [
            HistoricalPoint(date="2024-01-02", open=100.0, high=105.0, low=99.0, close=104.0, volume=1000),
            HistoricalPoint(date="2024-01-03", open=104.0, high=106.0, low=101.0, close=102.0, volume=1200),
        ]


@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts from an unloaded configuration singleton."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def clock():
    return FakeClock()


