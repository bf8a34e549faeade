"""
Base classes for market data providers
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..errors import CapabilityUnsupportedError

class Period(Enum):
    """Lookback windows accepted for historical data"""
    ONE_DAY = "1d"
    FIVE_DAYS = "5d"
    ONE_MONTH = "1mo"
    THREE_MONTHS = "3mo"
    SIX_MONTHS = "6mo"
    ONE_YEAR = "1y"
    TWO_YEARS = "2y"
    FIVE_YEARS = "5y"
    MAX = "max"

    @classmethod
    def parse(cls, value: Any) -> "Period":
        """Accept a Period or its string value"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ValueError(f"Invalid period '{value}'. Valid periods: {valid}") from None

@dataclass
class Quote:
    """Current market quote"""
    symbol: str
    price: float
    change: float
    change_percent: float
    volume: int
    timestamp: datetime
    market_cap: Optional[float] = None
    pe_ratio: Optional[float] = None
    week_high_52: Optional[float] = None
    week_low_52: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data

@dataclass
class CompanyInfo:
    """Company profile and fundamentals"""
    symbol: str
    name: str
    description: str
    sector: str
    industry: str
    market_cap: float

    # Valuation
    pe_ratio: Optional[float] = None
    pb_ratio: Optional[float] = None
    dividend_yield: Optional[float] = None
    eps: Optional[float] = None
    beta: Optional[float] = None

    # Profitability
    profit_margin: Optional[float] = None
    operating_margin: Optional[float] = None
    return_on_equity: Optional[float] = None
    return_on_assets: Optional[float] = None

    # Financial health
    debt_to_equity: Optional[float] = None
    current_ratio: Optional[float] = None

    # Growth
    revenue_growth: Optional[float] = None
    earnings_growth: Optional[float] = None

    revenue: Optional[float] = None
    gross_profit: Optional[float] = None
    week_high_52: Optional[float] = None
    week_low_52: Optional[float] = None

    last_updated: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['last_updated'] = self.last_updated.isoformat()
        return data

@dataclass
class HistoricalPoint:
    """Daily OHLCV bar"""
    date: str
    open: float
    high: float
    low: float
    close: float
    volume: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

@dataclass
class SymbolMatch:
    """Ticker search hit"""
    symbol: str
    name: str
    exchange: str
    type: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

@dataclass(frozen=True)
class ProviderCapabilities:
    """Optional operations a provider implements"""
    historical_data: bool = False
    symbol_search: bool = False

    @classmethod
    def detect(cls, provider: "MarketDataProvider") -> "ProviderCapabilities":
        """Probe which optional methods the provider's class overrides"""
        provider_type = type(provider)
        return cls(
            historical_data=provider_type.get_historical_data is not MarketDataProvider.get_historical_data,
            symbol_search=provider_type.search_symbol is not MarketDataProvider.search_symbol
        )

    def names(self) -> List[str]:
        supported = ["quote", "company_info"]
        if self.historical_data:
            supported.append("historical_data")
        if self.symbol_search:
            supported.append("symbol_search")
        return supported

class MarketDataProvider(ABC):
    """
    Uniform contract for market data vendors

    Quotes and company info are mandatory. Historical data and symbol search
    are optional: a subclass supports them by overriding the method, which is
    detected once at construction and exposed as ``capabilities``.
    """

    name: str = "Unknown"

    def __init__(self):
        self.capabilities = ProviderCapabilities.detect(self)
        self.is_connected = False

    async def connect(self):
        """Acquire network resources"""
        self.is_connected = True

    async def disconnect(self):
        """Release network resources"""
        self.is_connected = False

    @abstractmethod
    async def get_quote(self, symbol: str) -> Quote:
        """Get current quote for symbol"""

    @abstractmethod
    async def get_company_info(self, symbol: str) -> CompanyInfo:
        """Get profile and fundamentals for symbol"""

    async def get_historical_data(self, symbol: str, period: Period) -> List[HistoricalPoint]:
        """Get daily bars covering period"""
        raise CapabilityUnsupportedError("historical_data", f"{self.name} does not provide historical data")

    async def search_symbol(self, query: str) -> List[SymbolMatch]:
        """Search tickers by company name or partial symbol"""
        raise CapabilityUnsupportedError("symbol_search", f"{self.name} does not provide symbol search")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, capabilities={self.capabilities.names()})"

def supports_historical_data(provider: Optional[MarketDataProvider]) -> bool:
    return provider is not None and provider.capabilities.historical_data

def supports_symbol_search(provider: Optional[MarketDataProvider]) -> bool:
    return provider is not None and provider.capabilities.symbol_search
