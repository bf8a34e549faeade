"""
Peer comparison report
Each compared symbol is either PeerData or PeerFailure, so a failed lookup
only blanks its own row
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Union

from ..data.base import CompanyInfo
from ..errors import NotFoundError
from .fundamentals import normalize_metric_name

@dataclass(frozen=True)
class PeerData:
    """Company info successfully resolved for one symbol"""
    symbol: str
    info: CompanyInfo
    source: str

@dataclass(frozen=True)
class PeerFailure:
    """Lookup for one symbol failed"""
    symbol: str
    message: str

PeerResult = Union[PeerData, PeerFailure]

def _billions(value: Optional[float]) -> str:
    return f"${value / 1e9:.1f}B" if value else "N/A"

def _ratio(value: Optional[float]) -> str:
    return f"{value:.1f}" if value is not None else "N/A"

def _percent(value: Optional[float]) -> str:
    return f"{value * 100:.1f}%" if value is not None else "N/A"

def _money(value: Optional[float]) -> str:
    return f"${value:.2f}" if value is not None else "N/A"

@dataclass(frozen=True)
class ComparisonMetric:
    """One column of the comparison table"""
    key: str
    label: str
    attribute: str
    render: Callable[[Optional[float]], str]

    def format(self, info: CompanyInfo) -> str:
        return self.render(getattr(info, self.attribute))

COMPARISON_METRICS: Dict[str, ComparisonMetric] = {
    metric.key: metric for metric in [
        ComparisonMetric('market_cap', 'Market Cap', 'market_cap', _billions),
        ComparisonMetric('pe_ratio', 'P/E Ratio', 'pe_ratio', _ratio),
        ComparisonMetric('pb_ratio', 'P/B Ratio', 'pb_ratio', _ratio),
        ComparisonMetric('eps', 'EPS', 'eps', _money),
        ComparisonMetric('beta', 'Beta', 'beta', _ratio),
        ComparisonMetric('dividend_yield', 'Dividend Yield', 'dividend_yield', _percent),
        ComparisonMetric('revenue', 'Revenue', 'revenue', _billions),
        ComparisonMetric('revenue_growth', 'Revenue Growth', 'revenue_growth', _percent),
        ComparisonMetric('earnings_growth', 'Earnings Growth', 'earnings_growth', _percent),
        ComparisonMetric('profit_margin', 'Profit Margin', 'profit_margin', _percent),
        ComparisonMetric('operating_margin', 'Operating Margin', 'operating_margin', _percent),
        ComparisonMetric('roe', 'ROE', 'return_on_equity', _percent),
        ComparisonMetric('debt_to_equity', 'Debt/Equity', 'debt_to_equity', _ratio),
    ]
}

DEFAULT_COMPARISON_METRICS = ['market_cap', 'pe_ratio', 'revenue_growth', 'profit_margin']

def resolve_comparison_metrics(metrics: Optional[Sequence[str]] = None) -> List[ComparisonMetric]:
    """
    Map requested metric names to table columns

    Raises:
        NotFoundError: If any requested metric has no column
    """
    names = [normalize_metric_name(m) for m in metrics if m and m.strip()] if metrics else []
    if not names:
        names = DEFAULT_COMPARISON_METRICS

    unknown = [name for name in names if name not in COMPARISON_METRICS]
    if unknown:
        available = "\n".join(f"- {key}" for key in COMPARISON_METRICS)
        raise NotFoundError(
            f"Unknown comparison metric(s): {', '.join(unknown)}\n\nAvailable metrics:\n{available}"
        )

    # Keep first occurrence order, drop duplicates
    return [COMPARISON_METRICS[name] for name in dict.fromkeys(names)]

def format_peer_comparison(
    symbol: str,
    sector: str,
    rows: Sequence[PeerResult],
    columns: Sequence[ComparisonMetric]
) -> str:
    """Render the comparison as a markdown report"""
    peers = [row.symbol for row in rows if row.symbol != symbol]

    lines = [
        f"# Peer Comparison: {symbol}",
        "",
        f"**Sector:** {sector}",
        f"**Comparing against:** {', '.join(peers)}",
        "",
        "---",
        "",
        "## Key Metrics Comparison",
        "",
        "| Company | " + " | ".join(column.label for column in columns) + " |",
        "|---------|" + "|".join("-" * (len(column.label) + 2) for column in columns) + "|",
    ]

    failures = []
    for row in rows:
        if isinstance(row, PeerData):
            name = f"**{row.symbol}**" if row.symbol == symbol else row.symbol
            cells = [column.format(row.info) for column in columns]
        elif isinstance(row, PeerFailure):
            name = row.symbol
            cells = ["Error"] * len(columns)
            failures.append(row)
        else:
            raise TypeError(f"Unexpected peer result: {row!r}")
        lines.append(f"| {name} | " + " | ".join(cells) + " |")

    lines += ["", f"*Target company ({symbol}) shown in bold*"]

    if failures:
        lines += ["", "**Unavailable:**"]
        lines += [f"- {failure.symbol}: {failure.message}" for failure in failures]

    lines += [
        "",
        "---",
        "",
        "## Learning Points",
        "",
        f"1. **Valuation**: Is {symbol}'s P/E above or below its peers? A premium implies the market "
        "expects faster growth.",
        "2. **Profitability**: Higher margins than the sector often reflect a durable competitive advantage.",
        "3. **Growth**: Who is growing revenue fastest, and is that growth profitable?",
        "4. **Size**: Market cap reflects scale and stability, not necessarily upside.",
        "5. **Go deeper**: Use `company` on any peer and `explain` on any metric.",
        "",
        "---",
        "",
        "*Peer comparison is one tool among many. Management, moats and industry trends matter too.*",
    ]

    return "\n".join(lines)
