"""
Educational explanations of financial metrics
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

@dataclass(frozen=True)
class MetricExplanation:
    """Reference card for one metric"""
    name: str
    definition: str
    what_it_means: str
    how_to_interpret: str
    good_vs_bad: str
    example: str
    related_metrics: List[str] = field(default_factory=list)
    next_steps: str = ""

METRIC_EXPLANATIONS: Dict[str, MetricExplanation] = {
    'pe_ratio': MetricExplanation(
        name='P/E Ratio (Price-to-Earnings)',
        definition='Share price divided by earnings per share. Formula: P/E = Price / EPS',
        what_it_means='How many dollars investors pay today for one dollar of annual earnings.',
        how_to_interpret='Compare against the company\'s own history, its sector peers and the broad market '
                         '(roughly 15-20 for the S&P 500). A high P/E prices in growth; a low one may signal '
                         'value or doubts about future earnings.',
        good_vs_bad='There is no universal threshold. Fast growers often trade above 30 while utilities sit '
                    'near 10-15.',
        example='A $150 stock earning $6 per share trades at 25x earnings.',
        related_metrics=['PEG Ratio', 'Forward P/E', 'EPS', 'Earnings Yield'],
        next_steps='Run compare_peers to see where the P/E sits within its sector.'
    ),
    'peg_ratio': MetricExplanation(
        name='PEG Ratio (Price/Earnings-to-Growth)',
        definition='P/E divided by the expected annual EPS growth rate in percent.',
        what_it_means='Adjusts the P/E for growth, so a high multiple can be judged against how fast '
                      'earnings are rising.',
        how_to_interpret='Around 1.0 is often read as fair value, below 1.0 as cheap for its growth, above '
                         '2.0 as expensive.',
        good_vs_bad='Lower is generally better, but growth estimates are forecasts and frequently wrong.',
        example='A P/E of 30 with 30% expected growth gives a PEG of 1.0.',
        related_metrics=['P/E Ratio', 'EPS Growth', 'Forward P/E'],
        next_steps='Check the earnings growth figure in get_company_info before trusting a PEG.'
    ),
    'market_cap': MetricExplanation(
        name='Market Capitalization',
        definition='Share price multiplied by shares outstanding.',
        what_it_means='What the market values the whole company at.',
        how_to_interpret='Large-cap is above $10B, mid-cap $2B-$10B, small-cap below $2B. Smaller companies '
                         'tend to be more volatile with more room to grow.',
        good_vs_bad='Size is a risk profile, not a quality score.',
        example='16 billion shares at $150 is a $2.4 trillion market cap.',
        related_metrics=['Enterprise Value', 'Shares Outstanding', 'Float'],
        next_steps='Compare market caps within a peer group to see who dominates the sector.'
    ),
    'eps': MetricExplanation(
        name='EPS (Earnings Per Share)',
        definition='Net income minus preferred dividends, divided by weighted average shares outstanding.',
        what_it_means='Profit attributable to each share.',
        how_to_interpret='Watch the trend across quarters and against analyst estimates. Buybacks can raise '
                         'EPS without any growth in net income.',
        good_vs_bad='Steady growth is a good sign; a single jump may come from one-off items.',
        example='$10B of net income over 2B shares is an EPS of $5.',
        related_metrics=['P/E Ratio', 'Net Income', 'Diluted EPS'],
        next_steps='Pair EPS with the P/E ratio to see what the market pays for those earnings.'
    ),
    'dividend_yield': MetricExplanation(
        name='Dividend Yield',
        definition='Annual dividends per share divided by share price.',
        what_it_means='Cash return from dividends alone at today\'s price.',
        how_to_interpret='Compare with bond yields and sector norms. A yield rises when the price falls, so '
                         'an unusually high yield can be a warning.',
        good_vs_bad='2-4% is typical for mature payers; double digits often precede a dividend cut.',
        example='A $2 annual dividend on a $50 stock yields 4%.',
        related_metrics=['Payout Ratio', 'Dividend Growth Rate', 'Free Cash Flow'],
        next_steps='Check profit margins and cash flow to judge whether the dividend is sustainable.'
    ),
    'roe': MetricExplanation(
        name='ROE (Return on Equity)',
        definition='Net income divided by shareholders\' equity.',
        what_it_means='How much profit management generates from the capital shareholders provided.',
        how_to_interpret='Compare within a sector. Leverage inflates ROE, so read it next to debt-to-equity.',
        good_vs_bad='Consistently above 15% is strong; a high ROE driven by heavy debt is fragile.',
        example='$20B of net income on $100B of equity is a 20% ROE.',
        related_metrics=['ROA', 'Debt-to-Equity', 'Profit Margin'],
        next_steps='Look at debt_to_equity for the same company before crediting a high ROE.'
    ),
    'debt_to_equity': MetricExplanation(
        name='Debt-to-Equity Ratio',
        definition='Total liabilities (or total debt) divided by shareholders\' equity.',
        what_it_means='How much the business is financed by creditors versus owners.',
        how_to_interpret='Capital-heavy sectors such as utilities run higher ratios than software companies. '
                         'Rising leverage raises sensitivity to interest rates.',
        good_vs_bad='Below 1.0 is conservative for most industries; well above 2.0 deserves scrutiny.',
        example='$50B of debt against $100B of equity is a ratio of 0.5.',
        related_metrics=['Current Ratio', 'Interest Coverage', 'ROE'],
        next_steps='Compare against sector peers rather than the whole market.'
    ),
    'revenue': MetricExplanation(
        name='Revenue (Sales)',
        definition='Total income from selling goods and services before any expenses.',
        what_it_means='The top line: the size of the business.',
        how_to_interpret='Growth rate matters more than the absolute figure. Check whether growth is organic '
                         'or bought through acquisitions.',
        good_vs_bad='Consistent growth beats lumpy spikes; shrinking revenue needs an explanation.',
        example='Revenue up from $80B to $92B is 15% growth.',
        related_metrics=['Revenue Growth', 'Gross Profit', 'Profit Margin'],
        next_steps='Pair revenue growth with margins to see if growth is profitable.'
    ),
    'profit_margin': MetricExplanation(
        name='Profit Margin (Net Margin)',
        definition='Net income divided by revenue.',
        what_it_means='Share of each sales dollar that ends up as profit.',
        how_to_interpret='Margins differ hugely by industry: grocers run on 1-3%, software can exceed 25%. '
                         'Expanding margins point to pricing power or efficiency.',
        good_vs_bad='Above the sector average suggests a competitive advantage.',
        example='$25B of net income on $100B of revenue is a 25% margin.',
        related_metrics=['Gross Margin', 'Operating Margin', 'ROE'],
        next_steps='Use compare_peers to rank margins within the sector.'
    ),
    'book_value': MetricExplanation(
        name='Book Value (Shareholders\' Equity)',
        definition='Total assets minus total liabilities.',
        what_it_means='Accounting value left for shareholders if the company were liquidated.',
        how_to_interpret='Most useful for asset-heavy businesses such as banks. Price-to-book below 1.0 means '
                         'the market values the company under its accounting value.',
        good_vs_bad='Growing book value per share over time is healthy; intangible-heavy companies often '
                    'show little book value at all.',
        example='$300B of assets and $200B of liabilities leave $100B of book value.',
        related_metrics=['P/B Ratio', 'Tangible Book Value', 'ROE'],
        next_steps='Check pb_ratio in get_company_info for the market\'s view of that book value.'
    ),
}

METRIC_ALIASES: Dict[str, str] = {
    'pe': 'pe_ratio',
    'p_e': 'pe_ratio',
    'p_e_ratio': 'pe_ratio',
    'peg': 'peg_ratio',
    'market_capitalization': 'market_cap',
    'earnings_per_share': 'eps',
    'return_on_equity': 'roe',
    'net_margin': 'profit_margin',
    'sales': 'revenue',
}

def normalize_metric_name(metric: str) -> str:
    """Lowercase with spaces, hyphens and slashes folded to underscores"""
    key = re.sub(r'[\s\-/_]+', '_', metric.strip().lower()).strip('_')
    return METRIC_ALIASES.get(key, key)

def get_metric_explanation(metric: str) -> Optional[MetricExplanation]:
    return METRIC_EXPLANATIONS.get(normalize_metric_name(metric))

def list_available_metrics() -> List[str]:
    return [f"{key} ({explanation.name})" for key, explanation in METRIC_EXPLANATIONS.items()]

def format_metric_explanation(explanation: MetricExplanation, symbol: Optional[str] = None) -> str:
    """Render an explanation as markdown"""
    symbol_context = f" for {symbol.upper()}" if symbol else ""
    related = "\n".join(f"- {metric}" for metric in explanation.related_metrics)

    sections = [
        f"# {explanation.name}{symbol_context}",
        f"## Definition\n{explanation.definition}",
        f"## What It Means\n{explanation.what_it_means}",
        f"## How to Interpret\n{explanation.how_to_interpret}",
        f"## Good vs Bad\n{explanation.good_vs_bad}",
        f"## Example\n{explanation.example}",
        f"## Related Metrics\n{related}",
    ]
    if explanation.next_steps:
        sections.append(f"## Next Steps\n{explanation.next_steps}")
    sections.append("---\n*Educational information only, not financial advice.*")

    return "\n\n".join(sections)
