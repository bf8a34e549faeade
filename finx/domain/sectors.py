"""
Sector peer groups
Static mapping from sector name to large-cap peers used for comparisons
"""

from typing import Dict, List, Optional

SECTOR_PEER_GROUPS: Dict[str, List[str]] = {
    'Technology': ['AAPL', 'MSFT', 'GOOGL', 'META', 'NVDA', 'ORCL', 'CSCO', 'INTC', 'AMD', 'CRM'],
    'Financial Services': ['JPM', 'BAC', 'WFC', 'C', 'GS', 'MS', 'BLK', 'SCHW', 'AXP', 'USB'],
    'Healthcare': ['JNJ', 'UNH', 'PFE', 'ABT', 'TMO', 'MRK', 'DHR', 'ABBV', 'LLY', 'BMY'],
    'Consumer Cyclical': ['AMZN', 'TSLA', 'HD', 'NKE', 'MCD', 'SBUX', 'TGT', 'LOW', 'TJX', 'BKNG'],
    'Consumer Defensive': ['WMT', 'PG', 'KO', 'PEP', 'COST', 'PM', 'MDLZ', 'CL', 'KHC', 'GIS'],
    'Industrials': ['BA', 'HON', 'UNP', 'UPS', 'RTX', 'CAT', 'LMT', 'GE', 'MMM', 'DE'],
    'Energy': ['XOM', 'CVX', 'COP', 'SLB', 'EOG', 'MPC', 'PSX', 'VLO', 'OXY', 'HAL'],
    'Utilities': ['NEE', 'DUK', 'SO', 'D', 'AEP', 'EXC', 'SRE', 'PEG', 'XEL', 'ED'],
    'Real Estate': ['PLD', 'AMT', 'CCI', 'EQIX', 'PSA', 'SPG', 'WELL', 'AVB', 'EQR', 'DLR'],
    'Communication Services': ['GOOGL', 'META', 'DIS', 'CMCSA', 'VZ', 'T', 'NFLX', 'TMUS', 'CHTR', 'EA'],
    'Basic Materials': ['LIN', 'APD', 'SHW', 'ECL', 'NEM', 'FCX', 'DOW', 'DD', 'NUE', 'VMC'],
}

def list_available_sectors() -> List[str]:
    return list(SECTOR_PEER_GROUPS)

def resolve_sector(name: str) -> Optional[str]:
    """Canonical sector name for a case-insensitive match, or None"""
    wanted = name.strip().lower()
    for sector in SECTOR_PEER_GROUPS:
        if sector.lower() == wanted:
            return sector
    return None

def get_peers_by_sector(sector: str) -> List[str]:
    canonical = resolve_sector(sector)
    return list(SECTOR_PEER_GROUPS[canonical]) if canonical else []

def find_sector_from_symbol(symbol: str) -> Optional[str]:
    """
    First sector whose peer group lists the symbol

    Symbols in several groups (GOOGL, META) resolve to the first one.
    """
    upper_symbol = symbol.strip().upper()
    for sector, symbols in SECTOR_PEER_GROUPS.items():
        if upper_symbol in symbols:
            return sector
    return None
