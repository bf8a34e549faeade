"""
FinX Market Data
Quota-aware market data acquisition across multiple vendors
"""

__version__ = "0.1.0"
__author__ = "FinX Team"

from . import config, data, domain, utils

__all__ = ["config", "data", "domain", "utils"]
