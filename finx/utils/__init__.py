"""
Utility modules for FinX
"""

from .logger import setup_logger, get_logger, log_async_performance
from .rate_limiter import (
    RateLimiter,
    RateLimiterStats,
    RateLimitTimeout
)

__all__ = [
    "setup_logger",
    "get_logger",
    "log_async_performance",
    "RateLimiter",
    "RateLimiterStats",
    "RateLimitTimeout"
]
