"""
Configuration management for FinX
Loads environment variables and provides centralized settings
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
import logging

# Load environment variables
env_path = Path(__file__).parent.parent.parent / '.env'
load_dotenv(dotenv_path=env_path)

@dataclass
class APIConfig:
    """Vendor API configuration and quota limits"""
    alpha_vantage_key: str = ""

    # Alpha Vantage free tier
    alpha_vantage_calls_per_minute: int = 5
    alpha_vantage_daily_calls: int = 25

    # None means a queued call may wait indefinitely for a free slot
    rate_limit_max_wait_seconds: Optional[float] = 120.0
    http_timeout_seconds: float = 30.0

    @property
    def has_primary(self) -> bool:
        return bool(self.alpha_vantage_key)

@dataclass
class CacheConfig:
    """Cache lifetimes per kind of data (seconds)"""
    quote_ttl_seconds: int = 5 * 60
    company_ttl_seconds: int = 24 * 60 * 60
    search_ttl_seconds: int = 60 * 60

@dataclass
class SystemConfig:
    """System-level configuration"""
    log_level: str = "INFO"
    coalesce_requests: bool = True
    max_peers: int = 5

@dataclass
class Config:
    """Main configuration container"""
    api: APIConfig
    cache: CacheConfig
    system: SystemConfig

    # Runtime overrides
    _overrides: Dict[str, Any] = field(default_factory=dict)

    def override(self, key: str, value: Any):
        """Override a configuration value at runtime"""
        self._overrides[key] = value

    def get(self, key: str, default=None):
        """Get configuration value with override support"""
        if key in self._overrides:
            return self._overrides[key]

        # Navigate nested attributes
        parts = key.split('.')
        obj = self
        for part in parts:
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                return default
        return obj

def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")

def _env_optional_float(name: str, default: str) -> Optional[float]:
    raw = os.getenv(name, default).strip().lower()
    if raw in ("", "none", "unbounded"):
        return None
    return float(raw)

# Singleton instance
_config_instance: Optional[Config] = None

def get_config() -> Config:
    """Get or create the configuration singleton"""
    global _config_instance

    if _config_instance is None:
        # Load from environment
        api_config = APIConfig(
            alpha_vantage_key=os.getenv("ALPHA_VANTAGE_API_KEY", "").strip(),
            alpha_vantage_calls_per_minute=int(os.getenv("ALPHA_VANTAGE_CALLS_PER_MINUTE", "5")),
            alpha_vantage_daily_calls=int(os.getenv("ALPHA_VANTAGE_DAILY_CALLS", "25")),
            rate_limit_max_wait_seconds=_env_optional_float("RATE_LIMIT_MAX_WAIT_SECONDS", "120"),
            http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
        )

        cache_config = CacheConfig(
            quote_ttl_seconds=int(os.getenv("CACHE_TTL_QUOTE_SECONDS", "300")),
            company_ttl_seconds=int(os.getenv("CACHE_TTL_COMPANY_SECONDS", "86400")),
            search_ttl_seconds=int(os.getenv("CACHE_TTL_SEARCH_SECONDS", "3600"))
        )

        system_config = SystemConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            coalesce_requests=_env_bool("COALESCE_REQUESTS", "true"),
            max_peers=int(os.getenv("MAX_PEERS", "5"))
        )

        _config_instance = Config(
            api=api_config,
            cache=cache_config,
            system=system_config
        )

        # Missing key is not an error, the fallback vendor covers everything but search
        if not api_config.alpha_vantage_key:
            logging.info("ALPHA_VANTAGE_API_KEY not set - using Yahoo Finance only, symbol search disabled")

    return _config_instance

def reset_config():
    """Reset the configuration singleton (mainly for testing)"""
    global _config_instance
    _config_instance = None
