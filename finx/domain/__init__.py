"""
Domain logic for FinX: sector peers, metric explanations, peer comparison
"""

from .sectors import (
    SECTOR_PEER_GROUPS,
    list_available_sectors,
    resolve_sector,
    get_peers_by_sector,
    find_sector_from_symbol
)
from .fundamentals import (
    MetricExplanation,
    METRIC_EXPLANATIONS,
    normalize_metric_name,
    get_metric_explanation,
    list_available_metrics,
    format_metric_explanation
)
from .comparison import (
    PeerData,
    PeerFailure,
    PeerResult,
    ComparisonMetric,
    COMPARISON_METRICS,
    DEFAULT_COMPARISON_METRICS,
    resolve_comparison_metrics,
    format_peer_comparison
)

__all__ = [
    "SECTOR_PEER_GROUPS",
    "list_available_sectors",
    "resolve_sector",
    "get_peers_by_sector",
    "find_sector_from_symbol",
    "MetricExplanation",
    "METRIC_EXPLANATIONS",
    "normalize_metric_name",
    "get_metric_explanation",
    "list_available_metrics",
    "format_metric_explanation",
    "PeerData",
    "PeerFailure",
    "PeerResult",
    "ComparisonMetric",
    "COMPARISON_METRICS",
    "DEFAULT_COMPARISON_METRICS",
    "resolve_comparison_metrics",
    "format_peer_comparison"
]
