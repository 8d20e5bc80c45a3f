"""
Similar-set collection and aggregation.
"""

from game_market.analysis.aggregator import (
    AggregateStats,
    GenreRanking,
    RevenuePoint,
    aggregate,
    estimate_revenue_from_similar,
    estimate_revenue_heuristic,
    price_revenue_curve,
    revenue_distribution,
)
from game_market.analysis.collector import (
    CollectionResult,
    ListingSource,
    SimilarSetCollector,
    iter_pages,
)

__all__ = [
    "AggregateStats",
    "CollectionResult",
    "GenreRanking",
    "ListingSource",
    "RevenuePoint",
    "SimilarSetCollector",
    "aggregate",
    "estimate_revenue_from_similar",
    "estimate_revenue_heuristic",
    "iter_pages",
    "price_revenue_curve",
    "revenue_distribution",
]
