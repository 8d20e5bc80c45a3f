"""
Descriptive statistics over a similar-game set.

Means are taken over the full set. A missing review score counts as 0,
so unscored titles pull the average down instead of being excluded.
"""

from collections.abc import Iterable, Sequence
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from game_market.catalog.contracts import SimilarGameRecord
from game_market.logger import get_logger

logger = get_logger(__name__, component="aggregator")

# Assumed share of wishlists that convert into sales
WISHLIST_CONVERSION = 0.7

PRICE_POINTS: tuple[tuple[str, float], ...] = (
    ("$9.99", 0.5),
    ("$14.99", 0.75),
    ("$19.99", 1.0),
    ("$24.99", 1.25),
    ("$29.99", 1.5),
    ("$39.99", 1.75),
    ("$49.99", 2.0),
    ("$59.99", 2.25),
)

# (label, inclusive lower bound); the last bucket is open-ended
REVENUE_BUCKETS: tuple[tuple[str, float], ...] = (
    ("$0-$10k", 0.0),
    ("$10k-$50k", 10_000.0),
    ("$50k-$100k", 50_000.0),
    ("$100k-$500k", 100_000.0),
    ("$500k-$1M", 500_000.0),
    ("$1M+", 1_000_000.0),
)


class GenreRanking(str, Enum):
    """Genre ranking has no defined algorithm yet."""

    UNRANKED = "unranked"


class RevenuePoint(BaseModel):
    """Per-game point for revenue charts."""

    model_config = ConfigDict(frozen=True)

    revenue: float
    wishlists: int


class AggregateStats(BaseModel):
    """Summary of a similar-game set."""

    model_config = ConfigDict(frozen=True)

    total_games: int = Field(default=0, ge=0)
    avg_revenue: float = 0.0
    avg_price: float = 0.0
    avg_wishlists: float = 0.0
    avg_review_score: float = 0.0
    genre_ranking: GenreRanking = GenreRanking.UNRANKED
    games_data: list[RevenuePoint] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "AggregateStats":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.total_games == 0


def estimate_revenue_heuristic(price: float, wishlists: float) -> float:
    """Revenue estimate: price x wishlists x conversion rate."""
    return price * wishlists * WISHLIST_CONVERSION


def aggregate(records: Sequence[SimilarGameRecord]) -> AggregateStats:
    """
    Reduce similar games into summary statistics.

    Args:
        records: Normalized similar-game records

    Returns:
        AggregateStats: Means plus per-game revenue points in input order.
            Empty input yields the all-zero result.
    """
    if not records:
        logger.warning("No games to analyze")
        return AggregateStats.empty()

    total = len(records)
    points = [
        RevenuePoint(
            revenue=estimate_revenue_heuristic(r.price, r.followers),
            wishlists=r.followers,
        )
        for r in records
    ]

    stats = AggregateStats(
        total_games=total,
        avg_revenue=sum(p.revenue for p in points) / total,
        avg_price=sum(r.price for r in records) / total,
        avg_wishlists=sum(r.followers for r in records) / total,
        avg_review_score=sum(r.review_score or 0 for r in records) / total,
        genre_ranking=GenreRanking.UNRANKED,
        games_data=points,
    )

    logger.info(
        "Analysis complete",
        total_games=total,
        avg_revenue=round(stats.avg_revenue, 2),
        avg_price=round(stats.avg_price, 2),
    )
    return stats


def estimate_revenue_from_similar(
    points: AggregateStats | Iterable[RevenuePoint],
    wishlists: float,
) -> float:
    """
    Scale a wishlist count by the similar set's revenue per wishlist.

    Returns 0.0 when there is nothing to learn from (no points, or no
    wishlists across the set).
    """
    if isinstance(points, AggregateStats):
        points = points.games_data
    points = list(points)

    total_wishlists = sum(p.wishlists for p in points)
    if not points or total_wishlists == 0:
        logger.warning("No similar games data available for revenue estimation")
        return 0.0

    revenue_per_wishlist = sum(p.revenue for p in points) / total_wishlists
    return revenue_per_wishlist * wishlists


def price_revenue_curve(avg_revenue: float) -> list[tuple[str, float]]:
    """Projected revenue at common price points relative to the set average."""
    return [(label, avg_revenue * factor) for label, factor in PRICE_POINTS]


def revenue_distribution(points: Sequence[RevenuePoint]) -> dict[str, float]:
    """
    Percentage of games per revenue bucket.

    Returns:
        dict[str, float]: Bucket label -> percentage (0-100), in bucket order
    """
    counts = dict.fromkeys((label for label, _ in REVENUE_BUCKETS), 0)
    for point in points:
        label = REVENUE_BUCKETS[0][0]
        for bucket_label, lower in REVENUE_BUCKETS:
            if point.revenue >= lower:
                label = bucket_label
        counts[label] += 1

    total = len(points)
    if total == 0:
        return {label: 0.0 for label in counts}
    return {label: count / total * 100 for label, count in counts.items()}
