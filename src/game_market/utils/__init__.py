"""
Shared utilities.
"""

from game_market.utils.rate_limiter import RateLimiter

__all__ = [
    "RateLimiter",
]
