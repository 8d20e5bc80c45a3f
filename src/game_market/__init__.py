"""
Game Market Research.

Catalog client, similar-set collector and aggregator behind a
market-research dashboard for game developers.
"""

from game_market.config import Settings, get_settings
from game_market.logger import get_logger, setup_logging

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
