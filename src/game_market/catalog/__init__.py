"""
Remote catalog access.

Client, data contracts and error taxonomy for the Gamalytic
game-metadata API.
"""

from game_market.catalog.base import BaseAPIClient
from game_market.catalog.client import CatalogClient
from game_market.catalog.contracts import (
    GameDetail,
    ListingPage,
    SearchSummary,
    SimilarGameRecord,
    parse_release_timestamp,
)
from game_market.catalog.errors import CatalogError, CatalogUnavailable, MalformedField

__all__ = [
    # Clients
    "BaseAPIClient",
    "CatalogClient",
    # Contracts
    "GameDetail",
    "ListingPage",
    "SearchSummary",
    "SimilarGameRecord",
    "parse_release_timestamp",
    # Errors
    "CatalogError",
    "CatalogUnavailable",
    "MalformedField",
]
