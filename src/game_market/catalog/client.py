"""
Catalog API client.

Searches titles, fetches full game details and exposes single
listing pages for the similar-set collector.
"""

from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from game_market.catalog.base import BaseAPIClient
from game_market.catalog.contracts import GameDetail, ListingPage, SearchSummary
from game_market.catalog.errors import CatalogUnavailable

LIST_ENDPOINT = "/steam-games/list"
GAME_ENDPOINT = "/game/{game_id}"


class CatalogClient(BaseAPIClient):
    """
    Client for the Gamalytic catalog API.

    Example:
        >>> async with CatalogClient() as client:
        ...     results = await client.search("hades")
        ...     game = await client.get_detail(results[0].steam_id)
    """

    source_name = "gamalytic_api"

    def _validate(self, model: type[BaseModel], raw: Any, endpoint: str) -> Any:
        try:
            return model.model_validate(raw)
        except PydanticValidationError as e:
            self._logger.error("Response validation failed", endpoint=endpoint, error=str(e))
            raise CatalogUnavailable(
                f"Response validation failed: {e}",
                source=self.source_name,
                endpoint=endpoint,
                original_error=e,
            ) from e

    async def search(self, query: str) -> list[SearchSummary]:
        """
        Search titles, including unreleased ones.

        Args:
            query: Title filter

        Returns:
            list[SearchSummary]: Matching titles in upstream order

        Raises:
            CatalogUnavailable: On any request or payload failure
        """
        self._logger.info("Searching games", query=query)

        raw = await self.get_json(LIST_ENDPOINT, {"title": query, "unreleased": "true"})
        page: ListingPage = self._validate(ListingPage, raw, LIST_ENDPOINT)
        results = [self._validate(SearchSummary, row, LIST_ENDPOINT) for row in page.result]

        self._logger.info("Search complete", query=query, results=len(results))
        return results

    async def get_detail(self, game_id: str) -> GameDetail:
        """
        Fetch one title by id.

        A malformed release timestamp does not fail the call; the
        returned detail simply has no release date.

        Raises:
            CatalogUnavailable: On any request or payload failure
        """
        endpoint = GAME_ENDPOINT.format(game_id=game_id)
        self._logger.info("Fetching game details", game_id=game_id)

        raw = await self.get_json(endpoint)
        game: GameDetail = self._validate(GameDetail, raw, endpoint)

        self._logger.info(
            "Game details fetched",
            game_id=game_id,
            game_name=game.name,
            released=game.is_released,
            genres=len(game.genres),
            tags=len(game.tags),
        )
        return game

    async def list_page(
        self,
        genre: str | None,
        tag: str | None,
        page: int,
        *,
        limit: int = 100,
        price_min: float = 7.99,
    ) -> ListingPage:
        """
        Fetch one page of the listing filtered by genre and tag.

        A None genre or tag is left out of the query, which widens the
        listing to every title.

        Args:
            genre: Genre filter
            tag: Tag filter
            page: 1-based page number
            limit: Page size
            price_min: Minimum price filter

        Returns:
            ListingPage: Raw rows plus the server's total page count
        """
        params = {
            "genres": genre,
            "tags": tag,
            "limit": limit,
            "page": page,
            "price_min": price_min,
        }
        raw = await self.get_json(LIST_ENDPOINT, params)
        listing: ListingPage = self._validate(ListingPage, raw, LIST_ENDPOINT)

        self._logger.debug(
            "Fetched listing page",
            page=page,
            results=len(listing.result),
            total_pages=listing.pages,
        )
        return listing
