"""
Similar-set collector.

Walks the catalog listing for a seed game's primary genre and top tag
and normalizes every row into a ``SimilarGameRecord``.
"""

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from game_market.catalog.contracts import GameDetail, ListingPage, SimilarGameRecord
from game_market.catalog.errors import CatalogUnavailable
from game_market.config import CollectorConfig, get_settings
from game_market.logger import get_logger


class ListingSource(Protocol):
    """Anything that can serve filtered listing pages."""

    async def list_page(
        self,
        genre: str | None,
        tag: str | None,
        page: int,
        *,
        limit: int = ...,
        price_min: float = ...,
    ) -> ListingPage: ...


async def iter_pages(
    source: ListingSource,
    genre: str | None,
    tag: str | None,
    *,
    page_size: int = 100,
    price_min: float = 7.99,
    max_pages: int = 50,
) -> AsyncIterator[tuple[int, ListingPage]]:
    """
    Lazily yield non-empty listing pages, one request at a time.

    Stops at the first empty page, once the server-reported page count
    is reached, or after ``max_pages`` pages, whichever comes first. A
    listing without a page count is followed until an empty page or
    the ceiling.

    Yields:
        tuple[int, ListingPage]: 1-based page number and its listing
    """
    for page_number in range(1, max_pages + 1):
        listing = await source.list_page(
            genre, tag, page_number, limit=page_size, price_min=price_min
        )
        if listing.is_empty:
            return

        yield page_number, listing

        if listing.pages is not None and listing.pages <= page_number:
            return


@dataclass
class CollectionResult:
    """Outcome of one similar-set collection."""

    genre: str | None
    tag: str | None
    records: list[SimilarGameRecord] = field(default_factory=list)
    pages_fetched: int = 0
    truncated: bool = False

    @property
    def total(self) -> int:
        return len(self.records)


class SimilarSetCollector:
    """
    Collects every listing row sharing the seed's primary genre and top tag.

    Pages are requested strictly in sequence because each stop decision
    depends on the previous page's metadata.
    """

    def __init__(
        self,
        source: ListingSource,
        *,
        config: CollectorConfig | None = None,
    ) -> None:
        self._source = source
        self._config = config or get_settings().collector
        self._logger = get_logger(__name__, component="collector")

    def _normalize(self, row: dict) -> SimilarGameRecord:
        try:
            return SimilarGameRecord.model_validate(row)
        except PydanticValidationError as e:
            raise CatalogUnavailable(
                f"Listing row validation failed: {e}",
                source="collector",
                original_error=e,
            ) from e

    async def collect(self, seed: GameDetail) -> CollectionResult:
        """
        Collect similar titles for a seed game.

        Args:
            seed: Game whose first genre and first tag drive the filter

        Returns:
            CollectionResult: Records in upstream order plus paging metadata

        Raises:
            CatalogUnavailable: If any page request fails
        """
        genre, tag = seed.primary_genre, seed.top_tag
        result = CollectionResult(genre=genre, tag=tag)

        if genre is None or tag is None:
            self._logger.warning(
                "Seed has no genre or tag, listing is unconstrained",
                steam_id=seed.steam_id,
                genre=genre,
                tag=tag,
            )

        self._logger.info(
            "Collecting similar games",
            steam_id=seed.steam_id,
            genre=genre,
            tag=tag,
            max_pages=self._config.max_pages,
        )

        last: ListingPage | None = None
        async for page_number, listing in iter_pages(
            self._source,
            genre,
            tag,
            page_size=self._config.page_size,
            price_min=self._config.price_min,
            max_pages=self._config.max_pages,
        ):
            result.records.extend(self._normalize(row) for row in listing.result)
            result.pages_fetched = page_number
            last = listing

        if (
            last is not None
            and result.pages_fetched == self._config.max_pages
            and (last.pages is None or last.pages > self._config.max_pages)
        ):
            result.truncated = True
            self._logger.warning(
                "Page ceiling reached, similar set truncated",
                max_pages=self._config.max_pages,
                reported_pages=last.pages,
            )

        self._logger.info(
            "Similar games collected",
            total=result.total,
            pages=result.pages_fetched,
            truncated=result.truncated,
        )
        return result

    async def collect_similar(self, seed: GameDetail) -> list[SimilarGameRecord]:
        """Collect similar titles and return only the records."""
        result = await self.collect(seed)
        return result.records
