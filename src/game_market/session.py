"""
Research session: the entry point for the presentation layer.

Composes search, detail fetch, similar-set collection and aggregation,
and stamps every dispatched call with a generation token so a caller
can discard responses that a newer call has superseded.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from game_market.analysis.aggregator import AggregateStats, aggregate
from game_market.analysis.collector import ListingSource, SimilarSetCollector
from game_market.catalog.contracts import GameDetail, SearchSummary, SimilarGameRecord
from game_market.catalog.errors import CatalogUnavailable
from game_market.config import get_settings
from game_market.logger import get_logger


class CatalogSource(ListingSource, Protocol):
    """Catalog operations the session needs."""

    async def search(self, query: str) -> list[SearchSummary]: ...

    async def get_detail(self, game_id: str) -> GameDetail: ...


@dataclass
class SearchOutcome:
    """Result of a search request."""

    query: str
    results: list[SearchSummary] = field(default_factory=list)
    dispatched: bool = True
    generation: int | None = None


@dataclass
class MarketReport:
    """Everything the dashboard renders for one selected game."""

    game: GameDetail
    similar_games: list[SimilarGameRecord]
    stats: AggregateStats
    generation: int
    truncated: bool = False
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ResearchSession:
    """
    Stateless-per-call facade over the catalog core.

    The only state kept is two generation counters; every call still
    performs a fresh fetch.
    """

    def __init__(
        self,
        client: CatalogSource,
        *,
        collector: SimilarSetCollector | None = None,
        min_query_length: int | None = None,
    ) -> None:
        if min_query_length is None:
            min_query_length = get_settings().search.min_query_length

        self._client = client
        self._collector = collector or SimilarSetCollector(client)
        self._min_query_length = min_query_length
        self._search_generation = 0
        self._analysis_generation = 0
        self._logger = get_logger(__name__, component="session")

    @property
    def min_query_length(self) -> int:
        return self._min_query_length

    def is_current_search(self, generation: int | None) -> bool:
        """True if no newer search has been dispatched since ``generation``."""
        return generation is not None and generation == self._search_generation

    def is_current_analysis(self, generation: int) -> bool:
        """True if no newer analysis has been started since ``generation``."""
        return generation == self._analysis_generation

    async def search(self, query: str) -> SearchOutcome:
        """
        Search titles unless the query is too short.

        Short queries return an undispatched, empty outcome without
        touching the network.

        Raises:
            CatalogUnavailable: If the catalog request fails
        """
        query = query.strip()
        if len(query) < self._min_query_length:
            self._logger.debug("Query below minimum length", query=query)
            return SearchOutcome(query=query, dispatched=False)

        self._search_generation += 1
        generation = self._search_generation

        try:
            results = await self._client.search(query)
        except CatalogUnavailable as e:
            self._logger.error(
                "Failed to search games",
                query=query,
                status_code=e.status_code,
                error=str(e),
            )
            raise

        if not self.is_current_search(generation):
            self._logger.debug("Search superseded", query=query, generation=generation)

        return SearchOutcome(query=query, results=results, generation=generation)

    async def analyze(self, game_id: str) -> MarketReport:
        """
        Build the market report for a selected game.

        Raises:
            CatalogUnavailable: If the detail fetch or any listing page fails
        """
        self._analysis_generation += 1
        generation = self._analysis_generation

        try:
            game = await self._client.get_detail(game_id)
            collection = await self._collector.collect(game)
        except CatalogUnavailable as e:
            self._logger.error(
                "Failed to fetch game data",
                game_id=game_id,
                status_code=e.status_code,
                error=str(e),
            )
            raise

        stats = aggregate(collection.records)
        if stats.is_empty:
            self._logger.warning("No similar games found", game_id=game_id)

        return MarketReport(
            game=game,
            similar_games=collection.records,
            stats=stats,
            generation=generation,
            truncated=collection.truncated,
        )
