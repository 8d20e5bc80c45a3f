"""Integration tests for the similar-set collector against a mocked listing."""

from typing import Any

import httpx
import pytest
import respx

from game_market.analysis import SimilarSetCollector, aggregate, iter_pages
from game_market.catalog import CatalogClient, CatalogUnavailable, GameDetail
from game_market.config import CollectorConfig

LIST_URL = "https://api.gamalytic.com/steam-games/list"


def make_rows(start: int, count: int) -> list[dict[str, Any]]:
    return [
        {
            "steamId": start + i,
            "name": f"Game {start + i}",
            "price": 9.99,
            "followers": 1000 + i,
            "reviewScore": 75,
            "tags": ["Roguelike"],
            "genres": ["Action"],
            "releaseDate": 1700000000,
        }
        for i in range(count)
    ]


def paged_listing(pages: dict[int, dict[str, Any]]) -> Any:
    """Serve listing pages by the 'page' query parameter."""

    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        return httpx.Response(200, json=pages.get(page, {"result": [], "pages": 0}))

    return handler


@pytest.fixture
def seed() -> GameDetail:
    return GameDetail.model_validate(
        {
            "steamId": 1145360,
            "name": "Hades",
            "genres": ["Action", "Indie", "RPG"],
            "tags": ["Roguelike", "Action Roguelike", "Hack and Slash"],
        }
    )


def requested_pages(route: respx.Route) -> list[int]:
    return [int(call.request.url.params["page"]) for call in route.calls]


class TestSimilarSetCollector:
    """Pagination and normalization tests."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_stops_at_empty_page(
        self,
        client: CatalogClient,
        collector_config: CollectorConfig,
        seed: GameDetail,
    ) -> None:
        """Two full pages then an empty one: nothing is requested past the empty page."""
        route = respx.get(LIST_URL).mock(
            side_effect=paged_listing(
                {
                    1: {"result": make_rows(0, 100), "pages": 10},
                    2: {"result": make_rows(100, 100), "pages": 10},
                    3: {"result": [], "pages": 10},
                }
            )
        )

        async with client:
            records = await SimilarSetCollector(client, config=collector_config).collect_similar(
                seed
            )

        assert len(records) == 200
        assert requested_pages(route) == [1, 2, 3]

    @respx.mock
    @pytest.mark.asyncio
    async def test_single_reported_page(
        self,
        client: CatalogClient,
        collector_config: CollectorConfig,
        seed: GameDetail,
    ) -> None:
        """A server reporting pages=1 gets exactly one request."""
        route = respx.get(LIST_URL).mock(
            side_effect=paged_listing({1: {"result": make_rows(0, 100), "pages": 1}})
        )

        async with client:
            result = await SimilarSetCollector(client, config=collector_config).collect(seed)

        assert route.call_count == 1
        assert result.total == 100
        assert result.pages_fetched == 1
        assert result.truncated is False

    @respx.mock
    @pytest.mark.asyncio
    async def test_stops_at_reported_page_count(
        self,
        client: CatalogClient,
        collector_config: CollectorConfig,
        seed: GameDetail,
    ) -> None:
        route = respx.get(LIST_URL).mock(
            side_effect=paged_listing(
                {
                    1: {"result": make_rows(0, 100), "pages": 2},
                    2: {"result": make_rows(100, 37), "pages": 2},
                }
            )
        )

        async with client:
            records = await SimilarSetCollector(client, config=collector_config).collect_similar(
                seed
            )

        assert len(records) == 137
        assert requested_pages(route) == [1, 2]
        assert [r.steam_id for r in records[:2]] == ["0", "1"]

    @respx.mock
    @pytest.mark.asyncio
    async def test_listing_without_page_count(
        self,
        client: CatalogClient,
        collector_config: CollectorConfig,
        seed: GameDetail,
    ) -> None:
        """Without paging metadata the collector keeps going until an empty page."""
        route = respx.get(LIST_URL).mock(
            side_effect=[
                httpx.Response(200, json={"result": [{"steamId": 1}]}),
                httpx.Response(200, json={"result": [{"steamId": 2}]}),
                httpx.Response(200, json={"result": []}),
            ]
        )

        async with client:
            result = await SimilarSetCollector(client, config=collector_config).collect(seed)

        assert route.call_count == 3
        assert [r.steam_id for r in result.records] == ["1", "2"]
        assert result.pages_fetched == 2
        assert result.truncated is False

    @respx.mock
    @pytest.mark.asyncio
    async def test_ceiling_without_page_count_truncates(
        self, client: CatalogClient, seed: GameDetail
    ) -> None:
        respx.get(LIST_URL).mock(
            return_value=httpx.Response(200, json={"result": [{"steamId": 1}]})
        )

        async with client:
            result = await SimilarSetCollector(
                client, config=CollectorConfig(max_pages=2)
            ).collect(seed)

        assert result.pages_fetched == 2
        assert result.truncated is True

    @respx.mock
    @pytest.mark.asyncio
    async def test_filters_use_primary_genre_and_top_tag(
        self,
        client: CatalogClient,
        collector_config: CollectorConfig,
        seed: GameDetail,
    ) -> None:
        route = respx.get(LIST_URL).mock(
            side_effect=paged_listing({1: {"result": make_rows(0, 3), "pages": 1}})
        )

        async with client:
            await SimilarSetCollector(client, config=collector_config).collect(seed)

        params = route.calls.last.request.url.params
        assert params["genres"] == "Action"
        assert params["tags"] == "Roguelike"
        assert params["limit"] == "100"
        assert params["price_min"] == "7.99"

    @respx.mock
    @pytest.mark.asyncio
    async def test_page_ceiling_truncates(self, client: CatalogClient, seed: GameDetail) -> None:
        """A server that never stops paginating is cut off at max_pages."""

        def endless(request: httpx.Request) -> httpx.Response:
            page = int(request.url.params["page"])
            return httpx.Response(200, json={"result": make_rows(page * 10, 10), "pages": 9999})

        route = respx.get(LIST_URL).mock(side_effect=endless)

        async with client:
            result = await SimilarSetCollector(
                client, config=CollectorConfig(max_pages=3)
            ).collect(seed)

        assert route.call_count == 3
        assert result.total == 30
        assert result.truncated is True

    @respx.mock
    @pytest.mark.asyncio
    async def test_ceiling_equal_to_reported_pages_is_not_truncated(
        self,
        client: CatalogClient,
        seed: GameDetail,
    ) -> None:
        route = respx.get(LIST_URL).mock(
            side_effect=paged_listing(
                {
                    1: {"result": make_rows(0, 5), "pages": 2},
                    2: {"result": make_rows(5, 5), "pages": 2},
                }
            )
        )

        async with client:
            result = await SimilarSetCollector(
                client, config=CollectorConfig(max_pages=2)
            ).collect(seed)

        assert route.call_count == 2
        assert result.truncated is False

    @respx.mock
    @pytest.mark.asyncio
    async def test_seed_without_classification(
        self,
        client: CatalogClient,
        collector_config: CollectorConfig,
    ) -> None:
        """Empty genre/tag lists degrade to an unconstrained listing."""
        seed = GameDetail.model_validate({"steamId": 5, "name": "Untagged"})
        route = respx.get(LIST_URL).mock(
            side_effect=paged_listing({1: {"result": make_rows(0, 2), "pages": 1}})
        )

        async with client:
            result = await SimilarSetCollector(client, config=collector_config).collect(seed)

        params = route.calls.last.request.url.params
        assert "genres" not in params
        assert "tags" not in params
        assert result.genre is None
        assert result.tag is None
        assert result.total == 2

    @respx.mock
    @pytest.mark.asyncio
    async def test_rows_are_normalized(
        self,
        client: CatalogClient,
        collector_config: CollectorConfig,
        seed: GameDetail,
    ) -> None:
        rows = [
            {"steamId": 1, "name": "Sparse", "price": None, "followers": None},
            {"steamId": 2, "name": "Bad date", "price": 12.5, "releaseDate": "soon"},
        ]
        respx.get(LIST_URL).mock(side_effect=paged_listing({1: {"result": rows, "pages": 1}}))

        async with client:
            records = await SimilarSetCollector(client, config=collector_config).collect_similar(
                seed
            )

        assert records[0].price == 0
        assert records[0].followers == 0
        assert records[0].review_score == 0
        assert records[0].tags == []
        assert records[1].release_date is None
        assert records[1].price == pytest.approx(12.5)

    @respx.mock
    @pytest.mark.asyncio
    async def test_failed_page_aborts_collection(
        self,
        client: CatalogClient,
        collector_config: CollectorConfig,
        seed: GameDetail,
    ) -> None:
        respx.get(LIST_URL).mock(
            side_effect=[
                httpx.Response(200, json={"result": make_rows(0, 100), "pages": 3}),
                httpx.Response(502, text="Bad gateway"),
            ]
        )

        async with client:
            with pytest.raises(CatalogUnavailable) as exc_info:
                await SimilarSetCollector(client, config=collector_config).collect(seed)

        assert exc_info.value.status_code == 502

    @respx.mock
    @pytest.mark.asyncio
    async def test_collected_set_feeds_aggregator(
        self,
        client: CatalogClient,
        collector_config: CollectorConfig,
        seed: GameDetail,
    ) -> None:
        rows = [
            {"steamId": 1, "price": 10, "followers": 100, "reviewScore": 80},
            {"steamId": 2, "price": 20, "followers": 200},
        ]
        respx.get(LIST_URL).mock(side_effect=paged_listing({1: {"result": rows, "pages": 1}}))

        async with client:
            records = await SimilarSetCollector(client, config=collector_config).collect_similar(
                seed
            )

        stats = aggregate(records)
        assert stats.avg_revenue == pytest.approx(1750)
        assert stats.avg_review_score == pytest.approx(40)


class TestIterPages:
    """Tests for the lazy page iterator."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_is_lazy(self, client: CatalogClient) -> None:
        """Pages are only requested as the consumer advances."""
        route = respx.get(LIST_URL).mock(
            side_effect=paged_listing(
                {
                    1: {"result": make_rows(0, 1), "pages": 5},
                    2: {"result": make_rows(1, 1), "pages": 5},
                }
            )
        )

        async with client:
            pages = iter_pages(client, "Action", "Roguelike", max_pages=5)
            page_number, listing = await pages.__anext__()
            assert page_number == 1
            assert route.call_count == 1
            await pages.aclose()

        assert route.call_count == 1
