"""
Command-line interface for the game market research core.

Provides commands to probe the catalog API and run an analysis manually.
"""

import asyncio
import json
import sys
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from game_market.config import get_settings
from game_market.logger import get_logger, setup_logging

logger = get_logger(__name__, component="cli")


class CLIOutput(BaseModel):
    """Structured output for CLI commands."""

    success: bool
    command: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    data: dict[str, Any] | list[Any] | None = None
    error: str | None = None


def print_json(output: CLIOutput) -> None:
    """Print output as formatted JSON."""
    print(json.dumps(output.model_dump(mode="json"), indent=2, default=str))


async def cmd_search(query: str) -> None:
    """Search titles through the research session."""
    from game_market.catalog import CatalogClient
    from game_market.session import ResearchSession

    async with CatalogClient() as client:
        outcome = await ResearchSession(client).search(query)

    if not outcome.dispatched:
        print_json(
            CLIOutput(
                success=False,
                command="search",
                error=f"Query must be at least {get_settings().search.min_query_length} characters",
            )
        )
        return

    print_json(
        CLIOutput(
            success=True,
            command="search",
            data=[r.model_dump(mode="json") for r in outcome.results],
        )
    )


async def cmd_detail(game_id: str) -> None:
    """Fetch full details for one title."""
    from game_market.catalog import CatalogClient

    async with CatalogClient() as client:
        game = await client.get_detail(game_id)

    print_json(CLIOutput(success=True, command="detail", data=game.model_dump(mode="json")))


async def cmd_similar(game_id: str) -> None:
    """Collect the similar set for one title without aggregating."""
    from game_market.analysis import SimilarSetCollector
    from game_market.catalog import CatalogClient

    async with CatalogClient() as client:
        game = await client.get_detail(game_id)
        result = await SimilarSetCollector(client).collect(game)

    print_json(
        CLIOutput(
            success=True,
            command="similar",
            data={
                "genre": result.genre,
                "tag": result.tag,
                "pages_fetched": result.pages_fetched,
                "truncated": result.truncated,
                "total": result.total,
                "games": [r.model_dump(mode="json") for r in result.records],
            },
        )
    )


async def cmd_analyze(game_id: str, wishlists: int | None = None) -> None:
    """Run the full analysis for one title."""
    from game_market.analysis import (
        estimate_revenue_from_similar,
        price_revenue_curve,
        revenue_distribution,
    )
    from game_market.catalog import CatalogClient
    from game_market.session import ResearchSession

    async with CatalogClient() as client:
        report = await ResearchSession(client).analyze(game_id)

    stats = report.stats
    data: dict[str, Any] = {
        "game": {
            "steam_id": report.game.steam_id,
            "name": report.game.name,
            "primary_genre": report.game.primary_genre,
            "top_tag": report.game.top_tag,
            "release_date": report.game.release_date,
        },
        "stats": stats.model_dump(mode="json", exclude={"games_data"}),
        "truncated": report.truncated,
        "price_revenue_curve": dict(price_revenue_curve(stats.avg_revenue)),
        "revenue_distribution": revenue_distribution(stats.games_data),
    }
    if wishlists is not None:
        data["estimated_revenue"] = estimate_revenue_from_similar(stats, wishlists)

    print_json(CLIOutput(success=True, command="analyze", data=data))


async def cmd_test_config() -> None:
    """Test configuration loading."""
    settings = get_settings()

    output = CLIOutput(
        success=True,
        command="test-config",
        data={
            "environment": settings.environment,
            "catalog_base_url": settings.catalog.base_url,
            "catalog_timeout_seconds": settings.catalog.timeout_seconds,
            "catalog_requests_per_minute": settings.catalog.requests_per_minute,
            "collector_max_pages": settings.collector.max_pages,
            "search_min_query_length": settings.search.min_query_length,
            "api_key_configured": bool(settings.catalog.api_key.get_secret_value()),
        },
    )
    print_json(output)


def print_usage() -> None:
    """Print CLI usage information."""
    usage = """
Game Market Research CLI
========================

Usage: python -m game_market.cli <command> [arguments]

Commands:
  test-config                       Test configuration loading
  search <query>                    Search titles (unreleased included)
  detail <game_id>                  Fetch full details for a title
  similar <game_id>                 Collect titles sharing genre and top tag
  analyze <game_id> [wishlists]     Aggregate the similar set for a title

Examples:
  python -m game_market.cli search "hollow knight"
  python -m game_market.cli analyze 367520 7500
"""
    print(usage)


def main() -> None:
    """Main CLI entry point."""
    setup_logging()

    if len(sys.argv) < 2:
        print_usage()
        sys.exit(1)

    command = sys.argv[1]

    try:
        if command == "test-config":
            asyncio.run(cmd_test_config())

        elif command == "search":
            if len(sys.argv) < 3:
                print("Error: query required")
                sys.exit(1)
            asyncio.run(cmd_search(" ".join(sys.argv[2:])))

        elif command in ("detail", "similar", "analyze"):
            if len(sys.argv) < 3:
                print("Error: game_id required")
                sys.exit(1)
            game_id = sys.argv[2]
            if command == "detail":
                asyncio.run(cmd_detail(game_id))
            elif command == "similar":
                asyncio.run(cmd_similar(game_id))
            else:
                wishlists = int(sys.argv[3]) if len(sys.argv) > 3 else None
                asyncio.run(cmd_analyze(game_id, wishlists))

        elif command in ("help", "--help", "-h"):
            print_usage()

        else:
            print(f"Unknown command: {command}")
            print_usage()
            sys.exit(1)

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.exception("CLI error", error=str(e))
        output = CLIOutput(
            success=False,
            command=command,
            error=str(e),
        )
        print_json(output)
        sys.exit(1)


if __name__ == "__main__":
    main()
