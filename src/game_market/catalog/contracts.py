"""
Data contracts for catalog API responses.

These Pydantic models define the expected structure of data
from the Gamalytic API. Upstream uses camelCase keys; the models
accept them by alias and expose snake_case attributes.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from game_market.catalog.errors import MalformedField
from game_market.logger import get_logger

logger = get_logger(__name__, component="contracts")


def parse_release_timestamp(value: Any) -> datetime | None:
    """
    Convert an epoch-seconds release timestamp into a UTC datetime.

    Args:
        value: Raw upstream value (int, float or numeric string)

    Returns:
        datetime | None: Release date, or None when the value is absent/zero

    Raises:
        MalformedField: If the value is present but not a usable timestamp
    """
    if value is None or value == "" or value == 0:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, bool):
        raise MalformedField("releaseDate", value)

    try:
        seconds = float(value)
        if seconds == 0:
            return None
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError) as e:
        raise MalformedField("releaseDate", value) from e


def _whole_number(value: Any) -> Any:
    """Upstream estimates arrive as floats; counts are stored as ints."""
    if value is None:
        return 0
    if isinstance(value, float):
        return int(round(value))
    return value


def _release_date_or_none(value: Any) -> datetime | None:
    try:
        return parse_release_timestamp(value)
    except MalformedField as e:
        logger.warning("Ignoring malformed release date", value=repr(e.value))
        return None


class CatalogModel(BaseModel):
    """Base for catalog value objects."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    @field_validator("steam_id", mode="before", check_fields=False)
    @classmethod
    def coerce_steam_id(cls, v: Any) -> Any:
        """Upstream ids are numeric; keep them opaque strings."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(int(v))
        return v


class SearchSummary(CatalogModel):
    """One row of a title search."""

    steam_id: str = Field(..., alias="steamId", description="Steam application ID")
    name: str = Field(default="")
    price: float = Field(default=0.0, description="Price in currency units")
    followers: int = Field(default=0, ge=0)
    review_score: float | None = Field(
        default=None, alias="reviewScore", description="Review score 0-100"
    )
    unreleased: bool = Field(default=False)

    @field_validator("name", mode="before")
    @classmethod
    def null_to_empty_string(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("price", mode="before")
    @classmethod
    def null_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("followers", mode="before")
    @classmethod
    def coerce_count(cls, v: Any) -> Any:
        return _whole_number(v)

    @field_validator("unreleased", mode="before")
    @classmethod
    def null_to_false(cls, v: Any) -> Any:
        return False if v is None else v


class GameDetail(CatalogModel):
    """
    Full game data from the catalog.

    Represents the response of the /game/{id} endpoint.
    """

    # Identifiers
    steam_id: str = Field(..., alias="steamId", description="Steam application ID")
    name: str = Field(default="")
    description: str = Field(default="")

    # Commercials
    price: float = Field(default=0.0)
    copies_sold: int = Field(default=0, alias="copiesSold")
    revenue: float = Field(default=0.0)

    # Reception
    reviews: int = Field(default=0, description="Aggregate review count")
    reviews_steam: int = Field(default=0, alias="reviewsSteam", description="Steam review count")
    review_score: float | None = Field(default=None, alias="reviewScore")
    followers: int = Field(default=0)
    avg_playtime: float = Field(default=0.0, alias="avgPlaytime", description="Hours")

    # Classification, ordered by upstream relevance
    tags: list[str] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)

    # Release (None means unreleased / TBA)
    release_date: datetime | None = Field(default=None, alias="releaseDate")

    @field_validator(
        "price", "revenue", "avg_playtime", mode="before"
    )
    @classmethod
    def null_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("copies_sold", "reviews", "reviews_steam", "followers", mode="before")
    @classmethod
    def coerce_count(cls, v: Any) -> Any:
        return _whole_number(v)

    @field_validator("description", "name", mode="before")
    @classmethod
    def null_to_empty_string(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("tags", "genres", mode="before")
    @classmethod
    def null_to_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("release_date", mode="before")
    @classmethod
    def parse_release_date(cls, v: Any) -> datetime | None:
        return _release_date_or_none(v)

    @property
    def primary_genre(self) -> str | None:
        """First genre, or None when the title has no genres."""
        return self.genres[0] if self.genres else None

    @property
    def top_tag(self) -> str | None:
        """Most relevant tag, or None when the title has no tags."""
        return self.tags[0] if self.tags else None

    @property
    def is_released(self) -> bool:
        return self.release_date is not None


class SimilarGameRecord(CatalogModel):
    """
    Reduced projection of a listing row used by the aggregator.

    Missing or null numeric fields become 0 and list fields become
    empty; only ``release_date`` may be None.
    """

    steam_id: str = Field(..., alias="steamId")
    name: str = Field(default="")
    price: float = Field(default=0.0)
    followers: int = Field(default=0)
    review_score: float = Field(default=0.0, alias="reviewScore")
    tags: list[str] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    release_date: datetime | None = Field(default=None, alias="releaseDate")
    copies_sold: int = Field(default=0, alias="copiesSold")
    revenue: float = Field(default=0.0)
    avg_playtime: float = Field(default=0.0, alias="avgPlaytime")

    @field_validator(
        "price", "review_score", "revenue", "avg_playtime", mode="before"
    )
    @classmethod
    def null_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("followers", "copies_sold", mode="before")
    @classmethod
    def coerce_count(cls, v: Any) -> Any:
        return _whole_number(v)

    @field_validator("name", mode="before")
    @classmethod
    def null_to_empty_string(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("tags", "genres", mode="before")
    @classmethod
    def null_to_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("release_date", mode="before")
    @classmethod
    def parse_release_date(cls, v: Any) -> datetime | None:
        return _release_date_or_none(v)


class ListingPage(BaseModel):
    """
    Envelope of the /steam-games/list endpoint.

    ``pages`` is the total page count reported by the server, or None
    when the response carries no paging metadata.
    """

    result: list[dict[str, Any]] = Field(default_factory=list)
    pages: int | None = Field(default=None, ge=0)

    @field_validator("result", mode="before")
    @classmethod
    def null_to_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def is_empty(self) -> bool:
        return not self.result
