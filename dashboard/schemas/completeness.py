"""
dashboard/schemas/completeness.py

Response schemas for listing completeness and incomplete-calendar endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

_BACKEND_MODEL_CONFIG = ConfigDict(
    extra="ignore",
    frozen=True,
    populate_by_name=True,
    coerce_numbers_to_str=True,
)


def _clamp_percentage(value: Any) -> float:
    if value is None:
        return 0.0
    number = float(value)
    if number != number:
        return 0.0
    return min(100.0, max(0.0, number))


def _non_negative_count(value: Any) -> int:
    if value is None:
        return 0
    return max(0, int(value))


class ListingRef(BaseModel):
    """
    Minimal listing identity embedded in completeness payloads.
    """

    model_config = _BACKEND_MODEL_CONFIG

    id: str
    title: str = ""
    location: str | None = None


class CompletenessPercentages(BaseModel):
    """
    Share of expected data points present, per category, in [0, 100].
    """

    model_config = _BACKEND_MODEL_CONFIG

    calendar: float = 0.0
    market: float = 0.0
    ai: float = 0.0

    @field_validator("calendar", "market", "ai", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> float:
        return _clamp_percentage(value)


class MissingDataCounts(BaseModel):
    """
    Number of missing data points per category.
    """

    model_config = _BACKEND_MODEL_CONFIG

    prices: int = 0
    market: int = 0
    ai: int = 0

    @field_validator("prices", "market", "ai", mode="before")
    @classmethod
    def _non_negative(cls, value: Any) -> int:
        return _non_negative_count(value)

    @property
    def total(self) -> int:
        return self.prices + self.market + self.ai


class ListingCompleteness(BaseModel):
    """
    Completeness snapshot for one listing as last validated by the backend.
    """

    model_config = _BACKEND_MODEL_CONFIG

    listing: ListingRef | None = None
    completeness: CompletenessPercentages = Field(default_factory=CompletenessPercentages)
    missing_data: MissingDataCounts = Field(default_factory=MissingDataCounts, alias="missingData")
    last_validated: datetime | None = Field(default=None, alias="lastValidated")

    @field_validator("completeness", "missing_data", mode="before")
    @classmethod
    def _missing_section_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def is_complete(self) -> bool:
        return self.missing_data.total == 0 and all(
            value >= 100.0
            for value in (self.completeness.calendar, self.completeness.market, self.completeness.ai)
        )


class IssueListResponse(BaseModel):
    """
    Envelope returned by the listings-with-issues endpoint.
    """

    model_config = _BACKEND_MODEL_CONFIG

    listings: list[ListingCompleteness] = Field(default_factory=list)

    @field_validator("listings", mode="before")
    @classmethod
    def _missing_list_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class IncompleteListing(BaseModel):
    """
    Listing that has competitor data but no calendar or pricing data.
    """

    model_config = _BACKEND_MODEL_CONFIG

    id: str
    title: str = ""
    airbnb_url: str | None = Field(default=None, validation_alias=AliasChoices("airbnb_url", "airbnbUrl"))
    analysis_count: int = Field(
        default=0,
        validation_alias=AliasChoices("analysis_count", "analysisCount"),
    )

    @field_validator("analysis_count", mode="before")
    @classmethod
    def _non_negative(cls, value: Any) -> int:
        return _non_negative_count(value)


class IncompleteListResponse(BaseModel):
    """
    Envelope returned by the incomplete-listings endpoint.
    """

    model_config = _BACKEND_MODEL_CONFIG

    listings: list[IncompleteListing] = Field(default_factory=list)

    @field_validator("listings", mode="before")
    @classmethod
    def _missing_list_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value
