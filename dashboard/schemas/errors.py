"""
dashboard/schemas/errors.py

Response schemas for the error-tracking endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dashboard.domain.error_lifecycle import (
    ErrorKind,
    ErrorStatus,
    effective_status,
    is_terminal,
    parse_kind,
    parse_status,
)

_BACKEND_MODEL_CONFIG = ConfigDict(
    extra="ignore",
    frozen=True,
    populate_by_name=True,
    coerce_numbers_to_str=True,
    str_strip_whitespace=True,
)


class TrackedError(BaseModel):
    """
    One failed fetch or validation attempt recorded by the backend.

    Kind and status are kept as the raw backend strings so that values the
    dashboard does not know about still load and render.
    """

    model_config = _BACKEND_MODEL_CONFIG

    id: str
    listing_id: str = Field(alias="listingId")
    listing_title: str = Field(default="", alias="listingTitle")
    error_type: str = Field(default="", alias="errorType")
    message: str = ""
    date: datetime | None = None
    status: str = ErrorStatus.PENDING.value
    retry_count: int = Field(default=0, ge=0, alias="retryCount")
    max_retries: int | None = Field(default=None, ge=0, alias="maxRetries")
    next_retry_at: datetime | None = Field(default=None, alias="nextRetryAt")

    @field_validator("listing_title", "error_type", "message", "status", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("retry_count", mode="before")
    @classmethod
    def _missing_retry_count_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @property
    def kind(self) -> ErrorKind | None:
        return parse_kind(self.error_type)

    @property
    def known_status(self) -> ErrorStatus | None:
        return parse_status(self.status)

    @property
    def display_status(self) -> ErrorStatus | None:
        """
        Status after applying the retry budget invariant.
        """

        return effective_status(self.known_status, self.retry_count, self.max_retries)

    @property
    def is_terminal(self) -> bool:
        status = self.known_status
        return status is not None and is_terminal(status)


class ErrorSummary(BaseModel):
    """
    Aggregate error counts by status and by kind.
    """

    model_config = _BACKEND_MODEL_CONFIG

    pending: int = Field(default=0, ge=0)
    retrying: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    resolved: int = Field(default=0, ge=0)
    ignored: int = Field(default=0, ge=0)
    by_type: dict[str, int] = Field(default_factory=dict, alias="byType")

    @field_validator("pending", "retrying", "failed", "resolved", "ignored", mode="before")
    @classmethod
    def _missing_count_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("by_type", mode="before")
    @classmethod
    def _missing_breakdown_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class ErrorListResponse(BaseModel):
    """
    Envelope returned by the pending and per-listing error endpoints.
    """

    model_config = _BACKEND_MODEL_CONFIG

    errors: list[TrackedError] = Field(default_factory=list)

    @field_validator("errors", mode="before")
    @classmethod
    def _missing_list_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class CommandAck(BaseModel):
    """
    Acknowledgment body of a mutating backend call.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    success: bool = True
    message: str | None = None
