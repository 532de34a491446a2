"""
dashboard/client/pricing_client.py

Verb + path mapping for every pricing backend operation the dashboard uses.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from dashboard.client.auth import AuthSession
from dashboard.client.base import BaseAPIClient
from dashboard.client.errors import ApiResponseError
from dashboard.config import BackendSettings, get_backend_settings
from dashboard.schemas.completeness import (
    IncompleteListing,
    IncompleteListResponse,
    IssueListResponse,
    ListingCompleteness,
)
from dashboard.schemas.errors import CommandAck, ErrorListResponse, ErrorSummary, TrackedError

logger = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def _parse(model: type[_ModelT], payload: Any, *, operation: str) -> _ModelT:
    try:
        return model.model_validate(payload if payload is not None else {})
    except ValidationError as exc:
        logger.error("Unexpected response shape operation=%s errors=%s", operation, exc.error_count())
        raise ApiResponseError(f"{operation}: response did not match {model.__name__}.") from exc


class PricingAPIClient(BaseAPIClient):
    """
    Client for the pricing audit, market-data and error-tracking endpoints.
    """

    # ── Audit / listings ───────────────────────────────────────────────────

    def get_audit(self) -> Any:
        return self._request_json(method="GET", path="/pricing/audit")

    def get_listing_audit(self, listing_id: str, date: str | None = None) -> Any:
        params = {"date": date} if date else None
        return self._request_json(method="GET", path=f"/pricing/audit/{listing_id}", params=params)

    def get_listings(self) -> Any:
        return self._request_json(method="GET", path="/pricing/listings")

    def get_listing_calendar(self, listing_id: str) -> Any:
        return self._request_json(method="GET", path=f"/pricing/listings/{listing_id}/calendar")

    def get_training_data_stats(self) -> Any:
        return self._request_json(method="GET", path="/pricing/training-data-stats")

    def get_market_analysis(self, date: str | None = None) -> Any:
        params = {"date": date} if date else None
        return self._request_json(method="GET", path="/pricing/market-analysis", params=params)

    def trigger_nightly_collection(self) -> Any:
        return self._request_json(method="POST", path="/pricing/trigger-nightly-collection")

    # ── Error tracking ─────────────────────────────────────────────────────

    def get_error_summary(self) -> Any:
        return self._request_json(method="GET", path="/pricing/errors")

    def get_pending_errors(self) -> Any:
        return self._request_json(method="GET", path="/pricing/errors/pending")

    def get_listing_errors(self, listing_id: str, include_resolved: bool = False) -> Any:
        return self._request_json(
            method="GET",
            path=f"/pricing/errors/listing/{listing_id}",
            params={"includeResolved": "true" if include_resolved else "false"},
        )

    def get_completeness_status(self, listing_id: str) -> Any:
        return self._request_json(method="GET", path=f"/pricing/completeness/{listing_id}")

    def get_listings_with_issues(self) -> Any:
        return self._request_json(method="GET", path="/pricing/issues")

    def validate_listing_data(self, listing_id: str) -> Any:
        return self._request_json(method="POST", path=f"/pricing/validate/{listing_id}")

    def resolve_error(self, error_id: str, notes: str = "") -> Any:
        return self._request_json(
            method="POST",
            path=f"/pricing/errors/{error_id}/resolve",
            json_body={"notes": notes},
        )

    def ignore_error(self, error_id: str, notes: str = "") -> Any:
        return self._request_json(
            method="POST",
            path=f"/pricing/errors/{error_id}/ignore",
            json_body={"notes": notes},
        )

    def retry_error(self, error_id: str) -> Any:
        return self._request_json(method="POST", path=f"/pricing/errors/{error_id}/retry")

    def retry_all_listing_errors(self, listing_id: str) -> Any:
        return self._request_json(method="POST", path=f"/pricing/listings/{listing_id}/retry-all")

    def get_incomplete_listings(self) -> Any:
        return self._request_json(method="GET", path="/pricing/incomplete-listings")

    def fix_incomplete_calendars(self, listing_ids: Iterable[str] = ()) -> Any:
        """
        Start background calendar-fix jobs; an empty id list means every
        incomplete listing. Returns as soon as the backend accepts the jobs.
        """

        return self._request_json(
            method="POST",
            path="/pricing/fix-calendars",
            json_body={"listingIds": [str(listing_id) for listing_id in listing_ids]},
        )

    # ── Typed views ────────────────────────────────────────────────────────

    def fetch_error_summary(self) -> ErrorSummary:
        return _parse(ErrorSummary, self.get_error_summary(), operation="error summary")

    def fetch_pending_errors(self) -> list[TrackedError]:
        envelope = _parse(ErrorListResponse, self.get_pending_errors(), operation="pending errors")
        return list(envelope.errors)

    def fetch_listing_errors(self, listing_id: str, include_resolved: bool = False) -> list[TrackedError]:
        envelope = _parse(
            ErrorListResponse,
            self.get_listing_errors(listing_id, include_resolved=include_resolved),
            operation="listing errors",
        )
        return list(envelope.errors)

    def fetch_completeness(self, listing_id: str) -> ListingCompleteness:
        return _parse(
            ListingCompleteness,
            self.get_completeness_status(listing_id),
            operation="listing completeness",
        )

    def fetch_listings_with_issues(self) -> list[ListingCompleteness]:
        envelope = _parse(IssueListResponse, self.get_listings_with_issues(), operation="listings with issues")
        return list(envelope.listings)

    def fetch_incomplete_listings(self) -> list[IncompleteListing]:
        envelope = _parse(
            IncompleteListResponse,
            self.get_incomplete_listings(),
            operation="incomplete listings",
        )
        return list(envelope.listings)

    def acknowledge(self, payload: Any, *, operation: str) -> CommandAck:
        """
        Normalise a mutating call's response body into a CommandAck.
        """

        if not isinstance(payload, dict):
            return CommandAck()
        return _parse(CommandAck, payload, operation=operation)


def build_pricing_client(
    settings: BackendSettings | None = None,
    session: requests.Session | None = None,
) -> PricingAPIClient:
    """
    Build a client wired to an AuthSession from environment settings.
    """

    resolved = settings or get_backend_settings()
    return PricingAPIClient(
        settings=resolved,
        auth=AuthSession.from_settings(resolved),
        session=session,
    )
