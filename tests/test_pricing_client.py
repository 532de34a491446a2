"""
tests/test_pricing_client.py

PricingAPIClient against an in-process fake session: verb/path mapping,
bearer auth, the single re-authentication on 401 and fault surfacing.
"""

from __future__ import annotations

import pytest
import requests

from dashboard.client.errors import (
    ApiAuthenticationError,
    ApiRequestError,
    ApiResponseError,
    ApiTransportError,
)
from tests.http_fakes import FakeSession, make_response

_SUMMARY = {"pending": 2, "retrying": 1, "failed": 0, "resolved": 5, "byType": {"CALENDAR_FETCH": 3}}


class TestAuthentication:
    def test_logs_in_when_no_token_is_held(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(
            make_response(200, {"accessToken": "fresh"}),
            make_response(200, _SUMMARY),
        )
        client = make_client(token=None)

        assert client.get_error_summary() == _SUMMARY

        login = fake_session.calls[0]
        assert (login.method, login.path) == ("POST", "/auth/login")
        assert login.json == {"email": "owner@example.com", "password": "secret"}
        assert fake_session.calls[1].headers["Authorization"] == "Bearer fresh"
        assert client.auth.token == "fresh"

    def test_reuses_token_across_operations(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(make_response(200, _SUMMARY), make_response(200, {"errors": []}))
        client = make_client()

        client.get_error_summary()
        client.get_pending_errors()

        assert fake_session.calls_to("/auth/login") == []
        assert all(call.headers["Authorization"] == "Bearer valid-token" for call in fake_session.calls)

    def test_401_then_200_after_relogin_yields_one_result_and_one_login(
        self, make_client, fake_session: FakeSession
    ) -> None:
        fake_session.queue(
            make_response(401, {"error": "Token expired"}),
            make_response(200, {"accessToken": "fresh"}),
            make_response(200, _SUMMARY),
        )
        client = make_client(token="stale")

        result = client.get_error_summary()

        assert result == _SUMMARY
        assert len(fake_session.calls_to("/auth/login")) == 1
        assert len(fake_session.calls_to("/pricing/errors")) == 2
        assert fake_session.calls[-1].headers["Authorization"] == "Bearer fresh"

    def test_second_401_propagates_without_another_login(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(
            make_response(401, {"error": "Token expired"}),
            make_response(200, {"accessToken": "fresh"}),
            make_response(401, {"error": "Still unauthorized"}),
        )
        client = make_client(token="stale")

        with pytest.raises(ApiRequestError) as ctx:
            client.get_pending_errors()

        assert ctx.value.status_code == 401
        assert ctx.value.message == "Still unauthorized"
        assert len(fake_session.calls_to("/auth/login")) == 1

    def test_failed_relogin_surfaces_original_fault(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(
            make_response(401, {"error": "Token expired"}),
            make_response(403, {"error": "Bad credentials"}),
        )
        client = make_client(token="stale")

        with pytest.raises(ApiRequestError) as ctx:
            client.get_error_summary()

        assert ctx.value.status_code == 401
        assert ctx.value.message == "Token expired"
        assert isinstance(ctx.value.__cause__, ApiAuthenticationError)
        assert client.auth.token is None

    def test_login_without_access_token_is_rejected(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(make_response(200, {"user": {"id": 1}}))
        client = make_client(token=None)

        with pytest.raises(ApiAuthenticationError):
            client.get_audit()


class TestFaults:
    def test_backend_fault_carries_status_and_message(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(make_response(404, {"error": "Error not found"}))
        client = make_client()

        with pytest.raises(ApiRequestError) as ctx:
            client.retry_error("err-9")

        assert ctx.value.status_code == 404
        assert ctx.value.message == "Error not found"
        assert ctx.value.path == "/pricing/errors/err-9/retry"

    def test_plain_text_fault_message_is_used_verbatim(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(make_response(502, text="Backend server unavailable"))
        client = make_client()

        with pytest.raises(ApiRequestError) as ctx:
            client.get_listings()

        assert ctx.value.status_code == 502
        assert ctx.value.message == "Backend server unavailable"

    def test_transport_fault_is_wrapped(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(requests.ConnectionError("connection refused"))
        client = make_client()

        with pytest.raises(ApiTransportError):
            client.get_error_summary()

    def test_invalid_json_body_raises_response_error(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(make_response(200, text="<html>not json</html>"))
        client = make_client()

        with pytest.raises(ApiResponseError):
            client.get_audit()

    def test_empty_success_body_is_an_empty_mapping(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(make_response(204))
        client = make_client()

        assert client.retry_error("err-1") == {}


class TestEndpointMapping:
    @pytest.mark.parametrize(
        "invoke, method, path, params, body",
        [
            (lambda c: c.get_audit(), "GET", "/pricing/audit", None, None),
            (lambda c: c.get_listing_audit("l1"), "GET", "/pricing/audit/l1", None, None),
            (
                lambda c: c.get_listing_audit("l1", date="2026-10-01"),
                "GET",
                "/pricing/audit/l1",
                {"date": "2026-10-01"},
                None,
            ),
            (lambda c: c.get_listing_calendar("l1"), "GET", "/pricing/listings/l1/calendar", None, None),
            (
                lambda c: c.get_market_analysis("2026-10-02"),
                "GET",
                "/pricing/market-analysis",
                {"date": "2026-10-02"},
                None,
            ),
            (lambda c: c.trigger_nightly_collection(), "POST", "/pricing/trigger-nightly-collection", None, None),
            (
                lambda c: c.get_listing_errors("l1", include_resolved=True),
                "GET",
                "/pricing/errors/listing/l1",
                {"includeResolved": "true"},
                None,
            ),
            (lambda c: c.get_completeness_status("l1"), "GET", "/pricing/completeness/l1", None, None),
            (lambda c: c.get_listings_with_issues(), "GET", "/pricing/issues", None, None),
            (lambda c: c.validate_listing_data("l1"), "POST", "/pricing/validate/l1", None, None),
            (
                lambda c: c.resolve_error("e1", "fixed upstream"),
                "POST",
                "/pricing/errors/e1/resolve",
                None,
                {"notes": "fixed upstream"},
            ),
            (lambda c: c.ignore_error("e1"), "POST", "/pricing/errors/e1/ignore", None, {"notes": ""}),
            (lambda c: c.retry_all_listing_errors("l1"), "POST", "/pricing/listings/l1/retry-all", None, None),
            (lambda c: c.get_incomplete_listings(), "GET", "/pricing/incomplete-listings", None, None),
        ],
    )
    def test_operation_maps_to_verb_and_path(
        self, make_client, fake_session: FakeSession, invoke, method, path, params, body
    ) -> None:
        fake_session.queue(make_response(200, {"success": True}))

        invoke(make_client())

        call = fake_session.calls[-1]
        assert (call.method, call.path, call.params, call.json) == (method, path, params, body)

    def test_listing_errors_default_excludes_resolved(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(make_response(200, {"errors": []}))

        make_client().get_listing_errors("l1")

        assert fake_session.calls[-1].params == {"includeResolved": "false"}

    def test_fix_calendars_without_ids_sends_empty_list(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(make_response(202, {"success": True, "message": "Jobs queued"}))

        payload = make_client().fix_incomplete_calendars([])

        call = fake_session.calls[-1]
        assert (call.method, call.path) == ("POST", "/pricing/fix-calendars")
        assert call.json == {"listingIds": []}
        assert payload["message"] == "Jobs queued"

    def test_fix_calendars_with_ids(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(make_response(200, {"success": True}))

        make_client().fix_incomplete_calendars(["l1", 42])

        assert fake_session.calls[-1].json == {"listingIds": ["l1", "42"]}


class TestTypedViews:
    def test_fetch_pending_errors_parses_records(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(
            make_response(
                200,
                {
                    "errors": [
                        {
                            "id": 7,
                            "listingId": "l1",
                            "listingTitle": "Beach House",
                            "errorType": "PRICE_FETCH",
                            "message": "timeout",
                            "status": "PENDING",
                            "retryCount": 1,
                            "maxRetries": 3,
                            "nextRetryAt": "2026-10-19T12:00:00Z",
                        }
                    ]
                },
            )
        )

        errors = make_client().fetch_pending_errors()

        assert len(errors) == 1
        assert errors[0].id == "7"
        assert errors[0].listing_title == "Beach House"
        assert errors[0].next_retry_at is not None

    def test_fetch_error_summary(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(make_response(200, _SUMMARY))

        summary = make_client().fetch_error_summary()

        assert (summary.pending, summary.retrying, summary.failed, summary.resolved) == (2, 1, 0, 5)
        assert summary.by_type == {"CALENDAR_FETCH": 3}

    def test_schema_mismatch_raises_response_error(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(make_response(200, {"errors": [{"message": "no id"}]}))

        with pytest.raises(ApiResponseError):
            make_client().fetch_pending_errors()

    def test_fetch_incomplete_listings(self, make_client, fake_session: FakeSession) -> None:
        fake_session.queue(
            make_response(
                200,
                {"listings": [{"id": "l2", "title": "Loft", "airbnb_url": "https://x.test/2", "analysis_count": 4}]},
            )
        )

        listings = make_client().fetch_incomplete_listings()

        assert listings[0].analysis_count == 4
        assert listings[0].airbnb_url == "https://x.test/2"
