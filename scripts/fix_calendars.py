"""
Start calendar-fix jobs for incomplete listings from the CLI.
"""

from __future__ import annotations

import argparse
import json

from dashboard.client import ApiClientError, build_pricing_client
from dashboard.logging_utils import configure_logging


def main() -> int:
    parser = argparse.ArgumentParser(description="Trigger backend calendar-fix jobs.")
    parser.add_argument(
        "listing_ids",
        nargs="*",
        help="Listing ids to fix. Omit to fix every incomplete listing.",
    )
    parser.add_argument(
        "--list",
        dest="list_only",
        action="store_true",
        help="Only print listings with missing calendars; do not start jobs.",
    )
    args = parser.parse_args()

    configure_logging()
    client = build_pricing_client()

    try:
        if args.list_only:
            listings = client.fetch_incomplete_listings()
            payload = [listing.model_dump() for listing in listings]
        else:
            payload = client.fix_incomplete_calendars(args.listing_ids)
    except ApiClientError as exc:
        print(json.dumps({"success": False, "error": str(exc)}, indent=2))
        return 1

    print(json.dumps(payload, indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
