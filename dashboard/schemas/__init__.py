"""
Pydantic schemas for backend response bodies.
"""

from dashboard.schemas.completeness import (
    CompletenessPercentages,
    IncompleteListing,
    IncompleteListResponse,
    IssueListResponse,
    ListingCompleteness,
    ListingRef,
    MissingDataCounts,
)
from dashboard.schemas.errors import CommandAck, ErrorListResponse, ErrorSummary, TrackedError

__all__ = [
    "CommandAck",
    "CompletenessPercentages",
    "ErrorListResponse",
    "ErrorSummary",
    "IncompleteListing",
    "IncompleteListResponse",
    "IssueListResponse",
    "ListingCompleteness",
    "ListingRef",
    "MissingDataCounts",
    "TrackedError",
]
