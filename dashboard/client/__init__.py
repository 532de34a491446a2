"""
dashboard/client package marker.
"""

from dashboard.client.auth import AuthSession
from dashboard.client.base import BaseAPIClient
from dashboard.client.errors import (
    ApiAuthenticationError,
    ApiClientError,
    ApiRequestError,
    ApiResponseError,
    ApiTransportError,
)
from dashboard.client.pricing_client import PricingAPIClient, build_pricing_client

__all__ = [
    "ApiAuthenticationError",
    "ApiClientError",
    "ApiRequestError",
    "ApiResponseError",
    "ApiTransportError",
    "AuthSession",
    "BaseAPIClient",
    "PricingAPIClient",
    "build_pricing_client",
]
