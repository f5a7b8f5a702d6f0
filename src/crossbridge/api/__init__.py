"""Gateway REST and deploy relay clients."""

from crossbridge.api.base import (
    APIClient,
    APIError,
    BadRequestError,
    InternalError,
    NotFoundError,
    PayloadTooLargeError,
    TooManyRequestsError,
    UnauthorizedError,
)
from crossbridge.api.casper import CasperRelayClient
from crossbridge.api.networks import NetworksClient
from crossbridge.api.transfers import TransfersClient

__all__ = [
    "APIClient",
    "APIError",
    "BadRequestError",
    "CasperRelayClient",
    "InternalError",
    "NetworksClient",
    "NotFoundError",
    "PayloadTooLargeError",
    "TooManyRequestsError",
    "TransfersClient",
    "UnauthorizedError",
]
