"""Base HTTP client for the bridge gateway.

All gateway errors are mapped from the response status to a typed
exception. The body is expected to be ``{"error": "..."}``; when it is
missing or malformed the exception falls back to a default message.
"""

import logging
from typing import Any, Optional

import httpx

from crossbridge.config import Settings, get_settings

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base class for gateway errors."""

    status_code: int = 500
    default_message: str = "internal server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class BadRequestError(APIError):
    """The server rejected the request as malformed."""
    status_code = 400
    default_message = "bad request"


class UnauthorizedError(APIError):
    """The request lacks valid authentication credentials."""
    status_code = 401
    default_message = "authorization required"


class NotFoundError(APIError):
    """The requested resource does not exist."""
    status_code = 404
    default_message = "not found"


class PayloadTooLargeError(APIError):
    status_code = 413
    default_message = "payload too large"


class TooManyRequestsError(APIError):
    status_code = 429
    default_message = "too many requests"


class InternalError(APIError):
    """The server failed to fulfil a valid request."""
    status_code = 500
    default_message = "internal server error"


ERRORS_BY_STATUS: dict[int, type[APIError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    404: NotFoundError,
    413: PayloadTooLargeError,
    429: TooManyRequestsError,
    500: InternalError,
}


def error_from_response(response: httpx.Response) -> APIError:
    """Build the typed error for a failed response."""
    message = None
    try:
        body = response.json()
        if isinstance(body, dict) and isinstance(body.get("error"), str):
            message = body["error"]
    except ValueError:
        pass

    error_class = ERRORS_BY_STATUS.get(response.status_code, InternalError)
    return error_class(message, status_code=response.status_code)


class APIClient:
    """Holds the gateway base URL and maps failed responses to errors.

    Pass an ``httpx.AsyncClient`` to share connections (or to inject a mock
    transport); otherwise a short-lived client is opened per request.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = (base_url or self.settings.get_api_url()).rstrip("/")
        self._client = client

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[Any] = None,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")

        if self._client is not None:
            response = await self._client.request(method, url, params=params, json=json)
        else:
            async with httpx.AsyncClient(timeout=self.settings.http_timeout) as client:
                response = await client.request(method, url, params=params, json=json)

        if response.is_error:
            error = error_from_response(response)
            logger.error(f"{method} {path} failed: {response.status_code} - {error.message}")
            raise error

        return response

    async def _get(self, path: str, params: Optional[dict] = None) -> httpx.Response:
        return await self._request("GET", path, params=params)

    async def _post(self, path: str, json: Any) -> httpx.Response:
        return await self._request("POST", path, json=json)

    async def _delete(self, path: str) -> httpx.Response:
        return await self._request("DELETE", path)

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        """Decode a JSON body, treating an empty body as ``None``."""
        if not response.content:
            return None
        return response.json()
