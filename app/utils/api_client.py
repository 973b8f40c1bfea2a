"""
API Client
Async client for the Spendwise API with automatic retries on transient failures
"""
import logging
from typing import Any, Dict, Optional

import httpx

from app.core.errors import AppError, ErrorKind
from app.utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)

STATUS_KINDS = {
    400: ErrorKind.VALIDATION,
    401: ErrorKind.AUTHENTICATION,
    403: ErrorKind.AUTHORIZATION,
    404: ErrorKind.NOT_FOUND,
    408: ErrorKind.TIMEOUT,
    422: ErrorKind.VALIDATION,
    504: ErrorKind.TIMEOUT,
}


def error_from_response(response: httpx.Response) -> AppError:
    """
    Turn an error response into an AppError.

    4xx responses are never retried, whatever their status: they point at a
    defect in the request. 5xx responses stay retryable.
    """
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    try:
        kind = ErrorKind(body.get("error"))
    except ValueError:
        fallback = ErrorKind.INTERNAL if response.status_code >= 500 else ErrorKind.VALIDATION
        kind = STATUS_KINDS.get(response.status_code, fallback)

    return AppError(
        kind,
        body.get("message") or "Request failed",
        status_code=response.status_code,
        retryable=response.status_code >= 500,
        details=body.get("errors"),
    )


class SpendwiseClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        retries: int = 2,
        retry_delay: float = 1000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep=None,
    ) -> None:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(base_url=base_url, headers=headers, transport=transport)
        self.retries = retries
        self.retry_delay = retry_delay
        self._sleep = sleep

    async def __aenter__(self) -> "SpendwiseClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_with_retry(self, method: str, url: str, **kwargs) -> httpx.Response:
        async def attempt() -> httpx.Response:
            response = await self._client.request(method, url, **kwargs)
            if response.is_error:
                raise error_from_response(response)
            return response

        return await retry_with_backoff(
            attempt,
            max_retries=self.retries,
            initial_delay=self.retry_delay,
            sleep=self._sleep,
        )

    async def _json(self, method: str, url: str, **kwargs) -> Any:
        response = await self.fetch_with_retry(method, url, **kwargs)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._json("GET", url, params=params)

    async def post(self, url: str, data: Optional[Dict[str, Any]] = None) -> Any:
        return await self._json("POST", url, json=data)

    async def put(self, url: str, data: Optional[Dict[str, Any]] = None) -> Any:
        return await self._json("PUT", url, json=data)

    async def delete(self, url: str) -> Any:
        return await self._json("DELETE", url)
