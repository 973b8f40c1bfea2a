import asyncio

import httpx
import pytest

from app.core.errors import AppError, ErrorKind
from app.utils.api_client import SpendwiseClient, error_from_response


class Recorder:
    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


async def no_sleep(seconds):
    return None


def make_client(handler, retries=2):
    return SpendwiseClient(
        "http://testserver",
        token="abc",
        retries=retries,
        retry_delay=10,
        transport=httpx.MockTransport(handler),
        sleep=no_sleep,
    )


async def _call(client, method, *args):
    async with client:
        return await getattr(client, method)(*args)


def test_get_returns_json_and_sends_token():
    handler = Recorder([httpx.Response(200, json={"data": []})])
    result = asyncio.run(_call(make_client(handler), "get", "/api/expenses/"))
    assert result == {"data": []}
    assert handler.requests[0].headers["Authorization"] == "Bearer abc"


def test_client_errors_are_not_retried():
    handler = Recorder([
        httpx.Response(429, json={"error": "AI Service Error", "message": "slow down"}),
    ])
    with pytest.raises(AppError) as exc_info:
        asyncio.run(_call(make_client(handler), "post", "/api/insights", {"expenses": []}))
    assert len(handler.requests) == 1
    assert exc_info.value.status_code == 429
    assert exc_info.value.retryable is False
    assert exc_info.value.message == "slow down"


def test_server_errors_are_retried_then_succeed():
    handler = Recorder([
        httpx.Response(503, json={"error": "Database Error", "message": "try again"}),
        httpx.Response(502),
        httpx.Response(200, json={"ok": True}),
    ])
    result = asyncio.run(_call(make_client(handler), "put", "/api/profile", {"name": "Ada"}))
    assert result == {"ok": True}
    assert len(handler.requests) == 3


def test_network_failures_exhaust_retries():
    handler = Recorder([httpx.ConnectError("connection refused")] * 3)
    with pytest.raises(httpx.ConnectError):
        asyncio.run(_call(make_client(handler, retries=2), "get", "/api/health"))
    assert len(handler.requests) == 3


def test_delete_with_empty_body():
    handler = Recorder([httpx.Response(204)])
    assert asyncio.run(_call(make_client(handler), "delete", "/api/expenses/1")) is None


def test_error_from_response_maps_kinds():
    not_found = error_from_response(httpx.Response(404, text="missing"))
    assert not_found.kind is ErrorKind.NOT_FOUND
    assert not_found.message == "Request failed"

    validation = error_from_response(
        httpx.Response(400, json={"error": "Validation Error", "message": "Invalid category",
                                  "errors": {"category": "Invalid category"}})
    )
    assert validation.kind is ErrorKind.VALIDATION
    assert validation.details == {"category": "Invalid category"}

    server = error_from_response(httpx.Response(500, json=["unexpected"]))
    assert server.kind is ErrorKind.INTERNAL
    assert server.retryable is True
