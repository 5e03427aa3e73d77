"""Tests for the spreadsheet proxy client."""

from __future__ import annotations

import json

import httpx
import pytest

from hitek.integration.sheet_client import SheetClient
from hitek.models import ErrorKind, Operation, Resource

URL = "https://sheets.test/api"


def _client(handler) -> SheetClient:
    return SheetClient(URL, transport=httpx.MockTransport(handler))


class TestEnvelope:
    @pytest.mark.asyncio
    async def test_send_posts_flat_envelope(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"status": "success", "data": [{"ProjectID": "P1"}]})

        async with _client(handler) as client:
            result = await client.send(Resource.PROJECTS, Operation.GET, {"ProjectID": "P1"})

        assert result.ok
        assert result.data == [{"ProjectID": "P1"}]
        assert len(seen) == 1
        assert seen[0].method == "POST"
        assert str(seen[0].url) == URL
        assert json.loads(seen[0].content) == {
            "sheetName": "Projects",
            "method": "GET",
            "ProjectID": "P1",
        }

    @pytest.mark.asyncio
    async def test_numbers_travel_as_json_numbers(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"status": "success"})

        async with _client(handler) as client:
            await client.send("Materials", "PUT", {"DispatchedQuantity": 50})

        assert seen[0]["DispatchedQuantity"] == 50

    @pytest.mark.asyncio
    async def test_login_envelope(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"status": "success", "message": "ok"})

        async with _client(handler) as client:
            result = await client.login("admin", "secret")

        assert result.ok
        assert seen == [{"method": "LOGIN", "username": "admin", "password": "secret"}]

    @pytest.mark.asyncio
    async def test_unknown_resource_or_operation_rejected(self):
        async with _client(lambda r: httpx.Response(200, json={"status": "success"})) as client:
            with pytest.raises(ValueError):
                await client.send("Invoices", Operation.GET)
            with pytest.raises(ValueError):
                await client.send(Resource.TASKS, "PATCH")

    def test_requires_url(self):
        with pytest.raises(ValueError):
            SheetClient("")


class TestFailures:
    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            result = await client.send(Resource.PROJECTS, Operation.GET)

        assert not result.ok
        assert result.error_kind is ErrorKind.TRANSPORT
        assert result.message.startswith("Could not reach the data service")

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        async with _client(lambda r: httpx.Response(503, text="down")) as client:
            result = await client.send(Resource.PROJECTS, Operation.GET)

        assert result.error_kind is ErrorKind.TRANSPORT
        assert result.message == "Could not reach the data service: HTTP error 503"

    @pytest.mark.asyncio
    async def test_unreadable_body(self):
        async with _client(lambda r: httpx.Response(200, text="<html>oops</html>")) as client:
            result = await client.send(Resource.PROJECTS, Operation.GET)

        assert result.error_kind is ErrorKind.DATA_SHAPE

    @pytest.mark.asyncio
    async def test_body_not_an_object(self):
        async with _client(lambda r: httpx.Response(200, json=[1, 2])) as client:
            result = await client.send(Resource.PROJECTS, Operation.GET)

        assert result.error_kind is ErrorKind.DATA_SHAPE

    @pytest.mark.asyncio
    async def test_double_encoded_body(self):
        body = json.dumps({"status": "success", "data": []})

        async with _client(lambda r: httpx.Response(200, json=body)) as client:
            result = await client.send(Resource.PROJECTS, Operation.GET)

        assert result.ok
        assert result.data == []

    @pytest.mark.asyncio
    async def test_remote_error_message_is_kept(self):
        async with _client(
            lambda r: httpx.Response(200, json={"status": "error", "message": "Sheet locked"})
        ) as client:
            result = await client.send(Resource.PROJECTS, Operation.POST, {"ProjectID": "P1"})

        assert result.error_kind is ErrorKind.REMOTE
        assert result.message == "Sheet locked"

    @pytest.mark.asyncio
    async def test_remote_error_without_message(self):
        async with _client(lambda r: httpx.Response(200, json={"status": "error"})) as client:
            result = await client.send(Resource.PROJECTS, Operation.GET)

        assert result.message == "Unknown error."

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    async def test_unencodable_number_is_a_validation_error(self, value):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"status": "success"})

        async with _client(handler) as client:
            result = await client.send(Resource.EXPENSES, Operation.POST, {"Amount": value})

        assert result.error_kind is ErrorKind.VALIDATION
        assert seen == []
