# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_identity

"""
Tests for the personal data loader.
"""

import json
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import MagicMock, patch

import httpx
import pytest

from esia_sso.exceptions import EsiaError, MissingParameterError
from esia_sso.loader import load_data


def make_stream_mock(body: bytes, calls: list[tuple[tuple[Any, ...], dict[str, Any]]]) -> Any:
    mock_response = MagicMock()
    mock_response.headers = {"Content-Length": str(len(body))}
    mock_response.raise_for_status = MagicMock()

    async def content_stream() -> AsyncGenerator[bytes, None]:
        yield body

    mock_response.aiter_bytes = content_stream

    @asynccontextmanager
    async def mock_stream(*args: Any, **kwargs: Any) -> AsyncGenerator[MagicMock, None]:
        calls.append((args, kwargs))
        yield mock_response

    return mock_stream


@pytest.mark.asyncio
async def test_load_data_issues_get_with_bearer_token() -> None:
    client = httpx.AsyncClient()
    calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []

    with patch.object(client, "stream", side_effect=make_stream_mock(b'{"firstName": "Ivan"}', calls)):
        result = await load_data(client, "test_uri", "test_access_token")

    assert result == {"firstName": "Ivan"}
    assert len(calls) == 1
    args, kwargs = calls[0]
    assert args == ("GET", "test_uri")
    assert kwargs["headers"] == {
        "Authorization": "Bearer test_access_token",
        "Content-Type": "application/x-www-form-urlencoded",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("token", [None, ""])
async def test_load_data_without_token_makes_no_request(token: str | None) -> None:
    client = httpx.AsyncClient()
    calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []

    with (
        patch.object(client, "stream", side_effect=make_stream_mock(b"{}", calls)),
        pytest.raises(MissingParameterError, match="access_token"),
    ):
        await load_data(client, "test_uri", token)

    assert calls == []


@pytest.mark.asyncio
async def test_load_data_over_mock_transport() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"elements": ["https://esia.test/rs/prns/1000/ctts/1"]})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        result = await load_data(client, "https://esia.test/rs/prns/1000/ctts", "marker")

    assert result == {"elements": ["https://esia.test/rs/prns/1000/ctts/1"]}
    assert len(seen) == 1
    assert seen[0].method == "GET"
    assert seen[0].headers["authorization"] == "Bearer marker"


@pytest.mark.asyncio
async def test_load_data_http_error_propagates() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "invalid_token"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await load_data(client, "https://esia.test/rs/prns/1000", "marker")


@pytest.mark.asyncio
async def test_load_data_invalid_json() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>maintenance</html>")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(EsiaError, match="Invalid JSON response"):
            await load_data(client, "https://esia.test/rs/prns/1000", "marker")


@pytest.mark.asyncio
async def test_load_data_returns_non_object_json() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=json.dumps([1, 2, 3]).encode())

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        assert await load_data(client, "https://esia.test/rs/prns/1000/docs", "marker") == [1, 2, 3]
