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
Bounded JSON fetching over an httpx async client.
"""

import json
from typing import Any

import httpx

from esia_sso.exceptions import EsiaError, OversizedResponseError
from esia_sso.utils.logger import logger

DEFAULT_MAX_BYTES = 1_000_000


async def safe_json_fetch(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    max_bytes: int = DEFAULT_MAX_BYTES,
    **kwargs: Any,
) -> Any:
    """
    Performs a request and parses the JSON body, refusing bodies above `max_bytes`.

    Args:
        client: The async HTTP client to use.
        url: The request URL.
        method: The HTTP method. Defaults to GET.
        max_bytes: Maximum accepted body size in bytes.
        **kwargs: Passed through to `client.stream` (headers, data, ...).

    Returns:
        Any: The parsed JSON value.

    Raises:
        httpx.HTTPError: On transport failures or non-2xx status codes.
        OversizedResponseError: If the body is larger than `max_bytes`.
        EsiaError: If the body is not valid JSON.
    """
    async with client.stream(method, url, **kwargs) as response:
        content_length = response.headers.get("Content-Length")
        if content_length:
            try:
                declared = int(content_length)
            except ValueError:
                declared = 0
            if declared > max_bytes:
                raise OversizedResponseError(f"Content-Length {declared} exceeds limit of {max_bytes} bytes")

        response.raise_for_status()

        content = bytearray()
        async for chunk in response.aiter_bytes():
            content.extend(chunk)
            if len(content) > max_bytes:
                logger.warning(f"Aborted response from {url}: more than {max_bytes} bytes")
                raise OversizedResponseError(f"Response size exceeds limit of {max_bytes} bytes")

    try:
        return json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise EsiaError(f"Invalid JSON response from {url}: {e}") from e
