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
Loader for ESIA REST resources protected by an access token.
"""

from typing import Any

import httpx

from esia_sso.exceptions import MissingParameterError
from esia_sso.transport import DEFAULT_MAX_BYTES, safe_json_fetch
from esia_sso.utils.logger import logger


async def load_data(
    client: httpx.AsyncClient,
    uri: str,
    access_token: str | None,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> Any:
    """
    Loads JSON data from `uri` using the access token.

    Args:
        client: The async HTTP client to use.
        uri: Address of the data.
        access_token: The access token (marker).
        max_bytes: Maximum accepted body size in bytes.

    Returns:
        Any: The parsed JSON body.

    Raises:
        MissingParameterError: If the access token is missing. No request is made.
        httpx.HTTPError: On transport failures or non-2xx status codes.
        EsiaError: If the body is not valid JSON or is too large.
    """
    if not access_token:
        raise MissingParameterError("'access_token' is required to get data.")

    headers = {
        "Authorization": f"Bearer {access_token}",
        "Content-Type": "application/x-www-form-urlencoded",
    }

    logger.debug(f"Loading ESIA data from {httpx.URL(uri).host}")
    return await safe_json_fetch(client, uri, method="GET", max_bytes=max_bytes, headers=headers)
