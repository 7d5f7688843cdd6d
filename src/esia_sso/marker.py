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
Decoding of the ESIA access token (marker).

The marker is only decoded, never verified: it is received directly from the
token endpoint over TLS and is passed back to ESIA as a bearer token.
"""

import binascii
from typing import Any

from authlib.common.encoding import json_loads, to_bytes, urlsafe_b64decode
from pydantic import ValidationError

from esia_sso.exceptions import MarkerDecodeError
from esia_sso.models import MarkerClaims


def decode_marker(token: str) -> dict[str, Any]:
    """
    Decodes the payload of a compact JWS without checking its signature.

    Args:
        token: The access token string (header.payload.signature).

    Returns:
        dict[str, Any]: The token claims.

    Raises:
        MarkerDecodeError: If the token is not a compact JWS or its payload is not a JSON object.
    """
    if not isinstance(token, str) or not token:
        raise MarkerDecodeError("Access token is missing or not a string.")

    segments = token.strip().split(".")
    if len(segments) != 3:
        raise MarkerDecodeError(f"Access token must have 3 segments, got {len(segments)}.")

    try:
        payload = json_loads(urlsafe_b64decode(to_bytes(segments[1])).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise MarkerDecodeError(f"Unable to decode access token payload: {e}") from e

    if not isinstance(payload, dict):
        raise MarkerDecodeError("Access token payload is not a JSON object.")

    return payload


def get_subject_id(claims: dict[str, Any]) -> str:
    """
    Extracts the user identifier from decoded marker claims.

    Raises:
        MarkerDecodeError: If no subject claim is present or the claims are malformed.
    """
    try:
        return MarkerClaims.model_validate(claims).sbj_id
    except ValidationError as e:
        raise MarkerDecodeError(f"Invalid access token claims: {e}") from e
