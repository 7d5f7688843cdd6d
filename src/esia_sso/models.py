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
Data models for the esia-sso package.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class AuthRequest(BaseModel):
    """
    Data needed to redirect the user to the ESIA authorization page.

    The caller is expected to persist `params["state"]` to correlate the callback.

    Attributes:
        url (str): The complete authorization URL.
        params (dict[str, str]): The query parameters used to build `url`.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    params: dict[str, str]

    @property
    def state(self) -> str:
        return self.params["state"]


class MarkerClaims(BaseModel):
    """
    Claims of the ESIA access token (marker) relevant to this client.
    Only the subject is interpreted; every other claim is kept untouched as an extra field.

    Attributes:
        sbj_id (str): Identifier of the user (`urn:esia:sbj_id`, or `sub`).
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    sbj_id: str = Field(..., validation_alias=AliasChoices("urn:esia:sbj_id", "sub", "sbj_id"))

    @field_validator("sbj_id", mode="before")
    @classmethod
    def coerce_identifier(cls, v: Any) -> Any:
        """ESIA issues numeric identifiers; they are handled as text."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class AccessResult(BaseModel):
    """
    Result of exchanging an authorization code.

    Attributes:
        marker (dict[str, Any]): The raw token endpoint response.
        claims (dict[str, Any]): The decoded (unverified) access token payload.
        data (list[Any]): One JSON value per requested resource path, in request order.
    """

    model_config = ConfigDict(frozen=True)

    marker: dict[str, Any]
    claims: dict[str, Any]
    data: list[Any] = Field(default_factory=list)

    @property
    def access_token(self) -> str:
        return str(self.marker["access_token"])
