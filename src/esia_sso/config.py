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
Configuration for the esia-sso package.
"""

from typing import Any
from urllib.parse import urljoin

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Option names used by existing ESIA integrations
_CAMEL_CASE_OPTIONS = {
    "esiaUrl": "esia_url",
    "authPath": "auth_path",
    "markerPath": "marker_path",
    "dataPath": "data_path",
    "clientId": "client_id",
    "redirectUri": "redirect_uri",
}


class EsiaConfig(BaseSettings):
    """
    Connection settings for the ESIA portal.

    Attributes:
        esia_url (str): ESIA portal URL. Defaults to https://esia.gosuslugi.ru.
        auth_path (str): Path of the authorization page. Defaults to /aas/oauth2/ac.
        marker_path (str): Path of the access token (marker) endpoint. Defaults to /aas/oauth2/te.
        data_path (str): Path of the personal data REST service. Defaults to /rs/prns.
        scope (str): Requested access scopes. Defaults to "openid".
        client_id (str): Identifier of the client system.
        redirect_uri (str): Where the user is sent after granting access.
        certificate (str): Content of the certificate file (PEM).
        key (SecretStr): Content of the private key file (PEM).
        key_password (SecretStr | None): Password of an encrypted private key.
        http_timeout (float): Timeout in seconds for ESIA network operations.
        max_response_bytes (int): Maximum accepted size of an ESIA response body.
    """

    model_config = SettingsConfigDict(
        env_prefix="ESIA_",
        case_sensitive=False,
        frozen=True,
    )

    esia_url: str = "https://esia.gosuslugi.ru"
    auth_path: str = "/aas/oauth2/ac"
    marker_path: str = "/aas/oauth2/te"
    data_path: str = "/rs/prns"
    scope: str = "openid"
    client_id: str
    redirect_uri: str
    certificate: str
    key: SecretStr
    key_password: SecretStr | None = None
    http_timeout: float = Field(default=5.0, gt=0, description="Timeout in seconds for ESIA network operations.")
    max_response_bytes: int = Field(default=1_000_000, gt=0)
    unsafe_local_dev: bool = False

    @model_validator(mode="before")
    @classmethod
    def accept_camel_case(cls, data: Any) -> Any:
        """
        Maps camelCase option names (esiaUrl, clientId, ...) onto field names.
        """
        if isinstance(data, dict):
            data = dict(data)
            for camel, snake in _CAMEL_CASE_OPTIONS.items():
                if camel in data:
                    data[snake] = data.pop(camel)
        return data

    @field_validator("client_id", mode="before")
    @classmethod
    def coerce_client_id(cls, v: Any) -> Any:
        """Numeric client identifiers are accepted and kept as text."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("esia_url")
    @classmethod
    def normalize_esia_url(cls, v: str) -> str:
        v = v.strip()
        if "://" not in v:
            raise ValueError(f"esia_url must be an absolute URL, got '{v}'")
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_https(self) -> "EsiaConfig":
        """
        Ensures the portal is reached over HTTPS, unless strictly opted out for local dev.
        """
        if self.esia_url.startswith("http://") and not self.unsafe_local_dev:
            raise ValueError("HTTPS is required for production. Set 'unsafe_local_dev=True' only for local testing.")
        return self

    @property
    def auth_url(self) -> str:
        return urljoin(f"{self.esia_url}/", self.auth_path)

    @property
    def marker_url(self) -> str:
        return urljoin(f"{self.esia_url}/", self.marker_path)

    @property
    def data_url(self) -> str:
        return urljoin(f"{self.esia_url}/", self.data_path).rstrip("/")
