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
ESIA client: authorization URL construction and code-for-marker exchange.
"""

import uuid
from collections.abc import Sequence
from typing import Any
from urllib.parse import urlencode

import anyio
import httpx
from anyio.from_thread import start_blocking_portal
from opentelemetry import trace
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.trace import Status, StatusCode

from esia_sso.config import EsiaConfig
from esia_sso.exceptions import MarkerDecodeError, MissingParameterError, TokenExchangeError
from esia_sso.loader import load_data
from esia_sso.marker import decode_marker, get_subject_id
from esia_sso.models import AccessResult, AuthRequest
from esia_sso.signer import get_signer
from esia_sso.timestamp import get_timestamp
from esia_sso.transport import safe_json_fetch
from esia_sso.utils.logger import logger

tracer = trace.get_tracer(__name__)

TOKEN_EXCHANGE_ERROR = "Failed to get access data from ESIA"

# Marks `data_path_list` as not passed, which loads the root resource.
_OMITTED: Any = object()


def _describe_failure(e: Exception) -> str:
    """Log summary of a failure: exception type and HTTP status, never the request URL or error text."""
    if isinstance(e, httpx.HTTPStatusError):
        return f"{type(e).__name__} (status {e.response.status_code})"
    return type(e).__name__


class EsiaClientAsync:
    """
    Async implementation of the ESIA client (The Core).
    Handles resources via async context manager.

    Attributes:
        config (EsiaConfig): The connection settings.
    """

    def __init__(self, config: EsiaConfig, client: httpx.AsyncClient | None = None) -> None:
        """
        Initialize the EsiaClientAsync.

        Args:
            config: The configuration object.
            client: External async client (optional). If not provided, one is created and owned.

        Raises:
            EsiaConfigurationError: If the certificate or private key cannot be loaded.
        """
        self.config = config
        self._internal_client = client is None

        password = self.config.key_password.get_secret_value() if self.config.key_password else None
        self._sign = get_signer(self.config.certificate, self.config.key.get_secret_value(), password)

        if client:
            self._client = client
        else:
            self._client = httpx.AsyncClient(timeout=self.config.http_timeout)

        HTTPXClientInstrumentor().instrument_client(self._client)

    async def __aenter__(self) -> "EsiaClientAsync":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Closes the HTTP client if it is owned by this instance."""
        if self._internal_client:
            await self._client.aclose()

    def _signed_params(self) -> dict[str, str]:
        """
        Builds the signed parameter set shared by the authorization and token requests.
        Timestamp, state and signature are generated anew on every call.
        """
        timestamp = get_timestamp()
        state = str(uuid.uuid4())
        client_id = self.config.client_id
        scope = self.config.scope

        client_secret = self._sign(f"{scope}{timestamp}{client_id}{state}")

        return {
            "client_id": client_id,
            "client_secret": client_secret,
            "redirect_uri": self.config.redirect_uri,
            "scope": scope,
            "state": state,
            "timestamp": timestamp,
        }

    def create_auth(self) -> AuthRequest:
        """
        Builds the URL that sends the user to the ESIA authorization page.

        Returns:
            AuthRequest: The URL and the parameters used to build it.
            The caller must keep `params["state"]` to match the callback.
        """
        params = {
            **self._signed_params(),
            "response_type": "code",
            "access_type": "offline",
        }
        url = f"{self.config.auth_url}?{urlencode(params)}"

        logger.debug(f"Created ESIA authorization request with state {params['state']}")
        return AuthRequest(url=url, params=params)

    async def _fetch_marker(self, code: str) -> dict[str, Any]:
        """
        Exchanges the authorization code for the access token (marker).
        """
        data = {
            **self._signed_params(),
            "code": code,
            "grant_type": "authorization_code",
            "token_type": "Bearer",
        }

        marker = await safe_json_fetch(
            self._client,
            self.config.marker_url,
            method="POST",
            max_bytes=self.config.max_response_bytes,
            data=data,
        )

        if not isinstance(marker, dict) or not isinstance(marker.get("access_token"), str):
            raise MarkerDecodeError("Token response does not contain an access_token.")

        return marker

    async def _load_all(self, paths: Sequence[str], sbj_id: str, access_token: str) -> list[Any]:
        """
        Loads every resource path concurrently and returns the results in request order.
        The first failure cancels the remaining requests.
        """
        results: list[Any] = [None] * len(paths)
        base_url = f"{self.config.data_url}/{sbj_id}"

        async def _load(index: int, path: str) -> None:
            results[index] = await load_data(
                self._client,
                f"{base_url}{path}",
                access_token,
                max_bytes=self.config.max_response_bytes,
            )

        try:
            async with anyio.create_task_group() as tg:
                for index, path in enumerate(paths):
                    tg.start_soon(_load, index, path)
        except ExceptionGroup as eg:
            # anyio groups child failures; surface the first one
            raise eg.exceptions[0] from eg

        return results

    async def get_access(self, code: str | None, data_path_list: Any = _OMITTED) -> AccessResult:
        """
        Exchanges the authorization code for a marker and loads the requested user data.

        Emits an OpenTelemetry span `esia.get_access`.

        Args:
            code: The authorization code received on the redirect URI.
            data_path_list: Resource path suffixes appended to `<data_url>/<sbj_id>`.
                Omitted loads the root resource ("/"). A list or tuple loads each path in order.
                None or any other value loads nothing.

        Returns:
            AccessResult: The marker response, its decoded claims and the loaded data.

        Raises:
            MissingParameterError: If the code is missing. No request is made.
            TokenExchangeError: If the exchange, decoding or any data request fails.
        """
        if not code:
            raise MissingParameterError("'code' is required to get access data.")

        if data_path_list is _OMITTED:
            paths = ["/"]
        elif isinstance(data_path_list, (list, tuple)):
            paths = [str(path) for path in data_path_list]
        else:
            paths = []

        with tracer.start_as_current_span("esia.get_access") as span:
            span.set_attribute("esia.data_path_count", len(paths))
            try:
                marker = await self._fetch_marker(code)
                access_token = marker["access_token"]
                claims = decode_marker(access_token)
                sbj_id = get_subject_id(claims)

                logger.info(f"Received ESIA marker, loading {len(paths)} resource(s)")
                data = await self._load_all(paths, sbj_id, access_token)
            except Exception as e:
                logger.error(f"{TOKEN_EXCHANGE_ERROR}: {_describe_failure(e)}")
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise TokenExchangeError(f"{TOKEN_EXCHANGE_ERROR}: {e}") from e

            span.set_status(Status(StatusCode.OK))
            return AccessResult(marker=marker, claims=claims, data=data)


class EsiaClient:
    """
    Sync facade for EsiaClientAsync.
    Runs the async core on an anyio blocking portal owned by this instance.
    """

    def __init__(self, config: EsiaConfig, client: httpx.AsyncClient | None = None) -> None:
        """
        Initialize the EsiaClient.

        Args:
            config: The configuration object.
            client: External async client (optional).
        """
        self._async = EsiaClientAsync(config, client)
        self._portal_cm = start_blocking_portal()
        self._portal = self._portal_cm.__enter__()
        self._closed = False

    def __enter__(self) -> "EsiaClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Closes the async core and stops the portal."""
        if self._closed:
            return
        self._closed = True
        try:
            self._portal.call(self._async.__aexit__, None, None, None)
        finally:
            self._portal_cm.__exit__(None, None, None)

    @property
    def config(self) -> EsiaConfig:
        return self._async.config

    def create_auth(self) -> AuthRequest:
        """See EsiaClientAsync.create_auth."""
        return self._async.create_auth()

    def get_access(self, code: str | None, data_path_list: Any = _OMITTED) -> AccessResult:
        """See EsiaClientAsync.get_access."""
        return self._portal.call(self._async.get_access, code, data_path_list)  # type: ignore[no-any-return]
