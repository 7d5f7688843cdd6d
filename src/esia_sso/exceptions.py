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
Custom exceptions for the esia-sso package.
"""


class EsiaError(Exception):
    """Base exception for all esia-sso errors."""


class EsiaConfigurationError(EsiaError):
    """Raised when signing material is missing or cannot be loaded."""


class MissingParameterError(EsiaError, ValueError):
    """
    Raised when a required call argument (authorization code, access token) is missing.
    Always raised before any network request is made.
    """


class SigningError(EsiaError):
    """Raised when a message cannot be converted to text or signed."""


class OversizedResponseError(EsiaError):
    """Raised when an HTTP response is too large."""


class MarkerDecodeError(EsiaError):
    """Raised when the access token (marker) payload cannot be decoded."""


class TokenExchangeError(EsiaError):
    """
    Raised when exchanging the authorization code or loading user data fails.
    The original error is available as `__cause__`.
    """
