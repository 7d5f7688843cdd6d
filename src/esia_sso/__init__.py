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
Client for the ESIA (gosuslugi.ru) single sign-on: signed authorization requests,
code-for-marker exchange and personal data loading.
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .client import EsiaClient, EsiaClientAsync
from .config import EsiaConfig
from .exceptions import (
    EsiaConfigurationError,
    EsiaError,
    MarkerDecodeError,
    MissingParameterError,
    OversizedResponseError,
    SigningError,
    TokenExchangeError,
)
from .loader import load_data
from .models import AccessResult, AuthRequest, MarkerClaims
from .signer import get_signer
from .timestamp import get_timestamp

__all__ = [
    "AccessResult",
    "AuthRequest",
    "EsiaClient",
    "EsiaClientAsync",
    "EsiaConfig",
    "EsiaConfigurationError",
    "EsiaError",
    "MarkerClaims",
    "MarkerDecodeError",
    "MissingParameterError",
    "OversizedResponseError",
    "SigningError",
    "TokenExchangeError",
    "get_signer",
    "get_timestamp",
    "load_data",
]
