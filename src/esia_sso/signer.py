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
Signer component producing PKCS#7 detached signatures for ESIA requests.
"""

import base64
from collections.abc import Callable
from typing import Any

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import pkcs7

from esia_sso.exceptions import EsiaConfigurationError, SigningError
from esia_sso.utils.logger import logger

PemData = str | bytes

# Binary keeps the message bytes as-is (no S/MIME newline canonicalization)
_SIGN_OPTIONS = [pkcs7.PKCS7Options.DetachedSignature, pkcs7.PKCS7Options.Binary]


def urlsafe_escape(data: bytes) -> str:
    """
    Encodes bytes as base64 with URL-safe alphabet and no padding.

    Args:
        data: Raw bytes.

    Returns:
        str: The encoded value (`+` -> `-`, `/` -> `_`, `=` stripped).
    """
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _to_bytes(value: PemData) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def _message_to_bytes(message: Any) -> bytes:
    """
    Coerces a message to the bytes that get signed.

    Raises:
        SigningError: If the message is None or its string conversion fails.
    """
    if message is None:
        raise SigningError("The message value can't be converted to string.")
    if isinstance(message, bytes):
        return message
    if not isinstance(message, str):
        try:
            message = str(message)
        except Exception as e:
            raise SigningError(f"The message value can't be converted to string: {e}") from e
    return message.encode("utf-8")


def load_signing_material(
    certificate: PemData,
    key: PemData,
    password: PemData | None = None,
) -> tuple[x509.Certificate, rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey]:
    """
    Loads a PEM certificate and its PEM private key.

    Raises:
        EsiaConfigurationError: If either value cannot be parsed or the key type is unsupported.
    """
    try:
        cert = x509.load_pem_x509_certificate(_to_bytes(certificate))
    except ValueError as e:
        raise EsiaConfigurationError(f"Unable to load certificate: {e}") from e

    try:
        private_key = serialization.load_pem_private_key(
            _to_bytes(key),
            password=_to_bytes(password) if password else None,
        )
    except (ValueError, TypeError) as e:
        raise EsiaConfigurationError(f"Unable to load private key: {e}") from e

    if not isinstance(private_key, (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey)):
        raise EsiaConfigurationError(f"Unsupported private key type: {type(private_key).__name__}")

    return cert, private_key


def get_signer(
    certificate: PemData | None,
    key: PemData | None,
    password: PemData | None = None,
) -> Callable[..., str]:
    """
    Builds a function that signs messages with the given certificate and key.

    The signature is a PKCS#7 signed-data structure (SHA-256, signer certificate embedded,
    content detached), DER encoded and then encoded with URL-safe base64.

    Args:
        certificate: Content of the certificate file (PEM).
        key: Content of the private key file (PEM).
        password: Password of an encrypted private key (optional).

    Returns:
        Callable[..., str]: `sign(message="")` returning the encoded signature.

    Raises:
        EsiaConfigurationError: If the certificate or key is missing or invalid.
    """
    if not certificate or not key:
        raise EsiaConfigurationError("Certificate and key are required to sign data.")

    cert, private_key = load_signing_material(certificate, key, password)

    def sign(message: Any = "") -> str:
        data = _message_to_bytes(message)

        try:
            signed = (
                pkcs7.PKCS7SignatureBuilder()
                .set_data(data)
                .add_signer(cert, private_key, hashes.SHA256())
                .sign(serialization.Encoding.DER, _SIGN_OPTIONS)
            )
        except (ValueError, TypeError) as e:
            logger.error(f"PKCS#7 signing failed: {e}")
            raise SigningError(f"Unable to sign message: {e}") from e

        return urlsafe_escape(signed)

    return sign
