"""
Request signing with ECDSA (secp256k1 / SHA-256).

The canonical message binds the caller identity, the request time, the
HTTP method, the path (with query string) and the exact body bytes.
"""

import base64
import binascii
import logging
import time
from typing import Any, Protocol

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

CURVE = ec.SECP256K1()


class SigningIdentity(Protocol):
    """Anything carrying an access id and a loaded EC private key."""

    @property
    def access_id(self) -> str: ...

    @property
    def signing_key(self) -> ec.EllipticCurvePrivateKey: ...


def load_private_key(private_key_pem: str) -> ec.EllipticCurvePrivateKey:
    """
    Load an EC private key in PEM format.

    Args:
        private_key_pem: PEM-encoded private key

    Returns:
        Loaded elliptic-curve private key

    Raises:
        ConfigurationError: If the key is missing, malformed or not EC
    """
    if not private_key_pem or not isinstance(private_key_pem, str):
        raise ConfigurationError("Private key is missing")

    try:
        key: Any = serialization.load_pem_private_key(
            private_key_pem.strip().encode("utf-8"),
            password=None,
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise ConfigurationError(f"Invalid private key: {e}") from e

    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise ConfigurationError(
            f"Invalid private key: expected an elliptic-curve key, got {type(key).__name__}"
        )
    return key


def create_key_pair() -> tuple[str, str]:
    """
    Generate a new secp256k1 key pair.

    Returns:
        Tuple of (private_pem, public_pem); register the public one with the API
    """
    private_key = ec.generate_private_key(CURVE)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("utf-8")
    return private_pem, public_pem


def canonical_message(
    access_id: str,
    access_time: str,
    method: str,
    path: str,
    body: str,
) -> str:
    """Build the signable string for one request."""
    return f"{access_id}:{access_time}:{method.upper()}:{path}:{body}"


def sign(message: str, private_key: ec.EllipticCurvePrivateKey) -> str:
    """Sign a message and return the base64 DER signature."""
    try:
        signature = private_key.sign(message.encode("utf-8"), ec.ECDSA(hashes.SHA256()))
    except (ValueError, TypeError, AttributeError) as e:
        raise ConfigurationError(f"Unable to sign request: {e}") from e
    return base64.b64encode(signature).decode("ascii")


def verify_signature(message: str, signature: str, public_key_pem: str) -> bool:
    """Check a base64 DER signature against a PEM public key."""
    try:
        public_key: Any = serialization.load_pem_public_key(public_key_pem.encode("utf-8"))
    except (ValueError, UnsupportedAlgorithm) as e:
        raise ConfigurationError(f"Invalid public key: {e}") from e

    try:
        public_key.verify(
            base64.b64decode(signature, validate=True),
            message.encode("utf-8"),
            ec.ECDSA(hashes.SHA256()),
        )
    except (InvalidSignature, binascii.Error, ValueError):
        return False
    return True


def sign_request(
    user: SigningIdentity,
    method: str,
    path: str,
    body: str = "",
    access_time: float | None = None,
) -> dict[str, str]:
    """
    Compute the authentication headers for a request.

    Args:
        user: Credential used to sign
        method: HTTP method
        path: Request path including the query string
        body: Serialized JSON body ("" for requests without body)
        access_time: Unix timestamp; defaults to now

    Returns:
        Access-Id, Access-Time and Access-Signature headers
    """
    timestamp = str(access_time if access_time is not None else time.time())
    message = canonical_message(user.access_id, timestamp, method, path, body)
    logger.debug(f"Signing {method.upper()} {path} as {user.access_id}")

    return {
        "Access-Id": user.access_id,
        "Access-Time": timestamp,
        "Access-Signature": sign(message, user.signing_key),
    }
