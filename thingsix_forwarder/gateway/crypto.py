"""Key helpers for gateway identities.

Gateway keys are raw secp256k1 private scalars, persisted as 64 hex digits.
The public identity of a gateway is derived from its compressed public key:

* the ThingsIX ID is the 32-byte X coordinate (compressed point minus the
  0x02/0x03 prefix byte);
* the network ID is the first 8 bytes of SHA-256 over the ThingsIX ID.
"""

import hashlib
import logging
import re
from typing import Tuple

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from thingsix_forwarder.gateway.errors import DerivationError, KeyDecodeError

logger = logging.getLogger(__name__)

PRIVATE_KEY_SIZE = 32
THINGSIX_ID_SIZE = 32
NETWORK_ID_SIZE = 8

# Order of the secp256k1 base point; valid scalars are in [1, N).
SECP256K1_ORDER = int(
    "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16
)

_HEX_RE = re.compile(r"(?:[0-9a-fA-F]{2})*")


def generate_private_key() -> ec.EllipticCurvePrivateKey:
    """Create a fresh secp256k1 gateway key."""
    return ec.generate_private_key(ec.SECP256K1())


def private_key_from_hex(value: str) -> ec.EllipticCurvePrivateKey:
    """Decode a hex-encoded secp256k1 private key.

    Args:
        value: Exactly 64 hex digits, with no prefix or whitespace.

    Raises:
        KeyDecodeError: If *value* is not hex, not 32 bytes, or not a valid
            scalar for the curve.
    """
    if not isinstance(value, str):
        raise KeyDecodeError("private key must be a hex string")
    if not _HEX_RE.fullmatch(value):
        raise KeyDecodeError("private key is not valid hex")
    raw = bytes.fromhex(value)
    return private_key_from_bytes(raw)


def private_key_from_bytes(raw: bytes) -> ec.EllipticCurvePrivateKey:
    """Decode a raw 32-byte big-endian secp256k1 private key."""
    if len(raw) != PRIVATE_KEY_SIZE:
        raise KeyDecodeError(
            f"private key must be {PRIVATE_KEY_SIZE} bytes, got {len(raw)}"
        )
    scalar = int.from_bytes(raw, "big")
    if not 0 < scalar < SECP256K1_ORDER:
        raise KeyDecodeError("private key is outside the secp256k1 scalar range")
    try:
        return ec.derive_private_key(scalar, ec.SECP256K1())
    except ValueError as e:
        raise KeyDecodeError(f"invalid secp256k1 private key: {e}") from e


def private_key_to_bytes(key: ec.EllipticCurvePrivateKey) -> bytes:
    """Return the raw 32-byte big-endian scalar of *key*."""
    return key.private_numbers().private_value.to_bytes(PRIVATE_KEY_SIZE, "big")


def private_key_to_hex(key: ec.EllipticCurvePrivateKey) -> str:
    return private_key_to_bytes(key).hex()


def compressed_public_key(key: ec.EllipticCurvePrivateKey) -> bytes:
    """Return the 33-byte SEC1 compressed public key for *key*."""
    return key.public_key().public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.CompressedPoint,
    )


def derive_identity(key: ec.EllipticCurvePrivateKey) -> Tuple[bytes, bytes]:
    """Derive ``(network_id, thingsix_id)`` from a gateway private key.

    Raises:
        DerivationError: If *key* is not a secp256k1 private key.
    """
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise DerivationError(
            f"expected an elliptic curve private key, got {type(key).__name__}"
        )
    if not isinstance(key.curve, ec.SECP256K1):
        raise DerivationError(f"expected a secp256k1 key, got {key.curve.name}")

    thingsix_id = compressed_public_key(key)[1:]
    network_id = hashlib.sha256(thingsix_id).digest()[:NETWORK_ID_SIZE]
    return network_id, thingsix_id
