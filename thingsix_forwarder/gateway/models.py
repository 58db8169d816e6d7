"""
Data models for gateway identities.
"""

from dataclasses import dataclass, field
from typing import Union

from cryptography.hazmat.primitives.asymmetric import ec

from thingsix_forwarder.gateway import crypto
from thingsix_forwarder.gateway.errors import InvalidIdentifierError

EUI64_SIZE = 8


@dataclass(frozen=True)
class EUI64:
    """An 8-byte LoRaWAN identifier, rendered as 16 lowercase hex digits."""

    value: bytes

    def __post_init__(self):
        if not isinstance(self.value, (bytes, bytearray)):
            raise InvalidIdentifierError(
                f"EUI64 requires bytes, got {type(self.value).__name__}"
            )
        if len(self.value) != EUI64_SIZE:
            raise InvalidIdentifierError(
                f"EUI64 must be {EUI64_SIZE} bytes, got {len(self.value)}"
            )
        object.__setattr__(self, "value", bytes(self.value))

    @classmethod
    def from_hex(cls, text: str) -> "EUI64":
        """Parse an EUI64 from hex, ignoring ``-`` and ``:`` separators."""
        if not isinstance(text, str):
            raise InvalidIdentifierError(
                f"EUI64 text must be a string, got {type(text).__name__}"
            )
        cleaned = text.strip().replace("-", "").replace(":", "")
        try:
            raw = bytes.fromhex(cleaned)
        except ValueError as e:
            raise InvalidIdentifierError(f"EUI64 is not valid hex: {text!r}") from e
        return cls(raw)

    @classmethod
    def coerce(cls, value: Union["EUI64", bytes, str]) -> "EUI64":
        """Accept an EUI64, its raw bytes or its hex text."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.from_hex(value)
        return cls(value)

    def __bytes__(self) -> bytes:
        return self.value

    def __str__(self) -> str:
        return self.value.hex()


@dataclass(frozen=True)
class Gateway:
    """A gateway credential record.

    Only ``local_id`` and the private key are persisted; the other
    identifiers are derived from the key whenever the record is built.
    """

    local_id: EUI64
    network_id: EUI64
    thingsix_id: bytes
    compressed_public_key: bytes
    private_key: ec.EllipticCurvePrivateKey = field(repr=False, compare=False)

    @classmethod
    def from_private_key(
        cls, local_id: EUI64, private_key: ec.EllipticCurvePrivateKey
    ) -> "Gateway":
        """Build a gateway record, deriving its public identifiers.

        Raises:
            DerivationError: If the key cannot produce a gateway identity.
        """
        network_id, thingsix_id = crypto.derive_identity(private_key)
        return cls(
            local_id=local_id,
            network_id=EUI64(network_id),
            thingsix_id=thingsix_id,
            compressed_public_key=crypto.compressed_public_key(private_key),
            private_key=private_key,
        )

    def private_key_hex(self) -> str:
        return crypto.private_key_to_hex(self.private_key)
