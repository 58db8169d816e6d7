"""Error taxonomy for the gateway store.

Every failure raised by the store derives from :class:`GatewayStoreError`,
so callers can catch the whole family or match a single kind.
"""

from typing import Optional


class GatewayStoreError(Exception):
    """Base class for gateway store errors."""

    pass


class NotFoundError(GatewayStoreError, LookupError):
    """No gateway matches the given identifier."""

    pass


class InvalidIdentifierError(GatewayStoreError, ValueError):
    """An identifier buffer has the wrong length or format."""

    pass


class AlreadyExistsError(GatewayStoreError):
    """A gateway with the same local ID is already stored."""

    pass


class StoreUnavailableError(GatewayStoreError):
    """The backing file could not be read or written."""

    pass


class EncodeError(GatewayStoreError):
    """A gateway record could not be serialized."""

    pass


class RecordError(GatewayStoreError):
    """A failure tied to a single gateway record.

    Attributes:
        index: Zero-based position of the offending record, when known.
    """

    def __init__(self, message: str, index: Optional[int] = None):
        if index is not None:
            message = f"{message} (record {index})"
        super().__init__(message)
        self.index = index


class DecodeError(RecordError):
    """The store file or one of its records is malformed."""

    pass


class KeyDecodeError(DecodeError):
    """A private key is not valid hex or not a valid secp256k1 scalar."""

    pass


class DerivationError(RecordError):
    """The gateway identity could not be derived from a private key."""

    pass
