"""Gateway identity store for the ThingsIX forwarder.

Persists gateway private keys in a YAML file and looks gateways up by local
ID, network ID or ThingsIX ID.
"""

from thingsix_forwarder.gateway.errors import (
    AlreadyExistsError,
    DecodeError,
    DerivationError,
    EncodeError,
    GatewayStoreError,
    InvalidIdentifierError,
    KeyDecodeError,
    NotFoundError,
    RecordError,
    StoreUnavailableError,
)
from thingsix_forwarder.gateway.models import EUI64, Gateway
from thingsix_forwarder.gateway.store import GatewayYamlFileStore, get_gateway_store

__all__ = [
    "AlreadyExistsError",
    "DecodeError",
    "DerivationError",
    "EUI64",
    "EncodeError",
    "Gateway",
    "GatewayStoreError",
    "GatewayYamlFileStore",
    "InvalidIdentifierError",
    "KeyDecodeError",
    "NotFoundError",
    "RecordError",
    "StoreUnavailableError",
    "get_gateway_store",
]
