"""Gateway credential store backed by a YAML file.

Usage::

    from thingsix_forwarder.gateway.store import GatewayYamlFileStore

    store = GatewayYamlFileStore("gateways.yaml")
    gateway = store.add_new_gateway(EUI64.from_hex("0102030405060708"))
    store.gateway_by_network_id(gateway.network_id)
    store.gateways  # (Gateway, ...)

The file is a YAML list of ``{local_id, private_key}`` mappings. Writes only
ever append; after every append the whole file is loaded again, so the
in-memory list always mirrors the file. There is no locking: concurrent
writers (threads or processes) must be serialized by the caller.

The store logs loads and appends through the standard ``logging`` module and
never logs its own errors; entry points that own the process call
``thingsix_forwarder.logging_config.setup_logging()`` once to get JSON log
lines on stdout.
"""

import logging
import os
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple, Union

import yaml
from cryptography.hazmat.primitives.asymmetric import ec
from pydantic import BaseModel, ConfigDict, ValidationError

from thingsix_forwarder.gateway import crypto
from thingsix_forwarder.gateway.errors import (
    AlreadyExistsError,
    DecodeError,
    DerivationError,
    EncodeError,
    InvalidIdentifierError,
    KeyDecodeError,
    NotFoundError,
    StoreUnavailableError,
)
from thingsix_forwarder.gateway.models import EUI64, Gateway

logger = logging.getLogger(__name__)

FILE_MODE = 0o600

# Singleton instance
_instance: Optional["GatewayYamlFileStore"] = None


class GatewayYAML(BaseModel):
    """Persisted form of a single gateway."""

    model_config = ConfigDict(extra="ignore")

    local_id: str
    private_key: str


class GatewayYamlFileStore:
    """Gateway lookups against an append-only YAML file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._gateways: Tuple[Gateway, ...] = ()
        self._load()

    @property
    def gateways(self) -> Tuple[Gateway, ...]:
        """All loaded gateways, in file order."""
        return self._gateways

    def __len__(self) -> int:
        return len(self._gateways)

    def __iter__(self) -> Iterator[Gateway]:
        return iter(self._gateways)

    def __contains__(self, local_id: object) -> bool:
        try:
            self.gateway_by_local_id(local_id)
        except (NotFoundError, InvalidIdentifierError):
            return False
        return True

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def gateway_by_thingsix_id(self, thingsix_id: bytes) -> Gateway:
        """Return the gateway whose 32-byte ThingsIX ID equals *thingsix_id*.

        Raises:
            InvalidIdentifierError: If *thingsix_id* is not a 32-byte buffer.
        """
        if not isinstance(thingsix_id, (bytes, bytearray, memoryview)):
            raise InvalidIdentifierError(
                f"ThingsIX ID requires bytes, got {type(thingsix_id).__name__}"
            )
        thingsix_id = bytes(thingsix_id)
        if len(thingsix_id) != crypto.THINGSIX_ID_SIZE:
            raise InvalidIdentifierError(
                f"ThingsIX ID must be {crypto.THINGSIX_ID_SIZE} bytes, got {len(thingsix_id)}"
            )
        for gw in self._gateways:
            if gw.thingsix_id == thingsix_id:
                return gw
        raise NotFoundError(f"no gateway with ThingsIX ID {thingsix_id.hex()}")

    def gateway_by_local_id(self, local_id: EUI64) -> Gateway:
        local_id = EUI64.coerce(local_id)
        for gw in self._gateways:
            if gw.local_id == local_id:
                return gw
        raise NotFoundError(f"no gateway with local ID {local_id}")

    def gateway_by_local_id_bytes(self, local_id: bytes) -> Gateway:
        """Like :meth:`gateway_by_local_id` for a raw buffer.

        Raises:
            InvalidIdentifierError: If *local_id* is not exactly 8 bytes.
        """
        return self.gateway_by_local_id(EUI64(local_id))

    def gateway_by_network_id(self, network_id: EUI64) -> Gateway:
        network_id = EUI64.coerce(network_id)
        for gw in self._gateways:
            if gw.network_id == network_id:
                return gw
        raise NotFoundError(f"no gateway with network ID {network_id}")

    def gateway_by_network_id_bytes(self, network_id: bytes) -> Gateway:
        """Like :meth:`gateway_by_network_id` for a raw buffer.

        Raises:
            InvalidIdentifierError: If *network_id* is not exactly 8 bytes.
        """
        return self.gateway_by_network_id(EUI64(network_id))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def add_gateway(
        self, local_id: EUI64, private_key: ec.EllipticCurvePrivateKey
    ) -> Gateway:
        """Append a gateway to the store file and reload the store.

        Raises:
            AlreadyExistsError: If *local_id* is already stored.
            DerivationError: If *private_key* is not a usable gateway key.
            EncodeError: If the record cannot be serialized.
            StoreUnavailableError: If the file cannot be opened or written.

        A failure raised by the reload means the record was written but the
        in-memory view is stale; call :meth:`reload` or reopen the store.
        """
        local_id = EUI64.coerce(local_id)
        try:
            self.gateway_by_local_id(local_id)
        except NotFoundError:
            pass
        else:
            raise AlreadyExistsError(f"gateway {local_id} already exists")

        # fail before touching the file when the key is unusable
        Gateway.from_private_key(local_id, private_key)

        encoded = self._encode(local_id, private_key)
        self._append(encoded)
        logger.info(f"Added gateway {local_id} to {self.path}")

        self._load()
        return self.gateway_by_local_id(local_id)

    def add_new_gateway(self, local_id: EUI64) -> Gateway:
        """Generate a fresh key for *local_id* and add it to the store."""
        return self.add_gateway(local_id, crypto.generate_private_key())

    def reload(self) -> None:
        """Re-read the store file, replacing the in-memory gateways."""
        self._load()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _encode(self, local_id: EUI64, private_key: ec.EllipticCurvePrivateKey) -> str:
        try:
            record = GatewayYAML(
                local_id=str(local_id),
                private_key=crypto.private_key_to_hex(private_key),
            )
            return yaml.safe_dump(
                [record.model_dump()], default_flow_style=False, sort_keys=False
            )
        except (yaml.YAMLError, ValidationError) as e:
            raise EncodeError(f"unable to encode gateway {local_id}: {e}") from e

    def _append(self, encoded: str) -> None:
        try:
            fd = os.open(
                self.path, os.O_APPEND | os.O_CREAT | os.O_RDWR, FILE_MODE
            )
            with os.fdopen(fd, "a+b") as f:
                f.seek(0, os.SEEK_END)
                if f.tell() > 0:
                    f.seek(-1, os.SEEK_END)
                    if f.read(1) != b"\n":
                        encoded = "\n" + encoded
                f.write(encoded.encode("utf-8"))
        except OSError as e:
            raise StoreUnavailableError(
                f"unable to write gateway store {self.path}: {e}"
            ) from e

    def _read(self) -> bytes:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return b""
        except OSError as e:
            raise StoreUnavailableError(
                f"unable to read gateway store {self.path}: {e}"
            ) from e

    def _decode(self, raw: bytes) -> List[GatewayYAML]:
        if not raw.strip():
            return []
        try:
            # BaseLoader keeps every scalar as written, so unquoted IDs stay text
            document: Any = yaml.load(raw, Loader=yaml.BaseLoader)
        except yaml.YAMLError as e:
            raise DecodeError(f"unable to load gateway store {self.path}: {e}") from e

        if document is None:
            return []
        if not isinstance(document, list):
            raise DecodeError(
                f"gateway store {self.path} must contain a list, "
                f"got {type(document).__name__}"
            )

        entries = []
        for i, item in enumerate(document):
            try:
                entries.append(GatewayYAML.model_validate(item))
            except ValidationError as e:
                raise DecodeError(f"malformed gateway entry: {e}", index=i) from e
        return entries

    def _load(self) -> None:
        entries = self._decode(self._read())

        loaded = []
        for i, entry in enumerate(entries):
            try:
                local_id = EUI64.from_hex(entry.local_id)
            except InvalidIdentifierError as e:
                raise DecodeError(f"invalid local_id: {e}", index=i) from e
            try:
                key = crypto.private_key_from_hex(entry.private_key)
            except KeyDecodeError as e:
                raise KeyDecodeError(
                    f"could not decode private key of gateway {local_id}: {e}",
                    index=i,
                ) from e
            try:
                loaded.append(Gateway.from_private_key(local_id, key))
            except DerivationError as e:
                raise DerivationError(
                    f"unable to load gateway {local_id}: {e}", index=i
                ) from e

        self._gateways = tuple(loaded)
        logger.debug(f"Loaded {len(loaded)} gateway(s) from {self.path}")


def get_gateway_store() -> GatewayYamlFileStore:
    """Return the singleton store at the configured ``gateway_store.path``."""
    global _instance
    if _instance is None:
        from thingsix_forwarder.config.config_loader import config_loader

        _instance = GatewayYamlFileStore(config_loader.get_gateway_store_path())
    return _instance
