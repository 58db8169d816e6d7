"""
Configuration for pytest.

This file provides common fixtures for all tests.
"""

import pytest

from thingsix_forwarder.gateway.models import EUI64


@pytest.fixture
def store_path(tmp_path):
    """Path to a gateway store file that does not exist yet."""
    return tmp_path / "gateways.yaml"


@pytest.fixture
def local_id():
    return EUI64.from_hex("0102030405060708")


@pytest.fixture
def other_local_id():
    return EUI64.from_hex("a1a2a3a4a5a6a7a8")


@pytest.fixture
def write_store(store_path):
    """Return a helper that writes ``(local_id, private_key)`` pairs to the store file."""

    def _write(entries):
        lines = []
        for entry_local_id, private_key in entries:
            lines.append(f'- local_id: "{entry_local_id}"')
            lines.append(f'  private_key: "{private_key}"')
        store_path.write_text("\n".join(lines) + "\n")
        return store_path

    return _write
