"""Unit tests for gateway key decoding and identity derivation."""

import hashlib

import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from thingsix_forwarder.gateway import crypto
from thingsix_forwarder.gateway.errors import DerivationError, KeyDecodeError

# secp256k1 scalar 1 maps to the generator point G (even Y).
KEY_ONE_HEX = "00" * 31 + "01"
G_X_HEX = "79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
TWO_G_X_HEX = "c6047f9441ed7d6d3045406e95c07cd85c778e4b8cef3ca7abac09b95c709ee5"


class TestPrivateKeyCodec:
    """Tests for hex encoding and decoding of private keys."""

    def test_decode_and_encode(self):
        key = crypto.private_key_from_hex(KEY_ONE_HEX)
        assert key.private_numbers().private_value == 1
        assert crypto.private_key_to_hex(key) == KEY_ONE_HEX

    def test_decode_accepts_uppercase(self):
        key = crypto.private_key_from_hex(("00" * 31 + "0a").upper())
        assert key.private_numbers().private_value == 10

    @pytest.mark.parametrize(
        "value",
        [
            "0x" + KEY_ONE_HEX,
            " " + KEY_ONE_HEX,
            KEY_ONE_HEX + "\n",
            KEY_ONE_HEX[:32] + " " + KEY_ONE_HEX[32:],
        ],
    )
    def test_decode_is_strict_about_formatting(self, value):
        with pytest.raises(KeyDecodeError):
            crypto.private_key_from_hex(value)

    def test_generated_key_survives_hex(self):
        key = crypto.generate_private_key()
        decoded = crypto.private_key_from_hex(crypto.private_key_to_hex(key))
        assert crypto.private_key_to_bytes(decoded) == crypto.private_key_to_bytes(key)

    @pytest.mark.parametrize(
        "value",
        [
            "not-hex",
            "abc",
            "00" * 31,
            "00" * 33,
            "00" * 32,
            "ff" * 32,
            "",
        ],
    )
    def test_decode_rejects_invalid_keys(self, value):
        with pytest.raises(KeyDecodeError):
            crypto.private_key_from_hex(value)

    def test_decode_rejects_curve_order(self):
        order_hex = format(crypto.SECP256K1_ORDER, "064x")
        with pytest.raises(KeyDecodeError):
            crypto.private_key_from_hex(order_hex)

    def test_decode_rejects_non_string(self):
        with pytest.raises(KeyDecodeError):
            crypto.private_key_from_hex(b"\x01" * 32)


class TestDeriveIdentity:
    """Tests for network ID and ThingsIX ID derivation."""

    def test_generator_point(self):
        key = crypto.private_key_from_hex(KEY_ONE_HEX)
        network_id, thingsix_id = crypto.derive_identity(key)

        assert thingsix_id.hex() == G_X_HEX
        assert network_id == hashlib.sha256(bytes.fromhex(G_X_HEX)).digest()[:8]
        assert crypto.compressed_public_key(key).hex() == "02" + G_X_HEX

    def test_identity_depends_on_key(self):
        key_two = crypto.private_key_from_bytes((2).to_bytes(32, "big"))
        network_id, thingsix_id = crypto.derive_identity(key_two)

        assert thingsix_id.hex() == TWO_G_X_HEX
        assert len(network_id) == crypto.NETWORK_ID_SIZE

    def test_identity_is_deterministic(self):
        key = crypto.generate_private_key()
        assert crypto.derive_identity(key) == crypto.derive_identity(key)

    def test_rejects_other_curves(self):
        key = ec.generate_private_key(ec.SECP256R1())
        with pytest.raises(DerivationError):
            crypto.derive_identity(key)

    def test_rejects_non_keys(self):
        with pytest.raises(DerivationError):
            crypto.derive_identity("not a key")
