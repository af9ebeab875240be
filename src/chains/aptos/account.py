"""Ed25519 signing identity and address helpers."""
from __future__ import annotations

import hashlib

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

# Appended to the public key before hashing to derive a single-signer address.
ED25519_SCHEME = b"\x00"


def normalize_address(address: str) -> str:
    """Return the canonical ``0x`` + 64 lower-case hex digit form."""
    body = address.lower()
    if body.startswith("0x"):
        body = body[2:]
    if not body or len(body) > 64:
        raise ValueError(f"Invalid account address '{address}'")
    int(body, 16)
    return "0x" + body.zfill(64)


class Account:
    """Keypair plus derived on-chain address."""

    def __init__(self, private_key: Ed25519PrivateKey | None = None) -> None:
        self._private_key = private_key or Ed25519PrivateKey.generate()
        self._public_key = self._private_key.public_key().public_bytes(
            Encoding.Raw, PublicFormat.Raw
        )
        auth_key = hashlib.sha3_256(self._public_key + ED25519_SCHEME).digest()
        self._address = "0x" + auth_key.hex()

    @classmethod
    def from_private_key_hex(cls, private_key_hex: str) -> Account:
        raw = bytes.fromhex(private_key_hex.removeprefix("0x"))
        return cls(Ed25519PrivateKey.from_private_bytes(raw))

    def address(self) -> str:
        return self._address

    def public_key_hex(self) -> str:
        return "0x" + self._public_key.hex()

    def private_key_hex(self) -> str:
        raw = self._private_key.private_bytes(
            Encoding.Raw, PrivateFormat.Raw, NoEncryption()
        )
        return "0x" + raw.hex()

    def sign(self, message: bytes) -> bytes:
        return self._private_key.sign(message)

    def __repr__(self) -> str:
        return f"Account({self._address})"
