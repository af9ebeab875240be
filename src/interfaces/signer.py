"""Signer protocol — a signing identity on the network."""
from typing import Protocol


class Signer(Protocol):
    """Anything that owns an address and can produce ed25519 signatures."""

    def address(self) -> str: ...

    def public_key_hex(self) -> str: ...

    def sign(self, message: bytes) -> bytes: ...
