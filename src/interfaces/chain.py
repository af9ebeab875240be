"""Chain client protocol — Aptos node REST abstraction."""
from __future__ import annotations

from typing import Any, Protocol

from .signer import Signer


class ChainClient(Protocol):
    """Abstract interface for blockchain RPC interactions."""

    async def get_account_resource(
        self, address: str, resource_type: str
    ) -> dict[str, Any]: ...

    async def get_account_resources(self, address: str) -> list[dict[str, Any]]: ...

    async def generate_transaction(
        self, sender: str, payload: dict[str, Any], options: dict[str, Any] | None = None
    ) -> dict[str, Any]: ...

    async def sign_transaction(
        self, signer: Signer, txn_request: dict[str, Any]
    ) -> dict[str, Any]: ...

    async def simulate_transaction(
        self, signer: Signer, txn_request: dict[str, Any]
    ) -> dict[str, Any]: ...

    async def submit_transaction(self, signed_txn: dict[str, Any]) -> dict[str, Any]: ...

    async def wait_for_transaction(self, tx_hash: str) -> dict[str, Any]: ...

    async def get_events_by_event_handle(
        self,
        address: str,
        event_handle_struct: str,
        field_name: str,
        start: int | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]: ...
