"""Error taxonomy for chain interaction."""
from __future__ import annotations


class OracleClientError(Exception):
    """Base class for all client errors."""


class NetworkError(OracleClientError):
    """Transport or HTTP failure talking to a node or faucet."""

    def __init__(
        self, message: str, status: int | None = None, tx_hash: str | None = None
    ) -> None:
        super().__init__(message)
        self.status = status
        self.tx_hash = tx_hash


class ResourceNotFound(OracleClientError):
    """The address does not hold the requested resource."""

    def __init__(self, address: str, resource_type: str | None = None) -> None:
        what = resource_type or "resources"
        super().__init__(f"{what} not found at {address}")
        self.address = address
        self.resource_type = resource_type


class TransactionRejected(OracleClientError):
    """Simulation (or execution) reported a failed VM status."""

    def __init__(self, vm_status: str, tx_hash: str | None = None) -> None:
        super().__init__(f"TxFailure: {vm_status}")
        self.vm_status = vm_status
        self.tx_hash = tx_hash


class TransactionTimeout(OracleClientError):
    """Confirmation was not observed in time. Reconcile chain state before retrying."""

    def __init__(self, tx_hash: str, timeout: float) -> None:
        super().__init__(f"Transaction {tx_hash} not confirmed within {timeout}s")
        self.tx_hash = tx_hash
        self.timeout = timeout


class MalformedJobPayload(OracleClientError, ValueError):
    """Binary job payload could not be decoded."""
