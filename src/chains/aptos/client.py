"""Aptos node REST client."""
import asyncio
import logging
import ssl
import time
from typing import Any

import aiohttp
import certifi

from ...config import ChainConfig
from ...exceptions import NetworkError, ResourceNotFound
from ...interfaces.signer import Signer

logger = logging.getLogger(__name__)

# Simulation rejects valid signatures; an all-zero one is expected instead.
_NULL_SIGNATURE = "0x" + "00" * 64


async def http_json(
    method: str,
    url: str,
    *,
    timeout: float,
    params: dict[str, Any] | None = None,
    json: Any = None,
) -> tuple[int, Any]:
    """Perform one HTTP request and return ``(status, decoded JSON body)``.

    Transport failures and undecodable bodies raise ``NetworkError``; HTTP
    error statuses are returned to the caller.
    """
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(ssl=ssl_context)

    try:
        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.request(
                method,
                url,
                params=params,
                json=json,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                body = await response.json(content_type=None)
                return response.status, body
    except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as e:
        logger.warning("%s %s failed: %s", method, url, e)
        raise NetworkError(f"{method} {url} failed: {e}") from e


def _error_message(body: Any) -> str:
    if isinstance(body, dict):
        return body.get("message") or body.get("error_code") or str(body)
    return str(body)


class AptosClient:
    """Thin async wrapper over the Aptos fullnode REST API."""

    def __init__(self, config: ChainConfig, poll_interval: float = 1.0) -> None:
        self.base_url = config.rpc_url.rstrip("/")
        self.timeout = config.rpc_timeout
        self.poll_interval = poll_interval

    async def _call(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        address: str | None = None,
        resource_type: str | None = None,
    ) -> Any:
        status, body = await http_json(
            method,
            f"{self.base_url}{path}",
            timeout=self.timeout,
            params=params,
            json=json,
        )
        if status == 404:
            raise ResourceNotFound(address or path, resource_type)
        if status >= 400:
            raise NetworkError(
                f"{method} {path} returned HTTP {status}: {_error_message(body)}",
                status=status,
            )
        return body

    # ------------------------------------------------------------------
    # Accounts and resources
    # ------------------------------------------------------------------

    async def get_account(self, address: str) -> dict[str, Any]:
        return await self._call("GET", f"/accounts/{address}", address=address)

    async def get_sequence_number(self, address: str) -> int:
        account = await self.get_account(address)
        return int(account["sequence_number"])

    async def get_account_resource(
        self, address: str, resource_type: str
    ) -> dict[str, Any]:
        """Return ``{"type": ..., "data": {...}}`` for one resource."""
        return await self._call(
            "GET",
            f"/accounts/{address}/resource/{resource_type}",
            address=address,
            resource_type=resource_type,
        )

    async def get_account_resources(self, address: str) -> list[dict[str, Any]]:
        return await self._call(
            "GET", f"/accounts/{address}/resources", address=address
        )

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def generate_transaction(
        self,
        sender: str,
        payload: dict[str, Any],
        options: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Build an unsigned transaction at the sender's current sequence number."""
        sequence_number = await self.get_sequence_number(sender)
        txn_request: dict[str, Any] = {
            "sender": sender,
            "sequence_number": str(sequence_number),
            "max_gas_amount": "2000",
            "gas_unit_price": "1",
            "expiration_timestamp_secs": str(int(time.time()) + 600),
            "payload": payload,
        }
        if options:
            txn_request.update({k: str(v) for k, v in options.items()})
        return txn_request

    async def sign_transaction(
        self, signer: Signer, txn_request: dict[str, Any]
    ) -> dict[str, Any]:
        """Sign the node-encoded signing message and attach the signature."""
        signing_message = await self._call(
            "POST", "/transactions/encode_submission", json=txn_request
        )
        signature = signer.sign(bytes.fromhex(signing_message[2:]))
        return {
            **txn_request,
            "signature": {
                "type": "ed25519_signature",
                "public_key": signer.public_key_hex(),
                "signature": "0x" + signature.hex(),
            },
        }

    async def simulate_transaction(
        self, signer: Signer, txn_request: dict[str, Any]
    ) -> dict[str, Any]:
        """Dry-run ``txn_request``; returns the single simulated transaction."""
        body = {
            **txn_request,
            "signature": {
                "type": "ed25519_signature",
                "public_key": signer.public_key_hex(),
                "signature": _NULL_SIGNATURE,
            },
        }
        results = await self._call("POST", "/transactions/simulate", json=body)
        if not results:
            raise NetworkError("Simulation returned no result")
        return results[0]

    async def submit_transaction(self, signed_txn: dict[str, Any]) -> dict[str, Any]:
        """Submit a signed transaction; returns the pending transaction."""
        return await self._call("POST", "/transactions", json=signed_txn)

    async def get_transaction_by_hash(self, tx_hash: str) -> dict[str, Any]:
        return await self._call("GET", f"/transactions/by_hash/{tx_hash}")

    async def wait_for_transaction(self, tx_hash: str) -> dict[str, Any]:
        """Poll until the transaction leaves the pending state.

        There is no local deadline; callers bound the wait.
        """
        while True:
            try:
                txn = await self.get_transaction_by_hash(tx_hash)
            except ResourceNotFound:
                txn = {"type": "pending_transaction"}
            if txn.get("type") != "pending_transaction":
                return txn
            logger.debug("Transaction %s pending", tx_hash)
            await asyncio.sleep(self.poll_interval)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def get_events_by_event_handle(
        self,
        address: str,
        event_handle_struct: str,
        field_name: str,
        start: int | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Page through an event stream by sequence number."""
        params: dict[str, Any] = {}
        if start is not None:
            params["start"] = str(start)
        if limit is not None:
            params["limit"] = str(limit)
        path = f"/accounts/{address}/events/{event_handle_struct}/{field_name}"
        events = await self._call(
            "GET",
            path,
            params=params or None,
            address=address,
            resource_type=event_handle_struct,
        )
        if not isinstance(events, list):
            raise NetworkError(f"GET {path} returned no event list: {_error_message(events)}")
        return events
