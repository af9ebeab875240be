"""Transaction submission: build → sign → simulate → submit → confirm."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

from ..config import GasConfig, TransactionConfig
from ..exceptions import NetworkError, TransactionRejected, TransactionTimeout
from ..interfaces.chain import ChainClient
from ..interfaces.signer import Signer
from ..models import SimulationResult

logger = logging.getLogger(__name__)


class TransactionService:
    """Submits entry-function calls on behalf of a signer.

    Submissions from one signer must be serialized by the caller; the
    sequence number is read fresh for every transaction.
    """

    def __init__(
        self,
        client: ChainClient,
        gas: GasConfig | None = None,
        config: TransactionConfig | None = None,
    ) -> None:
        self._client = client
        self._gas = gas or GasConfig()
        self._config = config or TransactionConfig()

    def _gas_options(self, overrides: dict[str, Any] | None) -> dict[str, Any]:
        options: dict[str, Any] = {
            "max_gas_amount": str(self._gas.max_gas_amount),
            "gas_unit_price": str(self._gas.gas_unit_price),
        }
        if self._gas.gas_currency_code:
            options["gas_currency_code"] = self._gas.gas_currency_code
        if overrides:
            options.update(overrides)
        return options

    @staticmethod
    def build_payload(
        function: str, arguments: Sequence[Any], type_arguments: Sequence[str] = ()
    ) -> dict[str, Any]:
        return {
            "type": "entry_function_payload",
            "function": function,
            "type_arguments": list(type_arguments),
            "arguments": list(arguments),
        }

    async def simulate(
        self,
        signer: Signer,
        function: str,
        arguments: Sequence[Any],
        type_arguments: Sequence[str] = (),
        gas_options: dict[str, Any] | None = None,
    ) -> SimulationResult:
        """Dry-run only; never submits."""
        payload = self.build_payload(function, arguments, type_arguments)
        txn_request = await self._client.generate_transaction(
            signer.address(), payload, self._gas_options(gas_options)
        )
        raw = await self._client.simulate_transaction(signer, txn_request)
        return SimulationResult.from_json(raw)

    async def submit(
        self,
        signer: Signer,
        function: str,
        arguments: Sequence[Any],
        type_arguments: Sequence[str] = (),
        gas_options: dict[str, Any] | None = None,
    ) -> str:
        """Run ``function`` with positional ``arguments`` and return the tx hash.

        Raises:
            TransactionRejected: simulation (or execution) failed. Nothing is
                submitted when simulation fails.
            TransactionTimeout: no confirmation within the configured bound.
            NetworkError: transport failure at any step. Once the
                transaction is submitted the error carries its ``tx_hash``.
        """
        payload = self.build_payload(function, arguments, type_arguments)
        txn_request = await self._client.generate_transaction(
            signer.address(), payload, self._gas_options(gas_options)
        )
        logger.debug(
            "Generated %s for %s at sequence %s",
            function,
            signer.address(),
            txn_request.get("sequence_number"),
        )

        signed_txn = await self._client.sign_transaction(signer, txn_request)

        simulation = SimulationResult.from_json(
            await self._client.simulate_transaction(signer, txn_request)
        )
        if not simulation.success:
            logger.warning("Simulation of %s failed: %s", function, simulation.vm_status)
            raise TransactionRejected(simulation.vm_status)
        logger.debug("Simulation of %s ok, gas used %d", function, simulation.gas_used)

        pending = await self._client.submit_transaction(signed_txn)
        tx_hash = pending["hash"]
        logger.debug("Submitted %s as %s", function, tx_hash)

        timeout = self._config.confirmation_timeout
        try:
            txn = await asyncio.wait_for(
                self._client.wait_for_transaction(tx_hash), timeout=timeout
            )
        except asyncio.TimeoutError:
            logger.error("Transaction %s not confirmed within %ss", tx_hash, timeout)
            raise TransactionTimeout(tx_hash, timeout) from None
        except NetworkError as e:
            # Already submitted, so the hash travels with the error.
            raise NetworkError(str(e), status=e.status, tx_hash=tx_hash) from e

        if txn.get("success") is False:
            raise TransactionRejected(txn.get("vm_status", "unknown"), tx_hash=tx_hash)

        logger.info("Transaction %s (%s) confirmed", tx_hash, function)
        return tx_hash
