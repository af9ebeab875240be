"""Integration tests for the transaction pipeline with a stubbed chain client."""
from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from src.chains.aptos.account import Account
from src.config import GasConfig, TransactionConfig
from src.exceptions import NetworkError, TransactionRejected, TransactionTimeout
from src.services.transaction_service import TransactionService

FUNCTION = "0x2b3c::AggregatorOpenRoundAction::run"


@pytest.fixture()
def service(mock_client: AsyncMock, sample_gas_config: GasConfig) -> TransactionService:
    return TransactionService(
        mock_client, sample_gas_config, TransactionConfig(confirmation_timeout=0.2)
    )


class TestSubmit:
    @pytest.mark.asyncio
    async def test_happy_path_returns_hash(
        self, service: TransactionService, mock_client: AsyncMock, signer: Account
    ) -> None:
        tx_hash = await service.submit(signer, FUNCTION, ["0xstate", "0xagg"])

        assert tx_hash == "0xHASH"
        steps = [c[0] for c in mock_client.mock_calls]
        assert steps == [
            "generate_transaction",
            "sign_transaction",
            "simulate_transaction",
            "submit_transaction",
            "wait_for_transaction",
        ]
        mock_client.submit_transaction.assert_awaited_once_with({"signed": True})
        mock_client.wait_for_transaction.assert_awaited_once_with("0xHASH")

    @pytest.mark.asyncio
    async def test_payload_and_gas_options(
        self, service: TransactionService, mock_client: AsyncMock, signer: Account
    ) -> None:
        await service.submit(signer, FUNCTION, ["0xstate", "1", False])

        sender, payload, options = mock_client.generate_transaction.call_args[0]
        assert sender == signer.address()
        assert payload == {
            "type": "entry_function_payload",
            "function": FUNCTION,
            "type_arguments": [],
            "arguments": ["0xstate", "1", False],
        }
        assert options == {
            "max_gas_amount": "5000",
            "gas_unit_price": "1",
            "gas_currency_code": "XUS",
        }

    @pytest.mark.asyncio
    async def test_gas_override(
        self, service: TransactionService, mock_client: AsyncMock, signer: Account
    ) -> None:
        await service.submit(signer, FUNCTION, [], gas_options={"max_gas_amount": "50000"})

        options = mock_client.generate_transaction.call_args[0][2]
        assert options["max_gas_amount"] == "50000"
        assert options["gas_unit_price"] == "1"

    @pytest.mark.asyncio
    async def test_failed_simulation_never_submits(
        self, service: TransactionService, mock_client: AsyncMock, signer: Account
    ) -> None:
        mock_client.simulate_transaction.return_value = {
            "success": False,
            "vm_status": "Move abort in 0x2b3c::Aggregator: 0x1",
        }

        with pytest.raises(TransactionRejected) as exc_info:
            await service.submit(signer, FUNCTION, [])

        assert exc_info.value.vm_status == "Move abort in 0x2b3c::Aggregator: 0x1"
        assert exc_info.value.tx_hash is None
        mock_client.submit_transaction.assert_not_called()
        mock_client.wait_for_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_confirmation_timeout(
        self, service: TransactionService, mock_client: AsyncMock, signer: Account
    ) -> None:
        async def never_confirms(tx_hash: str) -> dict:
            await asyncio.sleep(10)
            return {}

        mock_client.wait_for_transaction.side_effect = never_confirms

        with pytest.raises(TransactionTimeout) as exc_info:
            await service.submit(signer, FUNCTION, [])

        assert exc_info.value.tx_hash == "0xHASH"
        assert exc_info.value.timeout == 0.2

    @pytest.mark.asyncio
    async def test_committed_failure_is_rejected_with_hash(
        self, service: TransactionService, mock_client: AsyncMock, signer: Account
    ) -> None:
        mock_client.wait_for_transaction.return_value = {
            "type": "user_transaction",
            "success": False,
            "vm_status": "Out of gas",
        }

        with pytest.raises(TransactionRejected) as exc_info:
            await service.submit(signer, FUNCTION, [])

        assert exc_info.value.tx_hash == "0xHASH"
        assert exc_info.value.vm_status == "Out of gas"

    @pytest.mark.asyncio
    async def test_network_error_propagates(
        self, service: TransactionService, mock_client: AsyncMock, signer: Account
    ) -> None:
        mock_client.generate_transaction.side_effect = NetworkError("down")

        with pytest.raises(NetworkError) as exc_info:
            await service.submit(signer, FUNCTION, [])

        mock_client.submit_transaction.assert_not_called()
        assert exc_info.value.tx_hash is None

    @pytest.mark.asyncio
    async def test_network_error_after_submit_carries_hash(
        self, service: TransactionService, mock_client: AsyncMock, signer: Account
    ) -> None:
        mock_client.wait_for_transaction.side_effect = NetworkError(
            "connection reset", status=502
        )

        with pytest.raises(NetworkError) as exc_info:
            await service.submit(signer, FUNCTION, [])

        mock_client.submit_transaction.assert_awaited_once()
        assert exc_info.value.tx_hash == "0xHASH"
        assert exc_info.value.status == 502
        assert str(exc_info.value) == "connection reset"


class TestSimulate:
    @pytest.mark.asyncio
    async def test_simulate_only(
        self, service: TransactionService, mock_client: AsyncMock, signer: Account
    ) -> None:
        result = await service.simulate(signer, FUNCTION, [])

        assert result.success is True
        assert result.gas_used == 12
        mock_client.sign_transaction.assert_not_called()
        mock_client.submit_transaction.assert_not_called()

    def test_no_currency_code_when_blank(self, mock_client: AsyncMock) -> None:
        service = TransactionService(mock_client, GasConfig(gas_currency_code=""))
        assert "gas_currency_code" not in service._gas_options(None)
