"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from src.chains.aptos.account import Account
from src.config import (
    AppConfig,
    ChainConfig,
    EventsConfig,
    GasConfig,
    ProgramConfig,
    TransactionConfig,
)
from src.models import HttpTask, JsonParseTask, OracleJob

PROGRAM = "0x2b3c332c6c95d3b717fdf3644a7633e8efa7b1451193891a504a6a292edc0039"


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_chain_config() -> ChainConfig:
    return ChainConfig(
        rpc_url="https://node.example.com/v1",
        faucet_url="https://faucet.example.com",
        rpc_timeout=10,
    )


@pytest.fixture()
def sample_program_config() -> ProgramConfig:
    return ProgramConfig(address=PROGRAM)


@pytest.fixture()
def sample_gas_config() -> GasConfig:
    return GasConfig(max_gas_amount=5000, gas_unit_price=1, gas_currency_code="XUS")


@pytest.fixture()
def sample_app_config(
    sample_chain_config: ChainConfig,
    sample_program_config: ProgramConfig,
    sample_gas_config: GasConfig,
) -> AppConfig:
    return AppConfig(
        chain=sample_chain_config,
        program=sample_program_config,
        gas=sample_gas_config,
        transactions=TransactionConfig(confirmation_timeout=5.0),
        events=EventsConfig(poll_interval_seconds=0.01),
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    chain:
      rpc_url: "https://node.example.com/v1"
      faucet_url: "https://faucet.example.com"
      rpc_timeout: 10
    program:
      address: "0xABC123"
    gas:
      max_gas_amount: 4000
      gas_unit_price: 2
      gas_currency_code: XUS
    transactions:
      confirmation_timeout: 12.5
      confirmation_poll_interval: 0.5
    events:
      poll_interval_seconds: 2
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Chain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def signer() -> Account:
    return Account.from_private_key_hex("0x" + "11" * 32)


@pytest.fixture()
def mock_client() -> AsyncMock:
    """Chain client stub whose every happy-path call succeeds."""
    client = AsyncMock()
    client.generate_transaction.return_value = {
        "sender": "0xSENDER",
        "sequence_number": "7",
        "payload": {},
    }
    client.sign_transaction.return_value = {"signed": True}
    client.simulate_transaction.return_value = {
        "success": True,
        "vm_status": "Executed successfully",
        "gas_used": "12",
    }
    client.submit_transaction.return_value = {"hash": "0xHASH"}
    client.wait_for_transaction.return_value = {
        "type": "user_transaction",
        "hash": "0xHASH",
        "success": True,
        "vm_status": "Executed successfully",
    }
    return client


# ---------------------------------------------------------------------------
# Sample jobs
# ---------------------------------------------------------------------------


@pytest.fixture()
def btc_job() -> OracleJob:
    return OracleJob(
        tasks=(
            HttpTask(url="https://www.binance.us/api/v3/ticker/price?symbol=BTCUSD"),
            JsonParseTask(path="$.price"),
        )
    )
