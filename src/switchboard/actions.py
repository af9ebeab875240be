"""Switchboard entry points as composable calls.

Argument lists are positional and must match the deployed program's
``run`` functions exactly. Byte-vector arguments (names, metadata, job
data) are sent as hex strings.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from ..config import ProgramConfig
from ..interfaces.signer import Signer
from ..models import OracleJob
from ..services.transaction_service import TransactionService
from .decimal import AptosDecimal
from .job_codec import encode_delimited

logger = logging.getLogger(__name__)


def _hex(value: str | bytes) -> str:
    if isinstance(value, str):
        value = value.encode("utf-8")
    return value.hex()


@dataclass(frozen=True)
class OracleQueueParams:
    name: str = ""
    metadata: str = ""
    oracle_timeout: int = 120
    reward: int = 10000
    min_stake: int = 0
    slashing_enabled: bool = False
    variance_tolerance_multiplier: Decimal = Decimal(0)
    feed_probation_period: int = 0
    consecutive_feed_failure_limit: int = 0
    consecutive_oracle_failure_limit: int = 0
    unpermissioned_feeds_enabled: bool = True
    unpermissioned_vrf_enabled: bool = True
    lock_lease_funding: bool = False
    enable_buffer_relayers: bool = False
    max_size: int = 1000


@dataclass(frozen=True)
class AggregatorParams:
    name: str = ""
    metadata: str = ""
    batch_size: int = 1
    min_oracle_results: int = 1
    min_job_results: int = 1
    min_update_delay_seconds: int = 5
    start_after: int = 0
    variance_threshold: Decimal = Decimal(1)
    force_report_period: int = 0
    expiration: int = 0


class SwitchboardProgram:
    """Invoke the program's ``*Action::run`` entry points."""

    def __init__(self, transactions: TransactionService, program: ProgramConfig) -> None:
        self._transactions = transactions
        self._address = program.address

    def entry_function(self, module: str, function: str = "run") -> str:
        return f"{self._address}::{module}::{function}"

    async def _run(self, signer: Signer, module: str, args: list) -> str:
        tx_hash = await self._transactions.submit(
            signer, self.entry_function(module), args
        )
        logger.info("%s by %s: %s", module, signer.address(), tx_hash)
        return tx_hash

    async def init_state(self, signer: Signer) -> str:
        """Create the State resource under ``signer``."""
        return await self._run(signer, "SwitchboardInitAction", [])

    async def init_oracle_queue(
        self, signer: Signer, state: str, authority: str, mint: str, params: OracleQueueParams
    ) -> str:
        # variance multiplier travels as mantissa + scale without a sign flag
        variance = AptosDecimal.from_decimal(params.variance_tolerance_multiplier)
        return await self._run(
            signer,
            "OracleQueueInitAction",
            [
                state,
                _hex(params.name),
                _hex(params.metadata),
                authority,
                str(params.oracle_timeout),
                str(params.reward),
                str(params.min_stake),
                params.slashing_enabled,
                variance.mantissa,
                variance.scale,
                str(params.feed_probation_period),
                str(params.consecutive_feed_failure_limit),
                str(params.consecutive_oracle_failure_limit),
                params.unpermissioned_feeds_enabled,
                params.unpermissioned_vrf_enabled,
                params.lock_lease_funding,
                mint,
                params.enable_buffer_relayers,
                str(params.max_size),
            ],
        )

    async def init_aggregator(
        self, signer: Signer, state: str, queue: str, authority: str, params: AggregatorParams
    ) -> str:
        variance = AptosDecimal.from_decimal(params.variance_threshold)
        return await self._run(
            signer,
            "AggregatorInitAction",
            [
                state,
                _hex(params.name),
                _hex(params.metadata),
                queue,
                str(params.batch_size),
                str(params.min_oracle_results),
                str(params.min_job_results),
                str(params.min_update_delay_seconds),
                str(params.start_after),
                variance.mantissa,
                variance.scale,
                str(params.force_report_period),
                str(params.expiration),
                authority,
            ],
        )

    async def init_oracle(
        self,
        signer: Signer,
        state: str,
        authority: str,
        queue: str,
        name: str = "",
        metadata: str = "",
    ) -> str:
        return await self._run(
            signer,
            "OracleInitAction",
            [state, _hex(name), _hex(metadata), authority, queue],
        )

    async def oracle_heartbeat(self, signer: Signer, state: str, oracle: str) -> str:
        return await self._run(signer, "OracleHeartbeatAction", [state, oracle])

    async def init_job(
        self,
        signer: Signer,
        state: str,
        authority: str,
        job: OracleJob,
        name: str = "",
        metadata: str = "",
    ) -> str:
        """Publish ``job`` in its length-delimited binary form."""
        return await self._run(
            signer,
            "JobInitAction",
            [state, _hex(name), _hex(metadata), authority, _hex(encode_delimited(job))],
        )

    async def aggregator_add_job(
        self, signer: Signer, state: str, aggregator: str, job: str, weight: int = 1
    ) -> str:
        return await self._run(
            signer, "AggregatorAddJobAction", [state, aggregator, job, weight]
        )

    async def aggregator_open_round(self, signer: Signer, state: str, aggregator: str) -> str:
        return await self._run(signer, "AggregatorOpenRoundAction", [state, aggregator])

    async def aggregator_save_result(
        self,
        signer: Signer,
        state: str,
        oracle: str,
        aggregator: str,
        oracle_idx: int,
        value: Decimal,
        error: bool = False,
        jobs_checksum: bytes = b"",
    ) -> str:
        """Report ``value`` for the open round as oracle ``oracle_idx``."""
        result = AptosDecimal.from_decimal(value)
        return await self._run(
            signer,
            "AggregatorSaveResultAction",
            [
                state,
                oracle,
                aggregator,
                str(oracle_idx),
                error,
                *result.to_move_args(),
                _hex(jobs_checksum),
            ],
        )
