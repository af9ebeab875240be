"""Switchboard account resources as typed handles.

Every handle is a (client, address) pair plus the resource type it reads.
Nothing is cached: each ``load_*`` call goes to the node.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Generic, TypeVar

from ..config import ProgramConfig
from ..exceptions import MalformedJobPayload, ResourceNotFound
from ..interfaces.chain import ChainClient
from ..models import OracleJob
from .job_codec import decode_job_hex

logger = logging.getLogger(__name__)

T = TypeVar("T")

COIN_STORE_TYPE = "0x1::coin::CoinStore<0x1::aptos_coin::AptosCoin>"


def _identity(data: Any) -> Any:
    return data


class ResourceHandle(Generic[T]):
    """Read one resource type at ``address`` and decode it.

    With ``resource_type=None`` the handle reads every resource at the
    address and hands the whole list to ``decode``.
    """

    def __init__(
        self,
        client: ChainClient,
        address: str,
        resource_type: str | None,
        decode: Callable[[Any], T] = _identity,
    ) -> None:
        self.client = client
        self.address = address
        self.resource_type = resource_type
        self._decode = decode

    async def load_data(self) -> T:
        if self.resource_type is None:
            raw: Any = await self.client.get_account_resources(self.address)
        else:
            resource = await self.client.get_account_resource(
                self.address, self.resource_type
            )
            raw = resource.get("data", {})
        return self._decode(raw)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address})"


class State(ResourceHandle[dict[str, Any]]):
    """Protocol-wide configuration singleton."""

    def __init__(self, client: ChainClient, address: str, program: ProgramConfig) -> None:
        super().__init__(client, address, f"{program.address}::Switchboard::State")


class Job(ResourceHandle[dict[str, Any]]):
    """Job definition; ``data`` holds the hex-encoded ``OracleJob``."""

    def __init__(self, client: ChainClient, address: str, program: ProgramConfig) -> None:
        super().__init__(client, address, f"{program.address}::Job::Job")

    async def load_job(self) -> OracleJob:
        data = await self.load_data()
        payload = data.get("data")
        if not isinstance(payload, str):
            raise MalformedJobPayload(f"job resource at {self.address} has no data field")
        return decode_job_hex(payload)


class Aggregator(ResourceHandle[list[dict[str, Any]]]):
    """Data feed. Its resource type is not pinned, so all resources are read."""

    def __init__(self, client: ChainClient, address: str, program: ProgramConfig) -> None:
        super().__init__(client, address, None)
        self.program = program

    async def job_keys(self) -> list[str]:
        """Job addresses referenced by this aggregator, in stored order."""
        for resource in await self.load_data():
            data = resource.get("data") or {}
            if "job_keys" in data:
                return list(data["job_keys"])
        raise ResourceNotFound(self.address, "aggregator with job_keys")

    async def load_job_handles(self) -> list[Job]:
        return [Job(self.client, key, self.program) for key in await self.job_keys()]

    async def load_jobs(self) -> list[OracleJob]:
        """Load and decode every job concurrently; any failure fails the call."""
        jobs = await self.load_job_handles()
        logger.debug("Loading %d jobs for aggregator %s", len(jobs), self.address)
        return list(await asyncio.gather(*(job.load_job() for job in jobs)))


async def load_balance(client: ChainClient, address: str) -> int:
    """Native coin balance of ``address``."""
    resource = await client.get_account_resource(address, COIN_STORE_TYPE)
    return int(resource["data"]["coin"]["value"])
