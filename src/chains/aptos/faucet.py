"""Devnet faucet client, used to fund throwaway accounts in tests and demos."""
import logging

from ...config import ChainConfig
from ...exceptions import NetworkError
from .client import AptosClient, http_json

logger = logging.getLogger(__name__)


class FaucetClient:
    """Mint test coins to an address and wait for the mint transactions."""

    def __init__(self, config: ChainConfig, client: AptosClient) -> None:
        self.faucet_url = config.faucet_url.rstrip("/")
        self.timeout = config.rpc_timeout
        self._client = client

    async def fund_account(self, address: str, amount: int) -> list[str]:
        status, body = await http_json(
            "POST",
            f"{self.faucet_url}/mint",
            timeout=self.timeout,
            params={"amount": str(amount), "address": address},
        )
        if status >= 400:
            raise NetworkError(f"Faucet returned HTTP {status}: {body}", status=status)

        tx_hashes = [h if h.startswith("0x") else f"0x{h}" for h in body]
        for tx_hash in tx_hashes:
            await self._client.wait_for_transaction(tx_hash)
        logger.info("Funded %s with %d", address, amount)
        return tx_hashes
