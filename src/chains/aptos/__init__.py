from .account import Account, normalize_address
from .client import AptosClient
from .faucet import FaucetClient

__all__ = ["Account", "AptosClient", "FaucetClient", "normalize_address"]
