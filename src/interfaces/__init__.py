"""Protocol interfaces for the oracle client."""
from .chain import ChainClient
from .signer import Signer

__all__ = ["ChainClient", "Signer"]
