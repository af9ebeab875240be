"""Service modules"""
from .event_poller import EventPoller, PollerState
from .transaction_service import TransactionService

__all__ = ["EventPoller", "PollerState", "TransactionService"]
