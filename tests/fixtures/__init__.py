"""Test fixtures for in-memory implementations."""

from .gated_ledger import GatedLedgerClient
from .in_memory_ledger import InMemoryLedgerClient, make_order_response
from .navigation_doubles import ManualLoop, ManualTimer, RecordingNavigator
from .recording_listener import RecordingListener

__all__ = [
    "GatedLedgerClient",
    "InMemoryLedgerClient",
    "ManualLoop",
    "ManualTimer",
    "RecordingListener",
    "RecordingNavigator",
    "make_order_response",
]
