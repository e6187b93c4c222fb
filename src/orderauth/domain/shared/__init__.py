"""Shared domain utilities.

This package is domain-accessible and should not depend on application code.
"""

from .cancellation import CancellationToken
from .ledger_client_protocol import LedgerClientProtocol

__all__ = ["CancellationToken", "LedgerClientProtocol"]
