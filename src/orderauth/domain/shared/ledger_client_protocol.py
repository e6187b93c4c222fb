"""Protocol interface for ledger client implementations.

This protocol defines the contract that all ledger client implementations must satisfy.
It enables dependency injection and makes the workflow testable by allowing fake ledgers.
"""

from __future__ import annotations

from typing import Optional, Protocol, Type, TYPE_CHECKING
from types import TracebackType

if TYPE_CHECKING:
    # Avoid circular imports by only importing types during type checking
    from ...application.order.dtos import (
        AuthorizeOrderRequestDTO,
        GetOrderRequestDTO,
        MerchantOrderResponseDTO,
    )


class LedgerClientProtocol(Protocol):
    """Protocol defining the interface for ledger client implementations.

    Implementations should provide async methods for:
    - Looking up an order (and its merchant) by opaque token
    - Authorizing an order with the user's secret
    - Context manager support for resource cleanup

    Failures are reported by raising ``LedgerRequestError`` (or its
    ``OrderNotFoundError`` subclass) carrying the ledger's message text.
    """

    async def get_order(
        self, dto: "GetOrderRequestDTO"
    ) -> "MerchantOrderResponseDTO":
        """Look up an order by token.

        Args:
            dto: Request carrying the opaque order token

        Returns:
            The order together with its owning merchant, if any
        """
        ...

    async def authorize_order(self, dto: "AuthorizeOrderRequestDTO") -> None:
        """Authorize an order.

        Args:
            dto: Request carrying the order token and the user's secret
        """
        ...

    async def aclose(self) -> None:
        """Close the client and release resources."""
        ...

    async def __aenter__(self: "LedgerClientProtocol") -> "LedgerClientProtocol":
        ...

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        ...
