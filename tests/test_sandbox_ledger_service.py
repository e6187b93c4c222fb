"""Business logic tests for the sandbox ledger service."""

import unittest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from orderauth.application.order.dtos import AuthorizeOrderRequestDTO
from orderauth.application.sandbox.use_cases.ledger import (
    CANNOT_PAY_OWN_ORDER,
    DAILY_LIMIT_EXCEEDED,
    INSUFFICIENT_BALANCE,
    INVALID_PAY_KEY,
    NOT_LOGGED_IN,
    ORDER_COMPLETED,
    ORDER_EXPIRED,
    ORDER_NOT_FOUND,
    ORDER_STATUS_INVALID,
    SandboxLedgerService,
)
from orderauth.domain.errors import LedgerRequestError, OrderNotFoundError
from orderauth.domain.order.entities import OrderStatus
from orderauth.domain.sandbox.entities import LedgerAccount, LedgerOrder
from orderauth.infrastructure.sandbox.order_book import SandboxOrderBook

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class TestSandboxLedgerService(unittest.IsolatedAsyncioTestCase):
    """Test cases for SandboxLedgerService payment rules."""

    async def asyncSetUp(self):
        """Set up test fixtures."""
        self.book = SandboxOrderBook()
        await self.book.save_account(
            LedgerAccount(
                username="alice",
                pay_key="123456",
                balance=Decimal("100"),
                daily_limit=Decimal("50"),
            )
        )
        await self.book.save_account(LedgerAccount(username="shop", pay_key="654321"))
        await self.book.save_order(self._order("order-1", "10.00"))
        self.service = SandboxLedgerService(self.book, clock=lambda: NOW)

    def _order(self, order_no, amount, **overrides):
        fields = dict(
            order_no=order_no,
            amount=Decimal(amount),
            payee_username="shop",
            expires_at=NOW + timedelta(hours=1),
        )
        fields.update(overrides)
        return LedgerOrder(**fields)

    async def _assert_pay_fails(self, payer, dto, message, status_code=400):
        with self.assertRaises(LedgerRequestError) as ctx:
            await self.service.pay_order(payer, dto)
        self.assertEqual(ctx.exception.message, message)
        self.assertEqual(ctx.exception.status_code, status_code)

    def _dto(self, order_no="order-1", pay_key="123456"):
        return AuthorizeOrderRequestDTO(order_no=order_no, pay_key=pay_key)

    async def test_get_order_success(self):
        """Test order lookup returns order and merchant parts."""
        # Act
        result = await self.service.get_order("order-1")

        # Assert
        self.assertIs(result.order.status, OrderStatus.PENDING)
        self.assertEqual(result.order.amount, Decimal("10.00"))
        self.assertEqual(result.order.payee_name, "shop")
        self.assertIsNone(result.merchant)

    async def test_get_order_unknown_raises_not_found(self):
        """Test unknown token raises OrderNotFoundError with status 404."""
        with self.assertRaises(OrderNotFoundError) as ctx:
            await self.service.get_order("nope")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.message, ORDER_NOT_FOUND)

    async def test_get_order_expired_raises_not_found(self):
        """Test expired token is indistinguishable from an unknown one."""
        # Arrange
        await self.book.save_order(
            self._order("old", "5.00", expires_at=NOW - timedelta(seconds=1))
        )

        # Act / Assert
        with self.assertRaises(OrderNotFoundError):
            await self.service.get_order("old")

    async def test_pay_order_success_moves_funds(self):
        """Test successful payment debits payer, credits payee and completes order."""
        # Act
        await self.service.pay_order("alice", self._dto())

        # Assert
        alice = await self.book.get_account("alice")
        shop = await self.book.get_account("shop")
        order = await self.book.get_order("order-1")
        self.assertEqual(alice.balance, Decimal("90.00"))
        self.assertEqual(alice.spent_today, Decimal("10.00"))
        self.assertEqual(shop.balance, Decimal("10.00"))
        self.assertIs(order.status, OrderStatus.SUCCESS)
        self.assertEqual(order.payer_username, "alice")
        self.assertIsNotNone(order.paid_at)

    async def test_paid_order_is_still_readable(self):
        """Test a completed order can be read back with its new status."""
        # Arrange
        await self.service.pay_order("alice", self._dto())

        # Act
        result = await self.service.get_order("order-1")

        # Assert
        self.assertIs(result.order.status, OrderStatus.SUCCESS)
        self.assertEqual(result.order.payer_name, "alice")

    async def test_pay_order_without_session(self):
        """Test payment without a logged-in payer is refused."""
        await self._assert_pay_fails(None, self._dto(), NOT_LOGGED_IN, 401)

    async def test_pay_order_unknown_payer(self):
        """Test payment from an unknown account is refused as not logged in."""
        await self._assert_pay_fails("mallory", self._dto(), NOT_LOGGED_IN, 401)

    async def test_pay_order_unknown_order(self):
        """Test payment of an unknown order raises OrderNotFoundError."""
        with self.assertRaises(OrderNotFoundError):
            await self.service.pay_order("alice", self._dto(order_no="nope"))

    async def test_pay_order_twice_reports_completed(self):
        """Test paying a completed order reports it as completed."""
        # Arrange
        await self.service.pay_order("alice", self._dto())

        # Act / Assert
        await self._assert_pay_fails("alice", self._dto(), ORDER_COMPLETED)

    async def test_pay_order_failed_status(self):
        """Test a failed order cannot be paid."""
        # Arrange
        await self.book.save_order(
            self._order("order-f", "5.00", status=OrderStatus.FAILED)
        )

        # Act / Assert
        await self._assert_pay_fails(
            "alice", self._dto(order_no="order-f"), ORDER_STATUS_INVALID
        )

    async def test_pay_order_expired(self):
        """Test an expired order cannot be paid."""
        # Arrange
        await self.book.save_order(
            self._order("old", "5.00", expires_at=NOW - timedelta(minutes=1))
        )

        # Act / Assert
        await self._assert_pay_fails("alice", self._dto(order_no="old"), ORDER_EXPIRED)

    async def test_pay_own_order(self):
        """Test the payee cannot pay their own order."""
        await self._assert_pay_fails(
            "shop", self._dto(pay_key="654321"), CANNOT_PAY_OWN_ORDER
        )

    async def test_pay_order_wrong_pay_key(self):
        """Test a wrong pay key is refused and nothing moves."""
        # Act
        await self._assert_pay_fails("alice", self._dto(pay_key="000000"), INVALID_PAY_KEY)

        # Assert
        alice = await self.book.get_account("alice")
        order = await self.book.get_order("order-1")
        self.assertEqual(alice.balance, Decimal("100"))
        self.assertIs(order.status, OrderStatus.PENDING)

    async def test_pay_order_insufficient_balance(self):
        """Test payment above the balance is refused."""
        # Arrange
        await self.book.save_order(self._order("big", "150.00"))

        # Act / Assert
        await self._assert_pay_fails(
            "alice", self._dto(order_no="big"), INSUFFICIENT_BALANCE
        )

    async def test_pay_order_daily_limit(self):
        """Test payment above the remaining daily limit is refused."""
        # Arrange
        await self.book.save_order(self._order("mid", "45.00"))
        await self.service.pay_order("alice", self._dto())

        # Act / Assert
        await self._assert_pay_fails(
            "alice", self._dto(order_no="mid"), DAILY_LIMIT_EXCEEDED
        )

    async def test_demo_orders_stay_payable_long_after_startup(self):
        """Test demo orders do not expire while the sandbox keeps running."""
        # Arrange
        book = SandboxOrderBook.with_demo_data()
        later = datetime.now(timezone.utc) + timedelta(days=2)
        service = SandboxLedgerService(book, clock=lambda: later)

        # Act
        result = await service.get_order("demo-order-1")
        await service.pay_order("alice", self._dto(order_no="demo-order-1"))

        # Assert
        self.assertIs(result.order.status, OrderStatus.PENDING)
        with self.assertRaises(OrderNotFoundError):
            await service.get_order("demo-order-expired")


if __name__ == "__main__":
    unittest.main()
