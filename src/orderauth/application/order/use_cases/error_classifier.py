"""Classification of ledger failure messages into a fixed set of causes.

The ledger reports failures as human-readable text and does not reliably
send a structured code, so classification is substring based: the table
below is matched in order and the first hit wins. When the transport does
supply a recognized ``error_code`` it takes precedence over the text.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class Cause(str, Enum):
    ORDER_NOT_FOUND = "OrderNotFound"
    UNAUTHENTICATED = "Unauthenticated"
    INSUFFICIENT_BALANCE = "InsufficientBalance"
    INVALID_SECRET = "InvalidSecret"
    SELF_AUTHORIZATION_FORBIDDEN = "SelfAuthorizationForbidden"
    DAILY_LIMIT_EXCEEDED = "DailyLimitExceeded"
    ALREADY_COMPLETED = "AlreadyCompleted"
    UNKNOWN = "Unknown"


# Precedence is the tuple order: a message containing both "未登录" and
# "余额不足" is classified as UNAUTHENTICATED.
SUBSTRING_TABLE: Tuple[Tuple[str, Cause], ...] = (
    ("订单不存在", Cause.ORDER_NOT_FOUND),
    ("订单已过期", Cause.ORDER_NOT_FOUND),
    ("未登录", Cause.UNAUTHENTICATED),
    ("余额不足", Cause.INSUFFICIENT_BALANCE),
    ("安全密码", Cause.INVALID_SECRET),
    ("不能认证自己的订单", Cause.SELF_AUTHORIZATION_FORBIDDEN),
    ("不能支付自己的订单", Cause.SELF_AUTHORIZATION_FORBIDDEN),
    ("每日限额", Cause.DAILY_LIMIT_EXCEEDED),
    ("当日支付限额", Cause.DAILY_LIMIT_EXCEEDED),
    ("已完成", Cause.ALREADY_COMPLETED),
)

ERROR_CODE_TABLE: Dict[str, Cause] = {
    "ORDER_NOT_FOUND": Cause.ORDER_NOT_FOUND,
    "UNAUTHORIZED": Cause.UNAUTHENTICATED,
    "INSUFFICIENT_BALANCE": Cause.INSUFFICIENT_BALANCE,
    "INVALID_PAY_KEY": Cause.INVALID_SECRET,
    "CANNOT_PAY_OWN_ORDER": Cause.SELF_AUTHORIZATION_FORBIDDEN,
    "DAILY_LIMIT_EXCEEDED": Cause.DAILY_LIMIT_EXCEEDED,
    "ORDER_COMPLETED": Cause.ALREADY_COMPLETED,
}

CAUSE_MESSAGES: Dict[Cause, str] = {
    Cause.ORDER_NOT_FOUND: "此积分流转服务不存在或已过期",
    Cause.UNAUTHENTICATED: "请先登录后再进行认证",
    Cause.INSUFFICIENT_BALANCE: "您的积分余额不足",
    Cause.INVALID_SECRET: "安全密码错误",
    Cause.SELF_AUTHORIZATION_FORBIDDEN: "不能认证自己创建的积分流转服务",
    Cause.DAILY_LIMIT_EXCEEDED: "已达到每日认证限额",
    Cause.ALREADY_COMPLETED: "认证完成",
}


class Classification(BaseModel):
    """Result of classifying one failure."""

    model_config = ConfigDict(frozen=True)

    cause: Cause
    message: str
    raw_message: str


class ErrorClassifier:
    """Maps a raw failure message to a ``Cause`` and a user-facing message."""

    def __init__(self, fallback_operation: str = "认证") -> None:
        self.fallback_operation = fallback_operation

    def classify(
        self,
        raw_message: str,
        error_code: Optional[str] = None,
        *,
        operation: Optional[str] = None,
    ) -> Classification:
        cause = self.cause_for(raw_message, error_code)
        if cause is Cause.UNKNOWN:
            message = raw_message or f"{operation or self.fallback_operation}失败"
        else:
            message = CAUSE_MESSAGES[cause]
        return Classification(cause=cause, message=message, raw_message=raw_message)

    @staticmethod
    def cause_for(raw_message: str, error_code: Optional[str] = None) -> Cause:
        if error_code and error_code.upper() in ERROR_CODE_TABLE:
            return ERROR_CODE_TABLE[error_code.upper()]
        for substring, cause in SUBSTRING_TABLE:
            if substring in raw_message:
                return cause
        return Cause.UNKNOWN
