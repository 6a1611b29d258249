"""Domain enumerations and state-transition rules."""

import enum


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    AWAITING_CLIENT_VALIDATION = "awaiting-client-validation"
    PREPARING = "preparing"
    DELIVERING = "delivering"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# State machine: maps current status -> set of valid next statuses
ORDER_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {
        OrderStatus.AWAITING_CLIENT_VALIDATION,
        OrderStatus.CANCELLED,
    },
    OrderStatus.AWAITING_CLIENT_VALIDATION: {
        OrderStatus.PREPARING,
        OrderStatus.PENDING,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PREPARING: {OrderStatus.DELIVERING, OrderStatus.CANCELLED},
    OrderStatus.DELIVERING: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

# Orders a supplier can still pick up
PENDING_STATUSES = (OrderStatus.PENDING, OrderStatus.AWAITING_CLIENT_VALIDATION)


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    WAVE = "wave"
    ORANGE_MONEY = "orange_money"
    MTN_MONEY = "mtn_money"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    TRANSFERRED = "transferred"


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
