"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Order``: enforces valid lifecycle transitions
  (pending -> awaiting-client-validation -> preparing -> delivering ->
  delivered | cancelled).
- ``NightGuardSchedule.covers`` encapsulates the night roster rule.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from .enums import ORDER_TRANSITIONS, OrderStatus


class InvalidStateTransition(Exception):
    """Raised when an order status change violates the state machine."""


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


@dataclass(frozen=True)
class SupplierSelection:
    """Outcome of supplier selection, fixed on the order at checkout."""

    supplier_id: str
    delivery_cost: int
    delivery_margin: int


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Supplier:
    id: str
    business_name: str = ""
    is_approved: bool = False
    depot: Optional[Coordinates] = None


@dataclass
class NightGuardSchedule:
    supplier_id: str
    date: date
    is_active: bool = True
    covered_zones: list[str] = field(default_factory=list)
    id: Optional[str] = None

    def covers(self, zone_id: str) -> bool:
        return self.is_active and zone_id in self.covered_zones


@dataclass
class OrderLine:
    product_id: str
    quantity: int
    with_consigne: bool
    unit_price: int
    crate_price: int
    consign_price: int

    @property
    def crate_total(self) -> int:
        return self.crate_price * self.quantity

    @property
    def consigne_total(self) -> int:
        return self.consign_price * self.quantity if self.with_consigne else 0

    @property
    def subtotal(self) -> int:
        return self.crate_total + self.consigne_total


@dataclass
class Order:
    id: Optional[str] = None
    client_id: str = ""
    supplier_id: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    accepted_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    def transition_to(self, new_status: OrderStatus) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        allowed = ORDER_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition from {self.status.value} to {new_status.value}"
            )
        self.status = new_status
