"""
Delivery Pricing Engine  (Strategy Pattern)
===========================================

Formula
-------
Base   = ceil((Base_Fee + Distance x Rate_Per_KM) / Step) x Step
Margin = round(Base x Platform_Margin_Rate)
Client = Base + Margin

* Defaults: 500 FCFA + 150 FCFA/km, rounded up to the next 100 FCFA,
  15 % RAVITO margin.
* ``QuoteProvider`` is the seam for a live courier quote; the simulated
  tariff only uses straight-line distance.

Order totals
------------
Goods      = Sum(crate_price x qty) + Sum(consign_price x qty, if deposit taken)
Commission = round(Goods x client_commission_percent / 100)
Total      = Goods + Commission + Delivery

Amounts are whole FCFA.  Rounding is half-up.

Complexity: O(1) per quote, O(n) per order with n lines.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from .distance import distance_km
from .entities import Coordinates, OrderLine


def round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class DeliveryQuote:
    distance_km: float
    base_cost: int
    margin: int
    client_cost: int


@dataclass(frozen=True)
class OrderTotals:
    subtotal: int
    consigne_total: int
    client_commission: int
    supplier_commission: int
    net_supplier_amount: int
    delivery_cost: int
    total_amount: int


# ── Strategy hierarchy ────────────────────────────────────────────────


class QuoteProvider(ABC):
    @abstractmethod
    def base_cost(self, origin: Coordinates, destination: Coordinates) -> int: ...


class SimulatedCourierTariff(QuoteProvider):
    """Flat fee plus per-km rate on the great-circle distance."""

    def __init__(
        self, base_fee: int = 500, rate_per_km: int = 150, rounding_step: int = 100
    ):
        self.base_fee = base_fee
        self.rate_per_km = rate_per_km
        self.rounding_step = rounding_step

    def cost_for_distance(self, distance: float) -> int:
        raw = self.base_fee + distance * self.rate_per_km
        return math.ceil(raw / self.rounding_step) * self.rounding_step

    def base_cost(self, origin: Coordinates, destination: Coordinates) -> int:
        return self.cost_for_distance(distance_km(origin, destination))


# ── Engine facade ─────────────────────────────────────────────────────


class DeliveryCostEstimator:
    """High-level API used by supplier selection and the API layer."""

    def __init__(
        self, provider: QuoteProvider | None = None, margin_rate: float = 0.15
    ):
        self.provider = provider or SimulatedCourierTariff()
        self.margin_rate = margin_rate

    @classmethod
    def from_settings(cls, settings) -> "DeliveryCostEstimator":
        tariff = SimulatedCourierTariff(
            base_fee=settings.delivery_base_fee,
            rate_per_km=settings.delivery_rate_per_km,
            rounding_step=settings.delivery_rounding_step,
        )
        return cls(tariff, margin_rate=settings.platform_margin_rate)

    def margin_for(self, base_cost: int) -> int:
        return round_half_up(base_cost * self.margin_rate)

    def quote(self, origin: Coordinates, destination: Coordinates) -> DeliveryQuote:
        base = self.provider.base_cost(origin, destination)
        margin = self.margin_for(base)
        return DeliveryQuote(
            distance_km=distance_km(origin, destination),
            base_cost=base,
            margin=margin,
            client_cost=base + margin,
        )


def compute_order_totals(
    lines: Iterable[OrderLine],
    client_commission_percent: float,
    supplier_commission_percent: float = 0.0,
    delivery_cost: int = 0,
) -> OrderTotals:
    lines = list(lines)
    subtotal = sum(line.crate_total for line in lines)
    consigne_total = sum(line.consigne_total for line in lines)
    goods = subtotal + consigne_total

    client_commission = round_half_up(goods * client_commission_percent / 100)
    supplier_commission = round_half_up(goods * supplier_commission_percent / 100)

    return OrderTotals(
        subtotal=subtotal,
        consigne_total=consigne_total,
        client_commission=client_commission,
        supplier_commission=supplier_commission,
        net_supplier_amount=goods - supplier_commission,
        delivery_cost=delivery_cost,
        total_amount=goods + client_commission + delivery_cost,
    )
