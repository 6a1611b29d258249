"""
Checkout and Order Lifecycle
============================

Checkout per request
--------------------
1. Return the existing order when the idempotency key was already used.
2. Freeze catalogue prices into order lines and compute the totals.
3. Rank eligible suppliers once (cheapest delivery first).
4. Lease the best supplier in Redis.  A leased supplier is retried with
   a short backoff before checkout settles for the next-ranked (dearer)
   one; a lease is normally held only for one insert, so waiting briefly
   usually keeps the cheapest delivery.
5. Insert order + lines and commit while the lease is held.

No order row is written unless a supplier was selected and leased.

Pending orders
--------------
A supplier sees pending orders in its approved zones.  During the night
window only the zones of its active night-guard roster for the day count.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from redis.asyncio import Redis
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import NoSupplierAvailable, OrderNotFound, SupplierBusy, UnknownProduct
from .selection import SupplierSelector
from ravito.domain.clock import Clock, is_night_time, zone_clock
from ravito.domain.entities import Coordinates, NightGuardSchedule, Order, OrderLine
from ravito.domain.enums import OrderStatus, PaymentMethod, PaymentStatus
from ravito.domain.pricing import compute_order_totals
from ravito.domain.selection import CandidateQuote
from ravito.infrastructure.locks import supplier_lease
from ravito.infrastructure.models import OrderModel
from ravito.infrastructure.repositories import (
    NightGuardRepository,
    OrderRepository,
    ProductRepository,
    SupplierZoneRepository,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutItem:
    product_id: str
    quantity: int
    with_consigne: bool = False


class OrderService:
    def __init__(
        self,
        orders: OrderRepository,
        products: ProductRepository,
        zones: SupplierZoneRepository,
        night_guard: NightGuardRepository,
        selector: SupplierSelector,
        redis: Redis,
        settings,
        clock: Clock,
    ):
        self.orders = orders
        self.products = products
        self.zones = zones
        self.night_guard = night_guard
        self.selector = selector
        self.redis = redis
        self.settings = settings
        self.clock = clock

    @classmethod
    def for_session(
        cls,
        session: AsyncSession,
        redis: Redis,
        settings,
        clock: Optional[Clock] = None,
    ) -> "OrderService":
        clock = clock or zone_clock(settings.timezone)
        return cls(
            OrderRepository(session),
            ProductRepository(session),
            SupplierZoneRepository(session),
            NightGuardRepository(session),
            SupplierSelector.for_session(session, settings, clock),
            redis,
            settings,
            clock,
        )

    # ── Checkout ──────────────────────────────────────────────────────

    async def create_order(
        self,
        *,
        client_id: str,
        items: Sequence[CheckoutItem],
        delivery_address: str,
        coordinates: Coordinates,
        payment_method: PaymentMethod,
        zone_id: str,
        idempotency_key: Optional[str] = None,
    ) -> OrderModel:
        if idempotency_key:
            existing = await self.orders.get_by_idempotency_key(idempotency_key)
            if existing:
                return existing

        lines = await self._price_lines(items)

        ranked = await self.selector.rank_suppliers(coordinates, zone_id)
        if not ranked:
            raise NoSupplierAvailable(
                f"No supplier available for zone {zone_id} at this time"
            )

        attempts = self.settings.reservation_max_attempts
        for candidate in ranked:
            for attempt in range(1, attempts + 1):
                lease = supplier_lease(
                    self.redis,
                    candidate.supplier_id,
                    self.settings.reservation_ttl_seconds,
                )
                if await lease.acquire():
                    break
                logger.debug(
                    "Supplier %s leased elsewhere (attempt %d/%d)",
                    candidate.supplier_id,
                    attempt,
                    attempts,
                )
                if attempt < attempts:
                    await asyncio.sleep(self.settings.reservation_backoff_seconds)
            else:
                logger.warning(
                    "Supplier %s still leased after %d attempts, trying next",
                    candidate.supplier_id,
                    attempts,
                )
                continue

            try:
                order = await self._persist(
                    candidate,
                    lines,
                    client_id=client_id,
                    delivery_address=delivery_address,
                    coordinates=coordinates,
                    payment_method=payment_method,
                    zone_id=zone_id,
                    idempotency_key=idempotency_key,
                )
            finally:
                await lease.release()
            logger.info(
                "Order %s assigned to supplier %s (delivery %d FCFA)",
                order.id,
                order.supplier_id,
                order.delivery_cost,
            )
            return order

        raise SupplierBusy(f"All suppliers for zone {zone_id} are busy, retry later")

    async def _price_lines(self, items: Sequence[CheckoutItem]) -> list[OrderLine]:
        catalogue = await self.products.get_many(item.product_id for item in items)
        lines: list[OrderLine] = []
        for item in items:
            product = catalogue.get(item.product_id)
            if product is None:
                raise UnknownProduct(f"Unknown product {item.product_id}")
            lines.append(
                OrderLine(
                    product_id=product.id,
                    quantity=item.quantity,
                    with_consigne=item.with_consigne,
                    unit_price=product.unit_price,
                    crate_price=product.crate_price,
                    consign_price=product.consign_price,
                )
            )
        return lines

    async def _persist(
        self,
        candidate: CandidateQuote,
        lines: list[OrderLine],
        *,
        client_id: str,
        delivery_address: str,
        coordinates: Coordinates,
        payment_method: PaymentMethod,
        zone_id: str,
        idempotency_key: Optional[str],
    ) -> OrderModel:
        totals = compute_order_totals(
            lines,
            self.settings.client_commission_percent,
            self.settings.supplier_commission_percent,
            delivery_cost=candidate.quote.client_cost,
        )
        order = await self.orders.create_order(
            lines=lines,
            lat=coordinates.lat,
            lng=coordinates.lng,
            client_id=client_id,
            supplier_id=candidate.supplier_id,
            zone_id=zone_id,
            status=OrderStatus.PENDING,
            subtotal=totals.subtotal,
            consigne_total=totals.consigne_total,
            client_commission=totals.client_commission,
            supplier_commission=totals.supplier_commission,
            net_supplier_amount=totals.net_supplier_amount,
            delivery_cost=totals.delivery_cost,
            delivery_margin=candidate.quote.margin,
            total_amount=totals.total_amount,
            delivery_address=delivery_address,
            payment_method=payment_method,
            payment_status=PaymentStatus.PENDING,
            idempotency_key=idempotency_key,
        )
        await self.orders.commit()
        return order

    # ── Queries ───────────────────────────────────────────────────────

    async def get_order(self, order_id: str) -> OrderModel:
        order = await self.orders.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    async def get_orders_by_client(self, client_id: str) -> list[OrderModel]:
        return await self.orders.list_by_client(client_id)

    async def get_orders_by_supplier(self, supplier_id: str) -> list[OrderModel]:
        return await self.orders.list_by_supplier(supplier_id)

    async def get_pending_orders(
        self, supplier_id: Optional[str] = None
    ) -> list[OrderModel]:
        """Pending orders, restricted to what *supplier_id* may serve now."""
        try:
            if supplier_id is None:
                return await self.orders.list_pending()

            zone_ids = await self.zones.approved_zone_ids(supplier_id)
            if not zone_ids:
                return []

            now = self.clock()
            if is_night_time(
                now.hour, self.settings.night_start_hour, self.settings.night_end_hour
            ):
                row = await self.night_guard.get_for_day(supplier_id, now.date())
                if row is None:
                    return []
                schedule = NightGuardSchedule(
                    supplier_id=row.supplier_id,
                    date=row.date,
                    is_active=row.is_active,
                    covered_zones=list(row.covered_zones),
                )
                zone_ids = [z for z in zone_ids if schedule.covers(z)]
                if not zone_ids:
                    return []

            return await self.orders.list_pending(zone_ids)
        except SQLAlchemyError:
            logger.exception("Pending orders lookup failed (supplier=%s)", supplier_id)
            return []

    # ── Lifecycle ─────────────────────────────────────────────────────

    async def update_order_status(
        self,
        order_id: str,
        status: OrderStatus,
        *,
        estimated_delivery_time: Optional[int] = None,
        accepted_at: Optional[datetime] = None,
        delivered_at: Optional[datetime] = None,
    ) -> OrderModel:
        """Apply a status change; raises ``InvalidStateTransition`` if illegal."""
        order = await self.get_order(order_id)

        Order(id=order.id, status=OrderStatus(order.status)).transition_to(status)

        order.status = status
        if estimated_delivery_time is not None:
            order.estimated_delivery_time = estimated_delivery_time
        if status == OrderStatus.PREPARING:
            order.accepted_at = accepted_at or self.clock()
        if status == OrderStatus.DELIVERED:
            order.delivered_at = delivered_at or self.clock()
        return order
