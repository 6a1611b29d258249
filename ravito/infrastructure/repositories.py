"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from geoalchemy2.functions import ST_MakePoint, ST_SetSRID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import (
    NightGuardScheduleModel,
    OrderItemModel,
    OrderModel,
    ProductModel,
    SupplierModel,
    SupplierZoneModel,
)
from ravito.domain.entities import Coordinates, OrderLine, Supplier
from ravito.domain.enums import PENDING_STATUSES, ApprovalStatus


def geo_point(lat: float, lng: float):
    """PostGIS point (SRID 4326) from latitude and longitude."""
    return ST_SetSRID(ST_MakePoint(lng, lat), 4326)


class SupplierRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, supplier_id: str) -> Optional[SupplierModel]:
        return await self.session.get(SupplierModel, supplier_id)

    async def get_approved(self, supplier_ids: Sequence[str]) -> list[Supplier]:
        """Approved suppliers among *supplier_ids*, as domain entities."""
        if not supplier_ids:
            return []
        result = await self.session.execute(
            select(SupplierModel).where(
                SupplierModel.id.in_(supplier_ids),
                SupplierModel.is_approved.is_(True),
            )
        )
        return [
            Supplier(
                id=s.id,
                business_name=s.business_name,
                is_approved=s.is_approved,
                depot=(
                    Coordinates(s.depot_lat, s.depot_lng)
                    if s.depot_lat is not None and s.depot_lng is not None
                    else None
                ),
            )
            for s in result.scalars().all()
        ]


class SupplierZoneRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def approved_supplier_ids(self, zone_id: str) -> list[str]:
        result = await self.session.execute(
            select(SupplierZoneModel.supplier_id).where(
                SupplierZoneModel.zone_id == zone_id,
                SupplierZoneModel.approval_status == ApprovalStatus.APPROVED,
            )
        )
        return list(result.scalars().all())

    async def approved_zone_ids(self, supplier_id: str) -> list[str]:
        result = await self.session.execute(
            select(SupplierZoneModel.zone_id).where(
                SupplierZoneModel.supplier_id == supplier_id,
                SupplierZoneModel.approval_status == ApprovalStatus.APPROVED,
            )
        )
        return list(result.scalars().all())

    async def get_by_id(self, membership_id: str) -> Optional[SupplierZoneModel]:
        return await self.session.get(SupplierZoneModel, membership_id)

    async def get_membership(
        self, supplier_id: str, zone_id: str
    ) -> Optional[SupplierZoneModel]:
        result = await self.session.execute(
            select(SupplierZoneModel).where(
                SupplierZoneModel.supplier_id == supplier_id,
                SupplierZoneModel.zone_id == zone_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_supplier(self, supplier_id: str) -> list[SupplierZoneModel]:
        result = await self.session.execute(
            select(SupplierZoneModel)
            .where(SupplierZoneModel.supplier_id == supplier_id)
            .order_by(SupplierZoneModel.created_at)
        )
        return list(result.scalars().all())

    async def create(self, supplier_id: str, zone_id: str) -> SupplierZoneModel:
        membership = SupplierZoneModel(
            supplier_id=supplier_id,
            zone_id=zone_id,
            approval_status=ApprovalStatus.PENDING,
        )
        self.session.add(membership)
        await self.session.flush()
        return membership


class NightGuardRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def roster_supplier_ids(self, zone_id: str, day: date) -> list[str]:
        """Suppliers on active night guard for *day* covering *zone_id*."""
        result = await self.session.execute(
            select(NightGuardScheduleModel.supplier_id).where(
                NightGuardScheduleModel.date == day,
                NightGuardScheduleModel.is_active.is_(True),
                NightGuardScheduleModel.covered_zones.contains([zone_id]),
            )
        )
        return list(result.scalars().all())

    async def get_for_day(
        self, supplier_id: str, day: date
    ) -> Optional[NightGuardScheduleModel]:
        result = await self.session.execute(
            select(NightGuardScheduleModel).where(
                NightGuardScheduleModel.supplier_id == supplier_id,
                NightGuardScheduleModel.date == day,
            )
        )
        return result.scalar_one_or_none()

    async def create(
        self, supplier_id: str, day: date, covered_zones: list[str]
    ) -> NightGuardScheduleModel:
        schedule = NightGuardScheduleModel(
            supplier_id=supplier_id,
            date=day,
            is_active=True,
            covered_zones=covered_zones,
        )
        self.session.add(schedule)
        await self.session.flush()
        return schedule


class ProductRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_many(self, product_ids: Iterable[str]) -> dict[str, ProductModel]:
        ids = list(set(product_ids))
        if not ids:
            return {}
        result = await self.session.execute(
            select(ProductModel).where(
                ProductModel.id.in_(ids), ProductModel.is_active.is_(True)
            )
        )
        return {p.id: p for p in result.scalars().all()}


class OrderRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_order(
        self,
        *,
        lines: Sequence[OrderLine],
        lat: float,
        lng: float,
        **fields,
    ) -> OrderModel:
        """Insert the order and its lines in the current transaction."""
        order = OrderModel(
            lat=lat,
            lng=lng,
            delivery_point=geo_point(lat, lng),
            **fields,
        )
        order.items = [
            OrderItemModel(
                product_id=line.product_id,
                quantity=line.quantity,
                with_consigne=line.with_consigne,
                unit_price=line.unit_price,
                crate_price=line.crate_price,
                consign_price=line.consign_price,
                subtotal=line.subtotal,
            )
            for line in lines
        ]
        self.session.add(order)
        await self.session.flush()
        return order

    async def commit(self) -> None:
        await self.session.commit()

    async def get_by_id(self, order_id: str) -> Optional[OrderModel]:
        return await self.session.get(OrderModel, order_id)

    async def get_by_idempotency_key(self, key: str) -> Optional[OrderModel]:
        result = await self.session.execute(
            select(OrderModel).where(OrderModel.idempotency_key == key)
        )
        return result.scalar_one_or_none()

    async def list_by_client(self, client_id: str) -> list[OrderModel]:
        result = await self.session.execute(
            select(OrderModel)
            .where(OrderModel.client_id == client_id)
            .order_by(OrderModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_by_supplier(self, supplier_id: str) -> list[OrderModel]:
        result = await self.session.execute(
            select(OrderModel)
            .where(OrderModel.supplier_id == supplier_id)
            .order_by(OrderModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_pending(
        self, zone_ids: Optional[Sequence[str]] = None
    ) -> list[OrderModel]:
        query = select(OrderModel).where(OrderModel.status.in_(PENDING_STATUSES))
        if zone_ids is not None:
            query = query.where(OrderModel.zone_id.in_(zone_ids))
        result = await self.session.execute(
            query.order_by(OrderModel.created_at.desc())
        )
        return list(result.scalars().all())
