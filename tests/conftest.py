"""
Shared test fixtures.

Service tests replace repositories with in-memory fakes exposing the same
async methods, so they run without Docker / PostgreSQL / Redis.  The fakes
build real ORM model instances (never flushed) so response schemas see
the same attributes as in production.  Redis is an ``AsyncMock``.

Repository tests run the real queries on an in-memory SQLite database
(via aiosqlite).  Tables are created from mirror models where PostGIS
Geometry columns become plain String columns.
"""

from __future__ import annotations

import itertools
import uuid
from datetime import date, datetime, timedelta
from typing import AsyncGenerator, Optional
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, event, func
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from ravito.config import Settings
from ravito.domain.entities import Coordinates, Supplier
from ravito.domain.enums import PENDING_STATUSES, ApprovalStatus
from ravito.domain.pricing import DeliveryCostEstimator
from ravito.infrastructure.models import (
    NightGuardScheduleModel,
    OrderItemModel,
    OrderModel,
    ProductModel,
    SupplierModel,
    SupplierZoneModel,
)
from ravito.services.orders import OrderService
from ravito.services.selection import SupplierSelector
from ravito.services.suppliers import SupplierService

TZ = ZoneInfo("Africa/Abidjan")
TODAY = date(2026, 10, 18)

ZONE = "zone-cocody"
OTHER_ZONE = "zone-plateau"
CLIENT = Coordinates(5.36, -4.02)


def at_hour(hour: int, day: date = TODAY) -> datetime:
    return datetime(day.year, day.month, day.day, hour, 30, tzinfo=TZ)


def db_error() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("connection reset"))


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# ── In-memory store ───────────────────────────────────────────────────


class FakeStore:
    def __init__(self):
        self.suppliers: dict[str, SupplierModel] = {}
        self.memberships: list[SupplierZoneModel] = []
        self.schedules: list[NightGuardScheduleModel] = []
        self.products: dict[str, ProductModel] = {}
        self.orders: dict[str, OrderModel] = {}
        self.commits = 0
        self.fail_reads = False
        self._tick = itertools.count()

    # seeding helpers

    def add_supplier(
        self,
        supplier_id: str,
        depot: Optional[tuple[float, float]],
        zones: tuple[str, ...] = (ZONE,),
        approved: bool = True,
    ) -> SupplierModel:
        supplier = SupplierModel(
            id=supplier_id,
            business_name=f"Depot {supplier_id}",
            is_approved=approved,
            depot_lat=depot[0] if depot else None,
            depot_lng=depot[1] if depot else None,
        )
        self.suppliers[supplier_id] = supplier
        for zone_id in zones:
            self.add_membership(supplier_id, zone_id, ApprovalStatus.APPROVED)
        return supplier

    def add_membership(
        self, supplier_id: str, zone_id: str, status: ApprovalStatus
    ) -> SupplierZoneModel:
        membership = SupplierZoneModel(
            id=str(uuid.uuid4()),
            supplier_id=supplier_id,
            zone_id=zone_id,
            approval_status=status,
        )
        self.memberships.append(membership)
        return membership

    def add_night_guard(
        self,
        supplier_id: str,
        zones: list[str],
        day: date = TODAY,
        active: bool = True,
    ) -> NightGuardScheduleModel:
        schedule = NightGuardScheduleModel(
            id=str(uuid.uuid4()),
            supplier_id=supplier_id,
            date=day,
            is_active=active,
            covered_zones=list(zones),
        )
        self.schedules.append(schedule)
        return schedule

    def add_product(
        self, product_id: str, crate_price: int, consign_price: int, unit_price: int = 0
    ) -> ProductModel:
        product = ProductModel(
            id=product_id,
            reference=product_id.upper(),
            name=product_id,
            unit_price=unit_price,
            crate_price=crate_price,
            consign_price=consign_price,
            is_active=True,
        )
        self.products[product_id] = product
        return product

    def created_at(self) -> datetime:
        return datetime(2026, 10, 18, tzinfo=TZ) + timedelta(
            seconds=next(self._tick)
        )

    def check(self) -> None:
        if self.fail_reads:
            raise db_error()


# ── Fake repositories ─────────────────────────────────────────────────


class FakeSupplierRepository:
    def __init__(self, store: FakeStore):
        self.store = store

    async def get_by_id(self, supplier_id):
        return self.store.suppliers.get(supplier_id)

    async def get_approved(self, supplier_ids):
        self.store.check()
        # Reverse insertion order: selection must not depend on it
        return [
            Supplier(
                id=s.id,
                business_name=s.business_name,
                is_approved=s.is_approved,
                depot=(
                    Coordinates(s.depot_lat, s.depot_lng)
                    if s.depot_lat is not None
                    else None
                ),
            )
            for s in reversed(list(self.store.suppliers.values()))
            if s.id in supplier_ids and s.is_approved
        ]


class FakeSupplierZoneRepository:
    def __init__(self, store: FakeStore):
        self.store = store

    async def approved_supplier_ids(self, zone_id):
        self.store.check()
        return [
            m.supplier_id
            for m in self.store.memberships
            if m.zone_id == zone_id and m.approval_status == ApprovalStatus.APPROVED
        ]

    async def approved_zone_ids(self, supplier_id):
        self.store.check()
        return [
            m.zone_id
            for m in self.store.memberships
            if m.supplier_id == supplier_id
            and m.approval_status == ApprovalStatus.APPROVED
        ]

    async def get_by_id(self, membership_id):
        return next((m for m in self.store.memberships if m.id == membership_id), None)

    async def get_membership(self, supplier_id, zone_id):
        return next(
            (
                m
                for m in self.store.memberships
                if m.supplier_id == supplier_id and m.zone_id == zone_id
            ),
            None,
        )

    async def list_for_supplier(self, supplier_id):
        return [m for m in self.store.memberships if m.supplier_id == supplier_id]

    async def create(self, supplier_id, zone_id):
        return self.store.add_membership(supplier_id, zone_id, ApprovalStatus.PENDING)


class FakeNightGuardRepository:
    def __init__(self, store: FakeStore):
        self.store = store

    async def roster_supplier_ids(self, zone_id, day):
        self.store.check()
        return [
            s.supplier_id
            for s in self.store.schedules
            if s.date == day and s.is_active and zone_id in s.covered_zones
        ]

    async def get_for_day(self, supplier_id, day):
        self.store.check()
        return next(
            (
                s
                for s in self.store.schedules
                if s.supplier_id == supplier_id and s.date == day
            ),
            None,
        )

    async def create(self, supplier_id, day, covered_zones):
        return self.store.add_night_guard(supplier_id, covered_zones, day)


class FakeProductRepository:
    def __init__(self, store: FakeStore):
        self.store = store

    async def get_many(self, product_ids):
        return {
            pid: self.store.products[pid]
            for pid in set(product_ids)
            if pid in self.store.products
        }


class FakeOrderRepository:
    def __init__(self, store: FakeStore):
        self.store = store

    async def create_order(self, *, lines, lat, lng, **fields):
        order = OrderModel(
            id=str(uuid.uuid4()),
            lat=lat,
            lng=lng,
            created_at=self.store.created_at(),
            **fields,
        )
        order.items = [
            OrderItemModel(
                id=str(uuid.uuid4()),
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
        self.store.orders[order.id] = order
        return order

    async def commit(self):
        self.store.commits += 1

    async def get_by_id(self, order_id):
        return self.store.orders.get(order_id)

    async def get_by_idempotency_key(self, key):
        return next(
            (o for o in self.store.orders.values() if o.idempotency_key == key),
            None,
        )

    def _newest_first(self, orders):
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    async def list_by_client(self, client_id):
        return self._newest_first(
            o for o in self.store.orders.values() if o.client_id == client_id
        )

    async def list_by_supplier(self, supplier_id):
        return self._newest_first(
            o for o in self.store.orders.values() if o.supplier_id == supplier_id
        )

    async def list_pending(self, zone_ids=None):
        self.store.check()
        return self._newest_first(
            o
            for o in self.store.orders.values()
            if o.status in PENDING_STATUSES
            and (zone_ids is None or o.zone_id in zone_ids)
        )


# ── Builders ──────────────────────────────────────────────────────────


def make_redis(busy: tuple[str, ...] = ()) -> AsyncMock:
    """Redis mock where leases on the *busy* supplier ids are already held."""
    redis = AsyncMock()

    async def _set(key, token, nx=False, ex=None):
        return not any(key == f"lock:supplier:{sid}" for sid in busy)

    redis.set = AsyncMock(side_effect=_set)
    redis.eval = AsyncMock(return_value=1)
    return redis


def make_selector(store: FakeStore, clock: FakeClock, settings: Settings):
    return SupplierSelector(
        FakeSupplierZoneRepository(store),
        FakeNightGuardRepository(store),
        FakeSupplierRepository(store),
        DeliveryCostEstimator.from_settings(settings),
        clock,
        settings.night_start_hour,
        settings.night_end_hour,
    )


def make_order_service(
    store: FakeStore, clock: FakeClock, settings: Settings, redis=None
) -> OrderService:
    return OrderService(
        FakeOrderRepository(store),
        FakeProductRepository(store),
        FakeSupplierZoneRepository(store),
        FakeNightGuardRepository(store),
        make_selector(store, clock, settings),
        redis if redis is not None else make_redis(),
        settings,
        clock,
    )


def make_supplier_service(store: FakeStore, clock: FakeClock) -> SupplierService:
    return SupplierService(
        FakeSupplierRepository(store),
        FakeSupplierZoneRepository(store),
        FakeNightGuardRepository(store),
        clock,
    )


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

# Functions the production Geometry columns are wrapped in on read / write
_POSTGIS_PASSTHROUGH = (
    "ST_AsEWKB",
    "AsEWKB",
    "ST_AsBinary",
    "AsBinary",
    "ST_GeomFromEWKT",
    "GeomFromEWKT",
    "ST_GeomFromEWKB",
    "GeomFromEWKB",
)


def _register_postgis_passthrough(dbapi_connection, connection_record):
    for name in _POSTGIS_PASSTHROUGH:
        dbapi_connection.create_function(name, 1, lambda value: value)


class RowBase(DeclarativeBase):
    pass


# Mirror the production tables without PostGIS Geometry columns
# (SQLite doesn't support them).


class SupplierRow(RowBase):
    __tablename__ = "suppliers"
    id = Column(String(36), primary_key=True)
    business_name = Column(String(200), nullable=False)
    is_approved = Column(Boolean, default=True, nullable=False)
    depot_point = Column(String, nullable=True)  # stub for Geometry
    depot_lat = Column(Float, nullable=True)
    depot_lng = Column(Float, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class SupplierZoneRow(RowBase):
    __tablename__ = "supplier_zones"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    supplier_id = Column(String(36), nullable=False)
    zone_id = Column(String(36), nullable=False)
    approval_status = Column(String(20), default="pending", nullable=False)
    approved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class ProductRow(RowBase):
    __tablename__ = "products"
    id = Column(String(36), primary_key=True)
    reference = Column(String(40), nullable=False)
    name = Column(String(200), nullable=False)
    brand = Column(String(120), nullable=True)
    unit_price = Column(Integer, default=0, nullable=False)
    crate_price = Column(Integer, nullable=False)
    consign_price = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())


class OrderRow(RowBase):
    __tablename__ = "orders"
    id = Column(String(36), primary_key=True)
    client_id = Column(String(36), nullable=False)
    supplier_id = Column(String(36), nullable=True)
    zone_id = Column(String(36), nullable=True)
    status = Column(String(40), default="pending", nullable=False)
    subtotal = Column(Integer, default=0, nullable=False)
    consigne_total = Column(Integer, default=0, nullable=False)
    client_commission = Column(Integer, default=0, nullable=False)
    supplier_commission = Column(Integer, default=0, nullable=False)
    net_supplier_amount = Column(Integer, default=0, nullable=False)
    delivery_cost = Column(Integer, default=0, nullable=False)
    delivery_margin = Column(Integer, default=0, nullable=False)
    total_amount = Column(Integer, default=0, nullable=False)
    delivery_address = Column(String(500), default="Cocody", nullable=False)
    delivery_point = Column(String, nullable=True)  # stub for Geometry
    lat = Column(Float, default=5.36, nullable=False)
    lng = Column(Float, default=-4.02, nullable=False)
    payment_method = Column(String(20), default="cash", nullable=False)
    payment_status = Column(String(20), default="pending", nullable=False)
    idempotency_key = Column(String(64), nullable=True)
    estimated_delivery_time = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False)
    accepted_at = Column(DateTime, nullable=True)
    delivered_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, server_default=func.now())


class OrderItemRow(RowBase):
    __tablename__ = "order_items"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id = Column(String(36), nullable=False)
    product_id = Column(String(36), nullable=False)
    quantity = Column(Integer, nullable=False)
    with_consigne = Column(Boolean, default=False, nullable=False)
    unit_price = Column(Integer, default=0, nullable=False)
    crate_price = Column(Integer, default=0, nullable=False)
    consign_price = Column(Integer, default=0, nullable=False)
    subtotal = Column(Integer, default=0, nullable=False)


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def settings() -> Settings:
    return Settings(
        client_commission_percent=8.0,
        supplier_commission_percent=2.0,
        reservation_max_attempts=2,
        reservation_backoff_seconds=0,
    )


@pytest.fixture
def store() -> FakeStore:
    """Two suppliers approved for ``ZONE``: A (~1.6 km) and B (~18 km)."""
    s = FakeStore()
    s.add_supplier("sup-a", (5.37, -4.03))
    s.add_supplier("sup-b", (5.50, -4.10))
    s.add_product("flag", crate_price=7200, consign_price=3000, unit_price=600)
    s.add_product("awa", crate_price=2400, consign_price=0, unit_price=400)
    return s


@pytest.fixture
def day_clock() -> FakeClock:
    return FakeClock(at_hour(14))


@pytest.fixture
def night_clock() -> FakeClock:
    return FakeClock(at_hour(23))


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create the mirror tables, yield a session, then dispose the engine."""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    event.listen(engine.sync_engine, "connect", _register_postgis_passthrough)

    async with engine.begin() as conn:
        await conn.run_sync(RowBase.metadata.create_all)

    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session

    await engine.dispose()
