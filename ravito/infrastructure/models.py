"""
SQLAlchemy ORM models  (maps to PostgreSQL + PostGIS).

Tables
------
* ``delivery_zones``        -- geographic delivery sectors
* ``suppliers``             -- depots that fulfil orders
* ``supplier_zones``        -- supplier <-> zone coverage with approval status
* ``night_guard_schedule``  -- per-date night roster with covered zones
* ``products``              -- beverage catalogue (crate + deposit prices)
* ``orders``                -- checkouts with the supplier fixed at creation
* ``order_items``           -- order lines with prices frozen at checkout

Indexes
-------
* **GIST** on geometry columns (depot_point, delivery_point).
* **B-Tree** on ``status``, ``client_id``, ``supplier_id``, ``zone_id`` and
  the roster ``(supplier_id, date)`` pair used by supplier selection.
"""

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import relationship
from geoalchemy2 import Geometry

from .database import Base
from ravito.domain.enums import (
    ApprovalStatus,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)


def _uuid() -> str:
    return str(uuid.uuid4())


def _values(enum_cls):
    return [member.value for member in enum_cls]


class ZoneModel(Base):
    __tablename__ = "delivery_zones"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(120), nullable=False, unique=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class SupplierModel(Base):
    __tablename__ = "suppliers"

    id = Column(String(36), primary_key=True, default=_uuid)
    business_name = Column(String(200), nullable=False)
    is_approved = Column(Boolean, default=False, nullable=False)

    depot_point = Column(Geometry("POINT", srid=4326), nullable=True)
    # Plain floats for fast reads (avoids ST_X / ST_Y)
    depot_lat = Column(Float, nullable=True)
    depot_lng = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_suppliers_depot", "depot_point", postgresql_using="gist"),
        Index("idx_suppliers_approved", "is_approved"),
    )


class SupplierZoneModel(Base):
    __tablename__ = "supplier_zones"

    id = Column(String(36), primary_key=True, default=_uuid)
    supplier_id = Column(String(36), ForeignKey("suppliers.id"), nullable=False)
    zone_id = Column(String(36), ForeignKey("delivery_zones.id"), nullable=False)
    approval_status = Column(
        Enum(ApprovalStatus, values_callable=_values),
        default=ApprovalStatus.PENDING,
        nullable=False,
    )
    approved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("supplier_id", "zone_id", name="uq_supplier_zone"),
        Index("idx_supplier_zones_zone", "zone_id", "approval_status"),
    )


class NightGuardScheduleModel(Base):
    __tablename__ = "night_guard_schedule"

    id = Column(String(36), primary_key=True, default=_uuid)
    supplier_id = Column(String(36), ForeignKey("suppliers.id"), nullable=False)
    date = Column(Date, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    covered_zones = Column(ARRAY(String(36)), nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("supplier_id", "date", name="uq_night_guard_day"),
        Index("idx_night_guard_date", "date", "is_active"),
    )


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=_uuid)
    reference = Column(String(40), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    brand = Column(String(120), nullable=True)
    unit_price = Column(Integer, nullable=False)
    crate_price = Column(Integer, nullable=False)
    consign_price = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=_uuid)
    client_id = Column(String(36), nullable=False)
    supplier_id = Column(String(36), ForeignKey("suppliers.id"), nullable=True)
    zone_id = Column(String(36), ForeignKey("delivery_zones.id"), nullable=True)

    status = Column(
        Enum(OrderStatus, values_callable=_values),
        default=OrderStatus.PENDING,
        nullable=False,
    )

    subtotal = Column(Integer, nullable=False)
    consigne_total = Column(Integer, nullable=False, default=0)
    client_commission = Column(Integer, nullable=False, default=0)
    supplier_commission = Column(Integer, nullable=False, default=0)
    net_supplier_amount = Column(Integer, nullable=False, default=0)
    delivery_cost = Column(Integer, nullable=False, default=0)
    delivery_margin = Column(Integer, nullable=False, default=0)
    total_amount = Column(Integer, nullable=False)

    delivery_address = Column(String(500), nullable=False)
    delivery_point = Column(Geometry("POINT", srid=4326), nullable=True)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)

    payment_method = Column(
        Enum(PaymentMethod, values_callable=_values), nullable=False
    )
    payment_status = Column(
        Enum(PaymentStatus, values_callable=_values),
        default=PaymentStatus.PENDING,
        nullable=False,
    )
    idempotency_key = Column(String(64), unique=True, nullable=True)
    estimated_delivery_time = Column(Integer, nullable=True)  # minutes

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    items = relationship(
        "OrderItemModel", lazy="selectin", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_orders_delivery", "delivery_point", postgresql_using="gist"),
        Index("idx_orders_status", "status"),
        Index("idx_orders_client", "client_id"),
        Index("idx_orders_supplier", "supplier_id"),
        Index("idx_orders_zone", "zone_id"),
    )


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    with_consigne = Column(Boolean, default=False, nullable=False)
    unit_price = Column(Integer, nullable=False)
    crate_price = Column(Integer, nullable=False)
    consign_price = Column(Integer, nullable=False)
    subtotal = Column(Integer, nullable=False)

    __table_args__ = (Index("idx_order_items_order", "order_id"),)
