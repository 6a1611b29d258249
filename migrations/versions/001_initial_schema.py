"""Initial schema with PostGIS extension and all core tables.

Revision ID: 001
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geometry
from sqlalchemy.dialects.postgresql import ARRAY


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    # Enable PostGIS extension
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    # ── delivery_zones ────────────────────────────────────────────────
    op.create_table(
        "delivery_zones",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(120), unique=True, nullable=False),
        sa.Column("is_active", sa.Boolean, default=True),
        *_timestamps(),
    )

    # ── suppliers ─────────────────────────────────────────────────────
    op.create_table(
        "suppliers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("business_name", sa.String(200), nullable=False),
        sa.Column("is_approved", sa.Boolean, default=False, nullable=False),
        sa.Column("depot_point", Geometry("POINT", srid=4326), nullable=True),
        sa.Column("depot_lat", sa.Float, nullable=True),
        sa.Column("depot_lng", sa.Float, nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "idx_suppliers_depot",
        "suppliers",
        ["depot_point"],
        postgresql_using="gist",
    )
    op.create_index("idx_suppliers_approved", "suppliers", ["is_approved"])

    # ── supplier_zones ────────────────────────────────────────────────
    op.create_table(
        "supplier_zones",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "supplier_id",
            sa.String(36),
            sa.ForeignKey("suppliers.id"),
            nullable=False,
        ),
        sa.Column(
            "zone_id",
            sa.String(36),
            sa.ForeignKey("delivery_zones.id"),
            nullable=False,
        ),
        sa.Column(
            "approval_status",
            sa.Enum("pending", "approved", "rejected", name="approvalstatus"),
            default="pending",
            nullable=False,
        ),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("supplier_id", "zone_id", name="uq_supplier_zone"),
    )
    op.create_index(
        "idx_supplier_zones_zone",
        "supplier_zones",
        ["zone_id", "approval_status"],
    )

    # ── night_guard_schedule ──────────────────────────────────────────
    op.create_table(
        "night_guard_schedule",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "supplier_id",
            sa.String(36),
            sa.ForeignKey("suppliers.id"),
            nullable=False,
        ),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("is_active", sa.Boolean, default=True, nullable=False),
        sa.Column("covered_zones", ARRAY(sa.String(36)), nullable=False),
        *_timestamps(),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("supplier_id", "date", name="uq_night_guard_day"),
    )
    op.create_index(
        "idx_night_guard_date", "night_guard_schedule", ["date", "is_active"]
    )

    # ── products ──────────────────────────────────────────────────────
    op.create_table(
        "products",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("reference", sa.String(40), unique=True, nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("brand", sa.String(120), nullable=True),
        sa.Column("unit_price", sa.Integer, nullable=False),
        sa.Column("crate_price", sa.Integer, nullable=False),
        sa.Column("consign_price", sa.Integer, nullable=False, default=0),
        sa.Column("is_active", sa.Boolean, default=True),
        *_timestamps(),
    )

    # ── orders ────────────────────────────────────────────────────────
    op.create_table(
        "orders",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("client_id", sa.String(36), nullable=False),
        sa.Column(
            "supplier_id",
            sa.String(36),
            sa.ForeignKey("suppliers.id"),
            nullable=True,
        ),
        sa.Column(
            "zone_id",
            sa.String(36),
            sa.ForeignKey("delivery_zones.id"),
            nullable=True,
        ),
        sa.Column(
            "status",
            sa.Enum(
                "pending",
                "awaiting-client-validation",
                "preparing",
                "delivering",
                "delivered",
                "cancelled",
                name="orderstatus",
            ),
            default="pending",
            nullable=False,
        ),
        sa.Column("subtotal", sa.Integer, nullable=False),
        sa.Column("consigne_total", sa.Integer, nullable=False, default=0),
        sa.Column("client_commission", sa.Integer, nullable=False, default=0),
        sa.Column("supplier_commission", sa.Integer, nullable=False, default=0),
        sa.Column("net_supplier_amount", sa.Integer, nullable=False, default=0),
        sa.Column("delivery_cost", sa.Integer, nullable=False, default=0),
        sa.Column("delivery_margin", sa.Integer, nullable=False, default=0),
        sa.Column("total_amount", sa.Integer, nullable=False),
        sa.Column("delivery_address", sa.String(500), nullable=False),
        sa.Column("delivery_point", Geometry("POINT", srid=4326), nullable=True),
        sa.Column("lat", sa.Float, nullable=False),
        sa.Column("lng", sa.Float, nullable=False),
        sa.Column(
            "payment_method",
            sa.Enum(
                "cash", "wave", "orange_money", "mtn_money", name="paymentmethod"
            ),
            nullable=False,
        ),
        sa.Column(
            "payment_status",
            sa.Enum("pending", "paid", "transferred", name="paymentstatus"),
            default="pending",
            nullable=False,
        ),
        sa.Column("idempotency_key", sa.String(64), unique=True, nullable=True),
        sa.Column("estimated_delivery_time", sa.Integer, nullable=True),
        *_timestamps(),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_orders_delivery",
        "orders",
        ["delivery_point"],
        postgresql_using="gist",
    )
    op.create_index("idx_orders_status", "orders", ["status"])
    op.create_index("idx_orders_client", "orders", ["client_id"])
    op.create_index("idx_orders_supplier", "orders", ["supplier_id"])
    op.create_index("idx_orders_zone", "orders", ["zone_id"])

    # ── order_items ───────────────────────────────────────────────────
    op.create_table(
        "order_items",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "order_id", sa.String(36), sa.ForeignKey("orders.id"), nullable=False
        ),
        sa.Column(
            "product_id",
            sa.String(36),
            sa.ForeignKey("products.id"),
            nullable=False,
        ),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("with_consigne", sa.Boolean, default=False, nullable=False),
        sa.Column("unit_price", sa.Integer, nullable=False),
        sa.Column("crate_price", sa.Integer, nullable=False),
        sa.Column("consign_price", sa.Integer, nullable=False),
        sa.Column("subtotal", sa.Integer, nullable=False),
    )
    op.create_index("idx_order_items_order", "order_items", ["order_id"])


def downgrade() -> None:
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_table("products")
    op.drop_table("night_guard_schedule")
    op.drop_table("supplier_zones")
    op.drop_table("suppliers")
    op.drop_table("delivery_zones")
    op.execute("DROP TYPE IF EXISTS paymentstatus")
    op.execute("DROP TYPE IF EXISTS paymentmethod")
    op.execute("DROP TYPE IF EXISTS orderstatus")
    op.execute("DROP TYPE IF EXISTS approvalstatus")
