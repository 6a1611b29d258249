"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

import datetime as dt
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ravito.domain.entities import Coordinates
from ravito.domain.enums import (
    ApprovalStatus,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)


# ── Requests ──────────────────────────────────────────────────────────


class Point(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def to_domain(self) -> Coordinates:
        return Coordinates(self.lat, self.lng)


class DeliveryQuoteRequest(BaseModel):
    origin: Point
    destination: Point


class SupplierSelectionRequest(BaseModel):
    coordinates: Point
    zone_id: str


class CheckoutItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(..., ge=1, le=500)
    with_consigne: bool = False


class OrderCreateRequest(BaseModel):
    client_id: str
    items: list[CheckoutItemRequest] = Field(..., min_length=1)
    delivery_address: str = Field(..., min_length=1, max_length=500)
    coordinates: Point
    payment_method: PaymentMethod
    zone_id: str
    idempotency_key: Optional[str] = Field(
        None,
        max_length=64,
        description="Client-generated UUID to prevent double orders on retries.",
    )


class OrderStatusUpdateRequest(BaseModel):
    status: OrderStatus
    estimated_delivery_time: Optional[int] = Field(None, ge=0)
    accepted_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None


class ZoneRequest(BaseModel):
    zone_id: str


class ZoneReviewRequest(BaseModel):
    approval_status: ApprovalStatus


class NightGuardRequest(BaseModel):
    covered_zones: list[str] = Field(..., min_length=1)


# ── Responses ─────────────────────────────────────────────────────────


class DeliveryQuoteResponse(BaseModel):
    distance_km: float
    base_cost: int
    margin: int
    client_cost: int


class SupplierSelectionResponse(BaseModel):
    supplier_id: str
    delivery_cost: int
    delivery_margin: int


class OrderItemResponse(BaseModel):
    product_id: str
    quantity: int
    with_consigne: bool
    unit_price: int
    crate_price: int
    consign_price: int
    subtotal: int

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    id: str
    client_id: str
    supplier_id: Optional[str] = None
    zone_id: Optional[str] = None
    status: OrderStatus
    subtotal: int
    consigne_total: int
    client_commission: int
    delivery_cost: int
    delivery_margin: int
    total_amount: int
    delivery_address: str
    lat: float
    lng: float
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    estimated_delivery_time: Optional[int] = None
    created_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    items: list[OrderItemResponse] = []

    model_config = {"from_attributes": True}


class SupplierZoneResponse(BaseModel):
    id: str
    supplier_id: str
    zone_id: str
    approval_status: ApprovalStatus
    approved_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class NightGuardResponse(BaseModel):
    supplier_id: str
    date: dt.date
    is_active: bool
    covered_zones: list[str]

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
