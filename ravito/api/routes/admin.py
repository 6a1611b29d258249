"""
Admin / observability endpoints
===============================

PATCH /api/v1/admin/supplier-zones/{membership_id} -- approve / reject coverage
GET   /api/v1/admin/pending-orders                 -- every pending order
GET   /api/v1/admin/health                         -- simple health check
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from ravito.api.dependencies import get_order_service, get_supplier_service
from ravito.api.middleware import limiter
from ravito.api.schemas import (
    HealthResponse,
    OrderResponse,
    SupplierZoneResponse,
    ZoneReviewRequest,
)
from ravito.services.errors import MembershipNotFound
from ravito.services.orders import OrderService
from ravito.services.suppliers import SupplierService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.patch(
    "/supplier-zones/{membership_id}",
    response_model=SupplierZoneResponse,
    summary="Approve or reject a supplier's zone coverage",
)
@limiter.limit("100/minute")
async def review_zone_membership(
    request: Request,
    membership_id: str,
    body: ZoneReviewRequest,
    service: SupplierService = Depends(get_supplier_service),
):
    try:
        return await service.review_zone_membership(
            membership_id, body.approval_status
        )
    except MembershipNotFound:
        raise HTTPException(status_code=404, detail="Zone membership not found")


@router.get(
    "/pending-orders",
    response_model=list[OrderResponse],
    summary="List every pending order",
)
@limiter.limit("100/minute")
async def list_all_pending(
    request: Request,
    service: OrderService = Depends(get_order_service),
):
    return await service.get_pending_orders()


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
