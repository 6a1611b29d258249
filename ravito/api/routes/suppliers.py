"""
Supplier endpoints
==================

GET  /api/v1/suppliers/{id}/orders             -- orders assigned to the supplier
GET  /api/v1/suppliers/{id}/pending-orders     -- orders it may pick up now
POST /api/v1/suppliers/{id}/zones              -- request coverage of a zone
GET  /api/v1/suppliers/{id}/zones              -- zone memberships
GET  /api/v1/suppliers/{id}/night-guard        -- today's night roster
PUT  /api/v1/suppliers/{id}/night-guard        -- save today's night roster
POST /api/v1/suppliers/{id}/night-guard/toggle -- join / leave tonight's guard
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from ravito.api.dependencies import get_order_service, get_supplier_service
from ravito.api.middleware import limiter
from ravito.api.schemas import (
    NightGuardRequest,
    NightGuardResponse,
    OrderResponse,
    SupplierZoneResponse,
    ZoneRequest,
)
from ravito.services.errors import InvalidNightGuardSchedule, SupplierNotFound
from ravito.services.orders import OrderService
from ravito.services.suppliers import SupplierService

router = APIRouter(prefix="/suppliers", tags=["suppliers"])


@router.get(
    "/{supplier_id}/orders",
    response_model=list[OrderResponse],
    summary="Orders assigned to a supplier",
)
@limiter.limit("100/minute")
async def list_supplier_orders(
    request: Request,
    supplier_id: str,
    service: OrderService = Depends(get_order_service),
):
    return await service.get_orders_by_supplier(supplier_id)


@router.get(
    "/{supplier_id}/pending-orders",
    response_model=list[OrderResponse],
    summary="Pending orders the supplier may serve now",
)
@limiter.limit("100/minute")
async def list_pending_orders(
    request: Request,
    supplier_id: str,
    service: OrderService = Depends(get_order_service),
):
    return await service.get_pending_orders(supplier_id)


@router.post(
    "/{supplier_id}/zones",
    status_code=201,
    response_model=SupplierZoneResponse,
    summary="Request coverage of a delivery zone",
)
@limiter.limit("100/minute")
async def request_zone(
    request: Request,
    supplier_id: str,
    body: ZoneRequest,
    service: SupplierService = Depends(get_supplier_service),
):
    try:
        return await service.request_zone(supplier_id, body.zone_id)
    except SupplierNotFound:
        raise HTTPException(status_code=404, detail="Supplier not found")


@router.get(
    "/{supplier_id}/zones",
    response_model=list[SupplierZoneResponse],
    summary="List zone memberships",
)
@limiter.limit("100/minute")
async def list_zones(
    request: Request,
    supplier_id: str,
    service: SupplierService = Depends(get_supplier_service),
):
    return await service.list_supplier_zones(supplier_id)


@router.get(
    "/{supplier_id}/night-guard",
    response_model=NightGuardResponse,
    summary="Today's night-guard roster",
)
@limiter.limit("100/minute")
async def get_night_guard(
    request: Request,
    supplier_id: str,
    service: SupplierService = Depends(get_supplier_service),
):
    schedule = await service.get_night_guard(supplier_id)
    if schedule is None:
        raise HTTPException(status_code=404, detail="No night guard scheduled today")
    return schedule


@router.put(
    "/{supplier_id}/night-guard",
    response_model=NightGuardResponse,
    summary="Save today's night-guard roster",
)
@limiter.limit("100/minute")
async def save_night_guard(
    request: Request,
    supplier_id: str,
    body: NightGuardRequest,
    service: SupplierService = Depends(get_supplier_service),
):
    try:
        return await service.save_night_guard(supplier_id, body.covered_zones)
    except SupplierNotFound:
        raise HTTPException(status_code=404, detail="Supplier not found")
    except InvalidNightGuardSchedule as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@router.post(
    "/{supplier_id}/night-guard/toggle",
    response_model=NightGuardResponse,
    summary="Join or leave tonight's guard",
)
@limiter.limit("100/minute")
async def toggle_night_guard(
    request: Request,
    supplier_id: str,
    service: SupplierService = Depends(get_supplier_service),
):
    schedule = await service.toggle_night_guard(supplier_id)
    if schedule is None:
        raise HTTPException(status_code=404, detail="No night guard scheduled today")
    return schedule
