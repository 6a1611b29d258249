"""
Order endpoints
===============

POST  /api/v1/orders                 -- checkout (supplier + delivery fixed here)
GET   /api/v1/orders?client_id=...   -- a client's orders, newest first
GET   /api/v1/orders/{order_id}      -- one order with its lines
PATCH /api/v1/orders/{order_id}/status -- lifecycle transition
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ravito.api.dependencies import get_order_service
from ravito.api.middleware import limiter
from ravito.api.schemas import (
    OrderCreateRequest,
    OrderResponse,
    OrderStatusUpdateRequest,
)
from ravito.domain.entities import InvalidStateTransition
from ravito.services.errors import (
    NoSupplierAvailable,
    OrderNotFound,
    SupplierBusy,
    UnknownProduct,
)
from ravito.services.orders import CheckoutItem, OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post(
    "",
    status_code=201,
    response_model=OrderResponse,
    summary="Place an order",
    responses={
        409: {"description": "Every eligible supplier is busy; retry."},
        422: {"description": "No supplier available or unknown product."},
    },
)
@limiter.limit("100/minute")
async def create_order(
    request: Request,
    body: OrderCreateRequest,
    service: OrderService = Depends(get_order_service),
):
    try:
        return await service.create_order(
            client_id=body.client_id,
            items=[
                CheckoutItem(i.product_id, i.quantity, i.with_consigne)
                for i in body.items
            ],
            delivery_address=body.delivery_address,
            coordinates=body.coordinates.to_domain(),
            payment_method=body.payment_method,
            zone_id=body.zone_id,
            idempotency_key=body.idempotency_key,
        )
    except NoSupplierAvailable:
        raise HTTPException(
            status_code=422,
            detail="No supplier available for this zone at this time",
        )
    except UnknownProduct as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except SupplierBusy as exc:
        raise HTTPException(status_code=409, detail=str(exc))


@router.get(
    "",
    response_model=list[OrderResponse],
    summary="List a client's orders",
)
@limiter.limit("100/minute")
async def list_client_orders(
    request: Request,
    client_id: str = Query(...),
    service: OrderService = Depends(get_order_service),
):
    return await service.get_orders_by_client(client_id)


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get an order",
)
@limiter.limit("100/minute")
async def get_order(
    request: Request,
    order_id: str,
    service: OrderService = Depends(get_order_service),
):
    try:
        return await service.get_order(order_id)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found")


@router.patch(
    "/{order_id}/status",
    response_model=OrderResponse,
    summary="Change an order's status",
)
@limiter.limit("100/minute")
async def update_order_status(
    request: Request,
    order_id: str,
    body: OrderStatusUpdateRequest,
    service: OrderService = Depends(get_order_service),
):
    try:
        return await service.update_order_status(
            order_id,
            body.status,
            estimated_delivery_time=body.estimated_delivery_time,
            accepted_at=body.accepted_at,
            delivered_at=body.delivered_at,
        )
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found")
    except InvalidStateTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))
