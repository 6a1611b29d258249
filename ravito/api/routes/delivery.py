"""
Delivery endpoints
==================

POST /api/v1/delivery/quote     -- delivery cost between two points
POST /api/v1/delivery/selection -- preview the supplier checkout would pick
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from ravito.api.dependencies import get_selector
from ravito.api.middleware import limiter
from ravito.api.schemas import (
    DeliveryQuoteRequest,
    DeliveryQuoteResponse,
    SupplierSelectionRequest,
    SupplierSelectionResponse,
)
from ravito.config import settings
from ravito.domain.pricing import DeliveryCostEstimator
from ravito.services.selection import SupplierSelector

router = APIRouter(prefix="/delivery", tags=["delivery"])


@router.post(
    "/quote",
    response_model=DeliveryQuoteResponse,
    summary="Estimate delivery cost between two points",
)
@limiter.limit("100/minute")
async def quote_delivery(request: Request, body: DeliveryQuoteRequest):
    estimator = DeliveryCostEstimator.from_settings(settings)
    return estimator.quote(body.origin.to_domain(), body.destination.to_domain())


@router.post(
    "/selection",
    response_model=SupplierSelectionResponse,
    summary="Preview the cheapest eligible supplier",
    responses={404: {"description": "No supplier available for this zone/time."}},
)
@limiter.limit("100/minute")
async def preview_selection(
    request: Request,
    body: SupplierSelectionRequest,
    selector: SupplierSelector = Depends(get_selector),
):
    selection = await selector.select_best_supplier(
        body.coordinates.to_domain(), body.zone_id
    )
    if selection is None:
        raise HTTPException(
            status_code=404,
            detail="No supplier available for this zone at this time",
        )
    return selection
