# storefront/api/v1/endpoints/shipping.py
from typing import List

from fastapi import APIRouter

from storefront.models.shipping import ShippingQuote, ShippingQuoteRequest, ShippingZone
from storefront.services.shipping import (
    ZONE_HANOI,
    ZONE_HCM,
    ZONE_OTHER_PROVINCES,
    quote_shipping,
)

router = APIRouter()


@router.get("/zones", response_model=List[ShippingZone], summary="Khu vực giao hàng")
async def list_shipping_zones():
    return [ZONE_HCM, ZONE_HANOI, ZONE_OTHER_PROVINCES]


@router.post("/quote", response_model=ShippingQuote, summary="Tính phí giao hàng")
async def get_shipping_quote(payload: ShippingQuoteRequest):
    return quote_shipping(payload)
