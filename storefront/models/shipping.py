# storefront/models/shipping.py
from typing import Literal, Optional

from pydantic import BaseModel, Field


class ShippingZone(BaseModel):
    name: str
    type: Literal["flat_rate", "weight_based"]
    rate: int = 0
    base_rate: int = 0
    weight_rate: int = 0
    weight_unit: int = 500


class ShippingQuoteRequest(BaseModel):
    country: str = "VN"
    state: str = ""
    weight_grams: float = Field(0, ge=0)
    subtotal: float = Field(0, ge=0)


class ShippingQuote(BaseModel):
    zone: Optional[ShippingZone] = None
    cost: float
    free_shipping_applied: bool
    threshold: int
    amount_to_free_shipping: float
