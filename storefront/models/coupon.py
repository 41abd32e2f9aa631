# storefront/models/coupon.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class DiscountType(str, Enum):
    PERCENT = "percent"
    FIXED_CART = "fixed_cart"
    FIXED_PRODUCT = "fixed_product"


class CouponRestrictions(BaseModel):
    minimum_amount: float = 0
    maximum_amount: Optional[float] = None
    usage_limit: Optional[int] = None
    usage_limit_per_user: Optional[int] = None
    usage_count: int = 0
    exclude_sale_items: bool = False
    individual_use: bool = False


class Coupon(BaseModel):
    id: Optional[int] = None
    code: str
    discount_type: DiscountType = DiscountType.FIXED_CART
    amount: float = 0
    free_shipping: bool = False
    restrictions: CouponRestrictions = Field(default_factory=CouponRestrictions)
    expiry_date: Optional[datetime] = None
    # Для fixed_product: на какие товары распространяется скидка (пусто = на все)
    product_ids: List[int] = []


class CartItem(BaseModel):
    product_id: int
    quantity: int = Field(1, gt=0)
    price: float = Field(..., ge=0)
    on_sale: bool = False


class Cart(BaseModel):
    items: List[CartItem] = []
    subtotal: float = 0


class CouponValidationResult(BaseModel):
    is_valid: bool
    error_code: Optional[str] = None
    message: str
