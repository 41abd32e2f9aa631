# storefront/models/order.py
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from storefront.models.common import Address, CustomerDetails, MetaData


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    FAILED = "failed"


class LineItem(BaseModel):
    id: Optional[int] = None
    product_id: Optional[int] = None
    variation_id: Optional[int] = None
    name: str = ""
    quantity: int = 1
    subtotal: float = 0
    total: float = 0


class OrderTotals(BaseModel):
    subtotal: float = 0
    shipping_total: float = 0
    discount_total: float = 0
    total: float = 0
    total_tax: float = 0


class Order(BaseModel):
    """Агрегат заказа, который проверяется на полноту данных."""
    id: Optional[int] = None
    number: Optional[str] = None
    status: Optional[str] = None
    date_created: Optional[str] = None
    date_modified: Optional[str] = None
    customer: CustomerDetails = Field(default_factory=CustomerDetails)
    billing: Address = Field(default_factory=Address)
    shipping: Address = Field(default_factory=Address)
    line_items: List[LineItem] = []
    totals: OrderTotals = Field(default_factory=OrderTotals)
    payment_method: str = ""
    payment_method_title: str = ""
    customer_note: str = ""
    needs_shipping: bool = True
    meta_data: List[MetaData] = []


class OrderValidationResult(BaseModel):
    valid: bool
    errors: List[str] = []


class TransitionValidationResult(BaseModel):
    valid: bool
    reason: str
