# storefront/models/product.py
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class StockStatus(str, Enum):
    IN_STOCK = "IN_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    ON_BACKORDER = "ON_BACKORDER"


class PriceFields(BaseModel):
    """Цены товара/вариации в том виде, как их отдает магазин (строки)."""
    price: Optional[str] = None
    regular_price: Optional[str] = None
    sale_price: Optional[str] = None
    on_sale: bool = False


class PriceValidationResult(BaseModel):
    valid: bool
    errors: List[str] = []


class StockConfig(BaseModel):
    manage_stock: bool = False
    stock_quantity: Optional[int] = None
    backorders_allowed: bool = False


class StockSyncResult(BaseModel):
    product_id: int
    current_status: Optional[StockStatus] = None
    expected_status: StockStatus
    in_sync: bool
    updated: bool = False


class ProductAttribute(BaseModel):
    name: str
    slug: str
    options: List[str] = []
    variation: bool = False


class VariationAttribute(BaseModel):
    # name - slug атрибута товара (pa_size, pa_color)
    name: str
    value: str


class Variation(BaseModel):
    id: Optional[int] = None
    sku: str = ""
    price: Optional[str] = None
    regular_price: Optional[str] = None
    sale_price: Optional[str] = None
    on_sale: bool = False
    stock_status: Optional[StockStatus] = None
    stock_quantity: Optional[int] = None
    attributes: List[VariationAttribute] = []


class VariationIntegrityResult(BaseModel):
    valid: bool
    errors: List[str] = []


class ProductIntegrityReport(BaseModel):
    product_id: int
    price: PriceValidationResult
    stock: StockSyncResult
    variations: VariationIntegrityResult
