# storefront/api/v1/router.py
from fastapi import APIRouter

from storefront.api.v1.endpoints import (
    admin_orders,
    content,
    coupons,
    orders,
    payments,
    products,
    reviews,
    shipping,
)

api_router_v1 = APIRouter()

api_router_v1.include_router(coupons.router, prefix="/coupons", tags=["Coupons"])
api_router_v1.include_router(orders.router, prefix="/orders", tags=["Orders"])
api_router_v1.include_router(admin_orders.router)
api_router_v1.include_router(reviews.router, prefix="/products", tags=["Reviews"])
api_router_v1.include_router(products.router, prefix="/products", tags=["Products"])
api_router_v1.include_router(content.router, prefix="/content", tags=["Content"])
api_router_v1.include_router(shipping.router, prefix="/shipping", tags=["Shipping"])
api_router_v1.include_router(payments.router, prefix="/payments", tags=["Payments"])
