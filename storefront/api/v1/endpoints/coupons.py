# storefront/api/v1/endpoints/coupons.py
import logging
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from storefront.dependencies import get_woocommerce_service
from storefront.models.coupon import Cart, CartItem
from storefront.services.coupons import (
    calculate_cart_subtotal,
    calculate_discount,
    count_user_usage,
    coupon_from_woocommerce,
    validate_coupon_applicability,
)
from storefront.services.woocommerce import WooCommerceService, WooCommerceServiceError

router = APIRouter()
logger = logging.getLogger(__name__)

COUPON_NOT_FOUND_MESSAGE = "Mã giảm giá không tồn tại."


class CouponValidationRequest(BaseModel):
    code: str
    items: List[CartItem] = []
    user_id: Optional[Union[int, str]] = None
    email: Optional[str] = None


class CouponValidationResponse(BaseModel):
    is_valid: bool
    code: str
    error_code: Optional[str] = None
    message: str
    discount_type: Optional[str] = None
    amount: Optional[float] = None
    subtotal: float = 0
    discount: float = 0
    free_shipping: bool = False


@router.post(
    "/validate",
    response_model=CouponValidationResponse,
    summary="Kiểm tra mã giảm giá",
    description="Проверяет применимость купона WooCommerce к корзине: срок, суммы, лимиты, товары со скидкой."
)
async def validate_coupon(
    payload: CouponValidationRequest,
    wc_service: WooCommerceService = Depends(get_woocommerce_service),
):
    coupon_code = payload.code.strip()
    if not coupon_code:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Mã giảm giá không được để trống.")

    subtotal = calculate_cart_subtotal(payload.items)

    try:
        coupon_data = await wc_service.get_coupon_by_code(coupon_code)
    except WooCommerceServiceError as e:
        logger.error(f"WooCommerce error during coupon validation for '{coupon_code}': {e.message}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=f"Lỗi khi kiểm tra mã giảm giá: {e.message}")

    if not coupon_data:
        logger.info(f"Coupon code '{coupon_code}' not found.")
        return CouponValidationResponse(
            is_valid=False,
            code=coupon_code,
            error_code="coupon_not_found",
            message=COUPON_NOT_FOUND_MESSAGE,
            subtotal=subtotal,
        )

    coupon = coupon_from_woocommerce(coupon_data)
    cart = Cart(items=payload.items, subtotal=subtotal)

    # Гость определяется по email, зарегистрированный покупатель - по ID
    current_user = payload.user_id if payload.user_id is not None else payload.email
    usage = count_user_usage(coupon_data, payload.user_id, payload.email)

    result = validate_coupon_applicability(coupon, cart, current_user_id=current_user, user_usage_count=usage)
    response = CouponValidationResponse(
        is_valid=result.is_valid,
        code=coupon.code or coupon_code,
        error_code=result.error_code,
        message=result.message,
        discount_type=coupon.discount_type.value,
        amount=coupon.amount,
        subtotal=subtotal,
    )
    if result.is_valid:
        response.discount = calculate_discount(coupon, cart)
        response.free_shipping = coupon.free_shipping
        logger.info(f"Coupon '{coupon_code}' valid for subtotal {subtotal}, discount {response.discount}")
    else:
        logger.info(f"Coupon '{coupon_code}' rejected: {result.error_code}")
    return response
