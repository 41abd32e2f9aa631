# storefront/api/v1/endpoints/orders.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from storefront.dependencies import get_woocommerce_service
from storefront.models.order import Order, OrderValidationResult, TransitionValidationResult
from storefront.services.orders import (
    order_from_woocommerce,
    validate_order_completeness,
    validate_status_transition,
)
from storefront.services.woocommerce import WooCommerceService, WooCommerceServiceError

logger = logging.getLogger(__name__)
router = APIRouter()


class TransitionCheckPayload(BaseModel):
    from_status: str
    to_status: str


@router.post(
    "/validate",
    response_model=OrderValidationResult,
    summary="Kiểm tra tính đầy đủ của đơn hàng",
)
async def validate_order(order: Order):
    """Проверяет переданный заказ; ошибки возвращаются кодами в порядке проверки."""
    result = validate_order_completeness(order)
    if not result.valid:
        logger.info(f"Order {order.id or '<new>'} incomplete: {result.errors}")
    return result


@router.post(
    "/transitions/validate",
    response_model=TransitionValidationResult,
    summary="Kiểm tra chuyển trạng thái đơn hàng",
)
async def check_status_transition(payload: TransitionCheckPayload):
    return validate_status_transition(payload.from_status, payload.to_status)


@router.get(
    "/{order_id}/completeness",
    response_model=OrderValidationResult,
    summary="Kiểm tra đơn hàng WooCommerce",
)
async def get_order_completeness(
    order_id: int,
    wc_service: WooCommerceService = Depends(get_woocommerce_service),
):
    try:
        order_data = await wc_service.get_order(order_id)
    except WooCommerceServiceError as e:
        raise HTTPException(status_code=e.status_code or status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

    if order_data is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Không tìm thấy đơn hàng {order_id}.")

    result = validate_order_completeness(order_from_woocommerce(order_data))
    logger.info(f"Order {order_id} completeness: valid={result.valid}, errors={result.errors}")
    return result
