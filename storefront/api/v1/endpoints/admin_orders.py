# storefront/api/v1/endpoints/admin_orders.py
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from pydantic import BaseModel

from storefront.dependencies import (
    get_revalidation_notifier,
    get_woocommerce_service,
    verify_admin_api_key,
)
from storefront.models.revalidate import RevalidateContentType
from storefront.services.orders import get_valid_transitions_from, validate_status_transition
from storefront.services.revalidation import RevalidationNotifier
from storefront.services.woocommerce import WooCommerceService, WooCommerceServiceError

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/admin/orders",
    tags=["Admin Orders"],
    dependencies=[Depends(verify_admin_api_key)]
)


class StatusUpdatePayload(BaseModel):
    status: str


class AllowedTransitions(BaseModel):
    order_id: int
    status: str
    allowed: List[str]


async def _load_order(wc_service: WooCommerceService, order_id: int) -> Dict[str, Any]:
    try:
        order = await wc_service.get_order(order_id)
    except WooCommerceServiceError as e:
        raise HTTPException(status_code=e.status_code or status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    if order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Không tìm thấy đơn hàng {order_id}.")
    return order


@router.get(
    "/{order_id}/transitions",
    response_model=AllowedTransitions,
    summary="Các trạng thái có thể chuyển (cho quản trị viên)",
)
async def get_allowed_transitions(
    order_id: int,
    wc_service: WooCommerceService = Depends(get_woocommerce_service),
):
    order = await _load_order(wc_service, order_id)
    current_status = order.get('status', '')
    return AllowedTransitions(
        order_id=order_id,
        status=current_status,
        allowed=get_valid_transitions_from(current_status),
    )


@router.put(
    "/{order_id}/status",
    summary="Cập nhật trạng thái đơn hàng (cho quản trị viên)",
)
async def update_admin_order_status(
    order_id: int,
    payload: StatusUpdatePayload,
    background_tasks: BackgroundTasks,
    wc_service: WooCommerceService = Depends(get_woocommerce_service),
    notifier: RevalidationNotifier = Depends(get_revalidation_notifier),
):
    """Меняет статус заказа, если переход допустим, и уведомляет фронтенд о ревалидации."""
    new_status = payload.status
    order = await _load_order(wc_service, order_id)
    old_status = order.get('status', '')

    transition = validate_status_transition(old_status, new_status)
    if not transition.valid:
        logger.info(f"Rejected status change for order {order_id}: {transition.reason}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=transition.reason)

    logger.info(f"Attempting admin update for order {order_id}: '{old_status}' -> '{new_status}'")
    try:
        updated_order = await wc_service.update_order_status(order_id, new_status)
    except WooCommerceServiceError as e:
        raise HTTPException(status_code=e.status_code or status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

    background_tasks.add_task(
        notifier.send,
        RevalidateContentType.ORDER.value,
        None,
        {"order_id": order_id, "old_status": old_status, "new_status": new_status},
    )
    return updated_order
