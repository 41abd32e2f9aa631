# storefront/services/payments.py
"""
Обработка IPN платежных шлюзов: проверка подписи, поиск заказа и отметка оплаты.
"""
import logging
from typing import Any, Dict, Mapping, Optional

from storefront.core.config import settings
from storefront.services.woocommerce import WooCommerceService
from storefront.utils.payment_signature import parse_gateway_order_ref, verify_momo, verify_vnpay

logger = logging.getLogger(__name__)

# Заказ в этих статусах уже оплачен, повторный IPN его не трогает
PAID_STATUSES = ("processing", "completed")

VNPAY_SUCCESS = {"RspCode": "00", "Message": "Confirm Success"}
VNPAY_ORDER_NOT_FOUND = {"RspCode": "01", "Message": "Order not found"}
VNPAY_INVALID_SIGNATURE = {"RspCode": "97", "Message": "Invalid signature"}


async def _complete_payment(
    wc_service: WooCommerceService,
    order: Dict[str, Any],
    transaction_id: str,
    gateway_title: str,
) -> bool:
    order_id = order.get('id')
    if order.get('status') in PAID_STATUSES:
        logger.info(f"{gateway_title} IPN for order {order_id} ignored: already {order.get('status')}")
        return False
    await wc_service.mark_order_paid(order_id, transaction_id=transaction_id)
    await wc_service.add_order_note(
        order_id,
        f"IPN: Thanh toán {gateway_title} thành công. Mã giao dịch: {transaction_id}",
    )
    logger.info(f"Order {order_id} marked as paid via {gateway_title} IPN (transaction {transaction_id})")
    return True


async def handle_vnpay_ipn(
    params: Mapping[str, Any],
    wc_service: WooCommerceService,
    hash_secret: Optional[str] = None,
) -> Dict[str, str]:
    """
    Ответ VNPay на IPN: 97 - неверная подпись, 01 - заказ не найден,
    00 - принято (оплата отмечается только при vnp_ResponseCode == "00").
    """
    hash_secret = settings.VNPAY_HASH_SECRET if hash_secret is None else hash_secret
    vnp_params = {key: value for key, value in params.items() if key.startswith("vnp_")}

    if not verify_vnpay(vnp_params, hash_secret or ""):
        return dict(VNPAY_INVALID_SIGNATURE)

    txn_ref = str(vnp_params.get("vnp_TxnRef", ""))
    order_id = parse_gateway_order_ref(txn_ref)
    order = await wc_service.get_order(order_id) if order_id else None
    if not order:
        logger.warning(f"VNPay IPN for unknown order reference '{txn_ref}'")
        return dict(VNPAY_ORDER_NOT_FOUND)

    if vnp_params.get("vnp_ResponseCode") == "00":
        await _complete_payment(wc_service, order, txn_ref, "VNPay")
    else:
        logger.info(f"VNPay IPN for order {order_id} reports failure code {vnp_params.get('vnp_ResponseCode')}")
    return dict(VNPAY_SUCCESS)


class MomoIPNResult:
    """Код HTTP-ответа на IPN MoMo и сообщение для тела (None для 204)."""

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        self.message = message


async def handle_momo_ipn(
    data: Optional[Dict[str, Any]],
    wc_service: WooCommerceService,
    access_key: Optional[str] = None,
    secret_key: Optional[str] = None,
) -> MomoIPNResult:
    if not data or not isinstance(data, dict):
        return MomoIPNResult(400, "Invalid request")

    access_key = settings.MOMO_ACCESS_KEY if access_key is None else access_key
    secret_key = settings.MOMO_SECRET_KEY if secret_key is None else secret_key

    reference = data.get("orderId")
    order_id = parse_gateway_order_ref(reference)
    order = await wc_service.get_order(order_id) if order_id else None
    if not order:
        logger.warning(f"MoMo IPN for unknown order reference '{reference}'")
        return MomoIPNResult(404, "Order not found")

    if not verify_momo(data, access_key or "", secret_key or ""):
        return MomoIPNResult(400, "Invalid signature")

    if str(data.get("resultCode")) == "0":
        await _complete_payment(wc_service, order, str(data.get("transId", "")), "MoMo")
    else:
        logger.info(f"MoMo IPN for order {order_id} reports resultCode {data.get('resultCode')}")
    return MomoIPNResult(204)
