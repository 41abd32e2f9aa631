# storefront/utils/payment_signature.py
"""
Подписи платежных шлюзов VNPay и MoMo.

VNPay: HMAC-SHA512 по отсортированным полям vnp_*, закодированным как
urlencode() в PHP (пробел -> '+'), соединенным через '&'.
MoMo: HMAC-SHA256 по строке key=value в фиксированном порядке полей ответа/IPN.
"""
import hashlib
import hmac
import logging
from typing import Any, Mapping, Optional
from urllib.parse import quote_plus

logger = logging.getLogger(__name__)

VNPAY_PREFIX = "vnp_"
VNPAY_HASH_FIELDS_EXCLUDED = ("vnp_SecureHash", "vnp_SecureHashType")

# Порядок полей в подписи ответа/IPN MoMo (accessKey добавляется первым)
MOMO_RESULT_FIELDS = (
    "amount",
    "extraData",
    "message",
    "orderId",
    "orderInfo",
    "orderType",
    "partnerCode",
    "payType",
    "requestId",
    "responseTime",
    "resultCode",
    "transId",
)


class PaymentSignatureError(Exception):
    """Ошибка при формировании подписи (например, не задан секрет)."""
    pass


def _hmac_hex(secret: str, message: str, digest) -> str:
    if not secret:
        raise PaymentSignatureError("Payment gateway secret is not configured")
    return hmac.new(secret.encode('utf-8'), message.encode('utf-8'), digest).hexdigest()


def _signatures_match(received: Optional[str], calculated: str) -> bool:
    if not received:
        return False
    return hmac.compare_digest(received.encode('utf-8'), calculated.encode('utf-8'))


# --- VNPay ---

def vnpay_hash_data(params: Mapping[str, Any]) -> str:
    """Строка для подписи VNPay: только поля vnp_*, без самой подписи, по алфавиту."""
    fields = {
        key: str(value)
        for key, value in params.items()
        if key.startswith(VNPAY_PREFIX) and key not in VNPAY_HASH_FIELDS_EXCLUDED
    }
    return "&".join(f"{quote_plus(key)}={quote_plus(fields[key])}" for key in sorted(fields))


def sign_vnpay(params: Mapping[str, Any], hash_secret: str) -> str:
    return _hmac_hex(hash_secret, vnpay_hash_data(params), hashlib.sha512)


def verify_vnpay(params: Mapping[str, Any], hash_secret: str) -> bool:
    received = params.get("vnp_SecureHash")
    try:
        calculated = sign_vnpay(params, hash_secret)
    except PaymentSignatureError as e:
        logger.error(f"VNPay signature check impossible: {e}")
        return False
    is_valid = _signatures_match(str(received) if received else None, calculated)
    if not is_valid:
        logger.warning(f"VNPay signature mismatch for TxnRef {params.get('vnp_TxnRef')}")
    return is_valid


# --- MoMo ---

def momo_raw_signature(data: Mapping[str, Any], access_key: str) -> str:
    parts = [f"accessKey={access_key}"]
    for field in MOMO_RESULT_FIELDS:
        value = data.get(field)
        parts.append(f"{field}={'' if value is None else value}")
    return "&".join(parts)


def sign_momo(data: Mapping[str, Any], access_key: str, secret_key: str) -> str:
    return _hmac_hex(secret_key, momo_raw_signature(data, access_key), hashlib.sha256)


def verify_momo(data: Mapping[str, Any], access_key: str, secret_key: str) -> bool:
    try:
        calculated = sign_momo(data, access_key, secret_key)
    except PaymentSignatureError as e:
        logger.error(f"MoMo signature check impossible: {e}")
        return False
    is_valid = _signatures_match(data.get("signature"), calculated)
    if not is_valid:
        logger.warning(f"MoMo signature mismatch for orderId {data.get('orderId')}")
    return is_valid


def parse_gateway_order_ref(reference: Optional[str]) -> Optional[int]:
    """
    Номер заказа WooCommerce из ссылки шлюза вида "<order_id>_<timestamp>".
    Возвращает None, если ссылка пустая или некорректная.
    """
    if not reference:
        return None
    head = str(reference).split("_", 1)[0]
    try:
        order_id = int(head)
    except ValueError:
        return None
    return order_id if order_id > 0 else None

