# storefront/services/orders.py
import logging
from typing import Any, Dict, List, Union

from storefront.models.common import Address, CustomerDetails, MetaData
from storefront.models.order import (
    LineItem,
    Order,
    OrderStatus,
    OrderTotals,
    OrderValidationResult,
    TransitionValidationResult,
)

logger = logging.getLogger(__name__)

# Допустимые переходы статусов (включая собственный статус "shipped")
VALID_TRANSITIONS: Dict[str, List[str]] = {
    OrderStatus.PENDING.value: ["processing", "on-hold", "cancelled", "failed"],
    OrderStatus.PROCESSING.value: ["shipped", "completed", "on-hold", "cancelled", "refunded"],
    OrderStatus.SHIPPED.value: ["completed", "refunded"],
    OrderStatus.ON_HOLD.value: ["processing", "pending", "cancelled", "failed"],
    OrderStatus.COMPLETED.value: ["refunded"],
    OrderStatus.CANCELLED.value: ["pending", "processing"],
    OrderStatus.REFUNDED.value: [],
    OrderStatus.FAILED.value: ["pending", "processing", "cancelled"],
}


def validate_order_completeness(order: Order) -> OrderValidationResult:
    """
    Проверяет, что в заказе есть все данные для обработки.

    Имя, email и телефон могут быть как в данных покупателя, так и в биллинге.
    Адрес доставки проверяется только если заказ требует доставки.
    Пустой список ошибок означает, что заказ полный.
    """
    errors: List[str] = []
    customer, billing, shipping = order.customer, order.billing, order.shipping

    if not (customer.first_name or customer.last_name or billing.first_name or billing.last_name):
        errors.append("missing_customer_name")

    if not (customer.email or billing.email):
        errors.append("missing_customer_email")

    if not (customer.phone or billing.phone):
        errors.append("missing_customer_phone")

    if not billing.address_1:
        errors.append("missing_billing_address")
    if not billing.city:
        errors.append("missing_billing_city")

    if order.needs_shipping:
        if not shipping.address_1:
            errors.append("missing_shipping_address")
        if not shipping.city:
            errors.append("missing_shipping_city")

    if not order.line_items:
        errors.append("missing_line_items")
    elif any(not item.product_id or item.product_id <= 0 for item in order.line_items):
        errors.append("invalid_line_item_product")

    return OrderValidationResult(valid=not errors, errors=errors)


def _normalize_status(status: Union[str, OrderStatus]) -> str:
    value = status.value if isinstance(status, OrderStatus) else str(status)
    return value[3:] if value.startswith("wc-") else value


def is_valid_status_transition(from_status: Union[str, OrderStatus], to_status: Union[str, OrderStatus]) -> bool:
    from_status = _normalize_status(from_status)
    to_status = _normalize_status(to_status)
    # Для неизвестных (пользовательских) статусов переход не ограничиваем
    if from_status not in VALID_TRANSITIONS:
        return True
    return to_status in VALID_TRANSITIONS[from_status]


def validate_status_transition(
    from_status: Union[str, OrderStatus], to_status: Union[str, OrderStatus]
) -> TransitionValidationResult:
    from_status = _normalize_status(from_status)
    to_status = _normalize_status(to_status)
    if from_status == to_status:
        return TransitionValidationResult(valid=False, reason="Status unchanged - not a valid transition")
    if is_valid_status_transition(from_status, to_status):
        return TransitionValidationResult(valid=True, reason=f"Transition from {from_status} to {to_status} is allowed")
    return TransitionValidationResult(valid=False, reason=f"Cannot transition from {from_status} to {to_status}")


def get_valid_transitions_from(status: Union[str, OrderStatus]) -> List[str]:
    return list(VALID_TRANSITIONS.get(_normalize_status(status), []))


def is_terminal_status(status: Union[str, OrderStatus]) -> bool:
    normalized = _normalize_status(status)
    return normalized in VALID_TRANSITIONS and not VALID_TRANSITIONS[normalized]


def _to_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def order_from_woocommerce(data: Dict[str, Any]) -> Order:
    """Преобразует заказ из WooCommerce REST API (wc/v3/orders/<id>) в модель Order."""
    billing = Address.model_validate(data.get('billing') or {})
    shipping = Address.model_validate(data.get('shipping') or {})
    line_items = [
        LineItem(
            id=item.get('id'),
            product_id=item.get('product_id'),
            variation_id=item.get('variation_id') or None,
            name=item.get('name', ''),
            quantity=item.get('quantity') or 0,
            subtotal=_to_float(item.get('subtotal')),
            total=_to_float(item.get('total')),
        )
        for item in data.get('line_items') or []
    ]
    # WooCommerce не возвращает needs_shipping; ориентируемся на строки доставки
    needs_shipping = bool(data.get('shipping_lines')) or bool(shipping.address_1 or shipping.city)

    return Order(
        id=data.get('id'),
        number=str(data.get('number') or data.get('id') or ''),
        status=data.get('status'),
        date_created=data.get('date_created'),
        date_modified=data.get('date_modified'),
        customer=CustomerDetails(
            id=data.get('customer_id') or None,
            first_name=billing.first_name,
            last_name=billing.last_name,
            email=billing.email or '',
            phone=billing.phone or '',
        ),
        billing=billing,
        shipping=shipping,
        line_items=line_items,
        totals=OrderTotals(
            subtotal=sum(item.subtotal for item in line_items),
            shipping_total=_to_float(data.get('shipping_total')),
            discount_total=_to_float(data.get('discount_total')),
            total=_to_float(data.get('total')),
            total_tax=_to_float(data.get('total_tax')),
        ),
        payment_method=data.get('payment_method') or '',
        payment_method_title=data.get('payment_method_title') or '',
        customer_note=data.get('customer_note') or '',
        needs_shipping=needs_shipping,
        meta_data=[MetaData.model_validate(m) for m in data.get('meta_data') or [] if 'key' in m],
    )
