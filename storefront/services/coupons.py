# storefront/services/coupons.py
"""
Проверка применимости купона к корзине.

Все функции чистые: результат зависит только от аргументов, исключения
для бизнес-отказов не выбрасываются.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from storefront.models.coupon import (
    Cart,
    CartItem,
    Coupon,
    CouponRestrictions,
    CouponValidationResult,
    DiscountType,
)

logger = logging.getLogger(__name__)

COUPON_VALID_MESSAGE = "Mã giảm giá hợp lệ."


def _format_vnd(amount: float) -> str:
    # 100000 -> "100.000"
    return f"{amount:,.0f}".replace(",", ".")


def _invalid(error_code: str, message: str) -> CouponValidationResult:
    return CouponValidationResult(is_valid=False, error_code=error_code, message=message)


def _as_aware(value: datetime) -> datetime:
    # WooCommerce отдает date_expires без таймзоны, считаем такие даты UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def calculate_cart_subtotal(items: Iterable[CartItem]) -> float:
    return sum(item.price * item.quantity for item in items)


def validate_coupon_applicability(
    coupon: Coupon,
    cart: Cart,
    current_user_id: Optional[Union[int, str]] = None,
    user_usage_count: int = 0,
    now: Optional[datetime] = None,
) -> CouponValidationResult:
    """
    Проверяет ограничения купона по порядку и останавливается на первом нарушении:
    срок действия, минимальная сумма, максимальная сумма, общий лимит,
    лимит на пользователя, исключение товаров со скидкой.
    """
    restrictions = coupon.restrictions
    subtotal = cart.subtotal
    now = _as_aware(now or datetime.now(timezone.utc))

    # 1. Срок действия
    if coupon.expiry_date is not None and _as_aware(coupon.expiry_date) < now:
        return _invalid("coupon_expired", "Mã giảm giá đã hết hạn.")

    # 2. Минимальная сумма заказа
    if restrictions.minimum_amount > 0 and subtotal < restrictions.minimum_amount:
        return _invalid(
            "coupon_min_amount_not_met",
            f"Đơn hàng tối thiểu phải đạt {_format_vnd(restrictions.minimum_amount)}₫ để sử dụng mã giảm giá này.",
        )

    # 3. Максимальная сумма заказа
    if restrictions.maximum_amount is not None and restrictions.maximum_amount > 0:
        if subtotal > restrictions.maximum_amount:
            return _invalid(
                "coupon_max_amount_exceeded",
                f"Đơn hàng vượt quá giới hạn {_format_vnd(restrictions.maximum_amount)}₫ cho mã giảm giá này.",
            )

    # 4. Общий лимит использований
    if restrictions.usage_limit is not None and restrictions.usage_limit > 0:
        if restrictions.usage_count >= restrictions.usage_limit:
            return _invalid("coupon_usage_limit_reached", "Mã giảm giá này đã hết lượt sử dụng.")

    # 5. Лимит на одного пользователя (только для известного пользователя)
    if (
        current_user_id is not None
        and restrictions.usage_limit_per_user is not None
        and restrictions.usage_limit_per_user > 0
        and user_usage_count >= restrictions.usage_limit_per_user
    ):
        return _invalid("coupon_user_usage_limit_reached", "Bạn đã sử dụng hết lượt cho mã giảm giá này.")

    # 6. Купон не действует, если в корзине только товары со скидкой
    if restrictions.exclude_sale_items and cart.items and all(item.on_sale for item in cart.items):
        return _invalid(
            "coupon_not_valid_for_sale_items",
            "Mã giảm giá này không áp dụng cho sản phẩm đang giảm giá.",
        )

    return CouponValidationResult(is_valid=True, error_code=None, message=COUPON_VALID_MESSAGE)


def calculate_discount(coupon: Coupon, cart: Cart) -> float:
    """Сумма скидки для уже проверенного купона. Скидка не превышает подытог корзины."""
    eligible: List[CartItem] = [
        item for item in cart.items
        if not (coupon.restrictions.exclude_sale_items and item.on_sale)
    ]

    if coupon.discount_type == DiscountType.PERCENT:
        base = calculate_cart_subtotal(eligible) if coupon.restrictions.exclude_sale_items else cart.subtotal
        discount = base * min(coupon.amount, 100) / 100
    elif coupon.discount_type == DiscountType.FIXED_PRODUCT:
        discount = 0.0
        for item in eligible:
            if coupon.product_ids and item.product_id not in coupon.product_ids:
                continue
            discount += min(coupon.amount, item.price) * item.quantity
    else:
        discount = coupon.amount

    return round(max(0.0, min(discount, cart.subtotal)), 2)


def _parse_amount(value: Any) -> float:
    # WooCommerce отдает суммы строками: "100000.00", пустая строка = не задано
    if value in (None, ""):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Could not parse coupon amount: {value!r}")
        return 0.0


def _parse_expiry(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return _as_aware(datetime.fromisoformat(str(value).replace('Z', '+00:00')))
    except ValueError:
        logger.warning(f"Could not parse coupon date_expires: {value!r}")
        return None


def coupon_from_woocommerce(data: Dict[str, Any]) -> Coupon:
    """Преобразует купон из WooCommerce REST API (wc/v3/coupons) в модель Coupon."""
    maximum_amount = _parse_amount(data.get('maximum_amount'))
    discount_type = data.get('discount_type') or DiscountType.FIXED_CART.value
    try:
        discount_type = DiscountType(discount_type)
    except ValueError:
        logger.warning(f"Unknown coupon discount_type '{discount_type}', treating as fixed_cart")
        discount_type = DiscountType.FIXED_CART

    return Coupon(
        id=data.get('id'),
        code=data.get('code', ''),
        discount_type=discount_type,
        amount=_parse_amount(data.get('amount')),
        free_shipping=bool(data.get('free_shipping', False)),
        restrictions=CouponRestrictions(
            minimum_amount=_parse_amount(data.get('minimum_amount')),
            maximum_amount=maximum_amount or None,
            usage_limit=data.get('usage_limit'),
            usage_limit_per_user=data.get('usage_limit_per_user'),
            usage_count=data.get('usage_count') or 0,
            exclude_sale_items=bool(data.get('exclude_sale_items', False)),
            individual_use=bool(data.get('individual_use', False)),
        ),
        expiry_date=_parse_expiry(data.get('date_expires_gmt') or data.get('date_expires')),
        product_ids=data.get('product_ids') or [],
    )


def count_user_usage(
    coupon_data: Dict[str, Any],
    user_id: Optional[Union[int, str]] = None,
    email: Optional[str] = None,
) -> int:
    """
    Считает, сколько раз пользователь уже применил купон.
    В used_by WooCommerce хранит ID пользователей и email гостей (строками).
    """
    identifiers = set()
    if user_id is not None:
        identifiers.add(str(user_id))
    if email:
        identifiers.add(email.strip().lower())
    if not identifiers:
        return 0
    return sum(1 for entry in coupon_data.get('used_by') or [] if str(entry).strip().lower() in identifiers)
