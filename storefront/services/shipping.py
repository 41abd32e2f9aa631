# storefront/services/shipping.py
"""
Зоны доставки по Вьетнаму и расчет стоимости.

Хошимин (SG) и Ханой (HN) - фиксированный тариф, остальные провинции -
базовый тариф плюс надбавка за каждые начатые 500 г сверх первых.
"""
import logging
import math
from typing import Optional

from storefront.core.config import settings
from storefront.models.shipping import ShippingQuote, ShippingQuoteRequest, ShippingZone

logger = logging.getLogger(__name__)

ZONE_HCM = ShippingZone(name="Hồ Chí Minh", type="flat_rate", rate=25000)
ZONE_HANOI = ShippingZone(name="Hà Nội", type="flat_rate", rate=30000)
ZONE_OTHER_PROVINCES = ShippingZone(
    name="Tỉnh Thành Khác",
    type="weight_based",
    base_rate=35000,
    weight_rate=5000,
    weight_unit=500,
)

_STATE_ZONES = {"SG": ZONE_HCM, "HN": ZONE_HANOI}


def get_shipping_zone_for_address(country: str, state: str) -> Optional[ShippingZone]:
    """Зона для адреса. Доставка только по Вьетнаму, для других стран - None."""
    if country != "VN":
        return None
    return _STATE_ZONES.get(state, ZONE_OTHER_PROVINCES)


def qualifies_for_free_shipping(subtotal: float, threshold: Optional[int] = None) -> bool:
    threshold = settings.FREE_SHIPPING_THRESHOLD if threshold is None else threshold
    return subtotal >= threshold


def amount_to_free_shipping(subtotal: float, threshold: Optional[int] = None) -> float:
    threshold = settings.FREE_SHIPPING_THRESHOLD if threshold is None else threshold
    return max(0.0, threshold - subtotal)


def calculate_shipping_cost(
    zone: Optional[ShippingZone],
    weight_grams: float = 0,
    subtotal: float = 0,
    threshold: Optional[int] = None,
) -> int:
    if qualifies_for_free_shipping(subtotal, threshold):
        return 0
    if zone is None:
        return 0

    if zone.type == "flat_rate":
        return zone.rate

    # Первые weight_unit грамм входят в базовый тариф
    units = math.ceil(weight_grams / zone.weight_unit) if weight_grams > 0 else 0
    weight_cost = (units - 1) * zone.weight_rate if units > 0 else 0
    return zone.base_rate + weight_cost


def quote_shipping(request: ShippingQuoteRequest, threshold: Optional[int] = None) -> ShippingQuote:
    threshold = settings.FREE_SHIPPING_THRESHOLD if threshold is None else threshold
    zone = get_shipping_zone_for_address(request.country, request.state)
    cost = calculate_shipping_cost(zone, request.weight_grams, request.subtotal, threshold)
    logger.debug(
        f"Shipping quote: country={request.country}, state={request.state}, "
        f"zone={zone.name if zone else None}, cost={cost}"
    )
    return ShippingQuote(
        zone=zone,
        cost=cost,
        free_shipping_applied=qualifies_for_free_shipping(request.subtotal, threshold),
        threshold=threshold,
        amount_to_free_shipping=amount_to_free_shipping(request.subtotal, threshold),
    )
