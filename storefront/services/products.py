# storefront/services/products.py
"""
Правила целостности товаров магазина: заполненность цен, соответствие
статуса наличия остатку и корректность вариаций.
"""
from typing import Any, Dict, Iterable, List, Optional

from storefront.models.product import (
    PriceFields,
    PriceValidationResult,
    ProductAttribute,
    StockConfig,
    StockStatus,
    StockSyncResult,
    Variation,
    VariationAttribute,
    VariationIntegrityResult,
)

# stock_status в wc/v3 <-> StockStatus
_WC_TO_STOCK_STATUS = {
    "instock": StockStatus.IN_STOCK,
    "outofstock": StockStatus.OUT_OF_STOCK,
    "onbackorder": StockStatus.ON_BACKORDER,
}
_STOCK_STATUS_TO_WC = {v: k for k, v in _WC_TO_STOCK_STATUS.items()}


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def validate_price_fields(fields: PriceFields) -> PriceValidationResult:
    """
    Проверяет заполненность цен.
    sale_price обязателен при on_sale и должен быть пуст, когда скидки нет.
    """
    errors: List[str] = []
    if _is_blank(fields.regular_price):
        errors.append("missing_regular_price")
    if _is_blank(fields.price):
        errors.append("missing_price")
    if fields.on_sale and _is_blank(fields.sale_price):
        errors.append("missing_sale_price")
    if not fields.on_sale and not _is_blank(fields.sale_price):
        errors.append("unexpected_sale_price")
    return PriceValidationResult(valid=not errors, errors=errors)


def determine_stock_status(config: StockConfig) -> StockStatus:
    """Статус по остатку. Пустой остаток считается нулевым."""
    quantity = config.stock_quantity or 0
    if quantity > 0:
        return StockStatus.IN_STOCK
    if config.backorders_allowed:
        return StockStatus.ON_BACKORDER
    return StockStatus.OUT_OF_STOCK


def synchronize_stock_status(config: StockConfig, current_status: StockStatus) -> StockStatus:
    """
    Статус, который должен стоять у товара.
    Без управления остатками статус задается вручную и не меняется.
    """
    if not config.manage_stock:
        return current_status
    return determine_stock_status(config)


def validate_variations(
    variations: Iterable[Variation],
    attributes: Optional[Iterable[ProductAttribute]] = None,
) -> VariationIntegrityResult:
    """
    Проверяет вариации вариативного товара: уникальные непустые SKU,
    статус наличия, неотрицательный остаток и атрибуты.
    Если переданы атрибуты товара, каждый атрибут вариации должен быть среди них.
    """
    errors: List[str] = []

    def add(code: str):
        if code not in errors:
            errors.append(code)

    known_names = None
    if attributes is not None:
        known_names = set()
        for attribute in attributes:
            known_names.update((attribute.slug, attribute.name))

    seen_skus = set()
    for variation in variations:
        sku = variation.sku.strip()
        if not sku:
            add("missing_sku")
        elif sku in seen_skus:
            add("duplicate_sku")
        seen_skus.add(sku)

        if variation.stock_status is None:
            add("missing_stock_status")
        if variation.stock_quantity is not None and variation.stock_quantity < 0:
            add("invalid_stock_quantity")

        if not variation.attributes:
            add("missing_variation_attributes")
        for attribute in variation.attributes:
            if _is_blank(attribute.name) or _is_blank(attribute.value):
                add("missing_variation_attributes")
            elif known_names is not None and attribute.name not in known_names:
                add("unknown_variation_attribute")

    return VariationIntegrityResult(valid=not errors, errors=errors)


# --- Преобразование данных wc/v3 ---

def stock_status_from_woocommerce(value: Optional[str]) -> Optional[StockStatus]:
    return _WC_TO_STOCK_STATUS.get(value or "")


def stock_status_to_woocommerce(value: StockStatus) -> str:
    return _STOCK_STATUS_TO_WC[value]


def price_fields_from_woocommerce(data: Dict[str, Any]) -> PriceFields:
    return PriceFields(
        price=data.get("price"),
        regular_price=data.get("regular_price"),
        sale_price=data.get("sale_price"),
        on_sale=bool(data.get("on_sale")),
    )


def stock_config_from_woocommerce(data: Dict[str, Any]) -> StockConfig:
    # backorders: no | notify | yes; backorders_allowed есть не во всех версиях API
    allowed = data.get("backorders_allowed")
    if allowed is None:
        allowed = data.get("backorders", "no") != "no"
    return StockConfig(
        manage_stock=bool(data.get("manage_stock")),
        stock_quantity=data.get("stock_quantity"),
        backorders_allowed=bool(allowed),
    )


def attributes_from_woocommerce(data: Dict[str, Any]) -> List[ProductAttribute]:
    return [
        ProductAttribute(
            name=item.get("name", ""),
            # REST отдает slug не всегда; вариации ссылаются на атрибут по имени
            slug=item.get("slug") or item.get("name", ""),
            options=item.get("options") or [],
            variation=bool(item.get("variation")),
        )
        for item in data.get("attributes") or []
    ]


def variation_from_woocommerce(data: Dict[str, Any]) -> Variation:
    return Variation(
        id=data.get("id"),
        sku=data.get("sku") or "",
        price=data.get("price"),
        regular_price=data.get("regular_price"),
        sale_price=data.get("sale_price"),
        on_sale=bool(data.get("on_sale")),
        stock_status=stock_status_from_woocommerce(data.get("stock_status")),
        stock_quantity=data.get("stock_quantity"),
        attributes=[
            VariationAttribute(name=item.get("name", ""), value=item.get("option", ""))
            for item in data.get("attributes") or []
        ],
    )


def check_stock_sync(product_id: int, data: Dict[str, Any]) -> StockSyncResult:
    """Сравнивает stock_status товара из wc/v3 с тем, что следует из остатка."""
    current = stock_status_from_woocommerce(data.get("stock_status"))
    config = stock_config_from_woocommerce(data)
    if current is None:
        # Неизвестный статус при ручном управлении: берем вычисленный по остатку
        expected = determine_stock_status(config)
    else:
        expected = synchronize_stock_status(config, current)
    return StockSyncResult(
        product_id=product_id,
        current_status=current,
        expected_status=expected,
        in_sync=current == expected,
    )
