# storefront/api/v1/endpoints/products.py
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.dependencies import (
    get_revalidation_notifier,
    get_woocommerce_service,
    verify_admin_api_key,
)
from storefront.models.product import ProductIntegrityReport, StockSyncResult, VariationIntegrityResult
from storefront.models.revalidate import RevalidateContentType
from storefront.services.products import (
    attributes_from_woocommerce,
    check_stock_sync,
    price_fields_from_woocommerce,
    stock_status_to_woocommerce,
    validate_price_fields,
    validate_variations,
    variation_from_woocommerce,
)
from storefront.services.revalidation import RevalidationNotifier
from storefront.services.woocommerce import WooCommerceService, WooCommerceServiceError

logger = logging.getLogger(__name__)
router = APIRouter()


async def _load_product(wc_service: WooCommerceService, product_id: int) -> Dict[str, Any]:
    try:
        product = await wc_service.get_product(product_id)
    except WooCommerceServiceError as e:
        raise HTTPException(status_code=e.status_code or status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Không tìm thấy sản phẩm {product_id}.")
    return product


@router.get(
    "/{product_id}/integrity",
    response_model=ProductIntegrityReport,
    summary="Kiểm tra giá, tồn kho và biến thể của sản phẩm",
)
async def get_product_integrity(
    product_id: int,
    wc_service: WooCommerceService = Depends(get_woocommerce_service),
):
    product = await _load_product(wc_service, product_id)

    variations = VariationIntegrityResult(valid=True)
    if product.get("type") == "variable":
        try:
            raw_variations = await wc_service.get_product_variations(product_id)
        except WooCommerceServiceError as e:
            raise HTTPException(status_code=e.status_code or status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
        variations = validate_variations(
            [variation_from_woocommerce(item) for item in raw_variations],
            attributes_from_woocommerce(product),
        )

    report = ProductIntegrityReport(
        product_id=product_id,
        price=validate_price_fields(price_fields_from_woocommerce(product)),
        stock=check_stock_sync(product_id, product),
        variations=variations,
    )
    if not (report.price.valid and report.stock.in_sync and report.variations.valid):
        logger.info(
            f"Product {product_id} integrity issues: price={report.price.errors} "
            f"stock_in_sync={report.stock.in_sync} variations={report.variations.errors}"
        )
    return report


@router.post(
    "/{product_id}/stock/sync",
    response_model=StockSyncResult,
    summary="Đồng bộ trạng thái tồn kho theo số lượng (cho quản trị viên)",
    dependencies=[Depends(verify_admin_api_key)],
)
async def sync_product_stock_status(
    product_id: int,
    wc_service: WooCommerceService = Depends(get_woocommerce_service),
    notifier: RevalidationNotifier = Depends(get_revalidation_notifier),
):
    """
    Приводит stock_status товара в соответствие с остатком.
    После изменения фронтенду уходит вебхук ревалидации inventory.
    """
    product = await _load_product(wc_service, product_id)
    result = check_stock_sync(product_id, product)
    if result.in_sync:
        return result

    new_status = stock_status_to_woocommerce(result.expected_status)
    try:
        updated = await wc_service.update_product_stock_status(product_id, new_status)
    except WooCommerceServiceError as e:
        raise HTTPException(status_code=e.status_code or status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

    notifier.trigger(
        RevalidateContentType.INVENTORY.value,
        updated.get("slug") or product.get("slug"),
        {
            "product_id": product_id,
            "stock_status": new_status,
            "stock_quantity": updated.get("stock_quantity", product.get("stock_quantity")),
        },
    )
    return result.model_copy(update={"updated": True})
