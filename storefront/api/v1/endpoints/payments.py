# storefront/api/v1/endpoints/payments.py
import json
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from storefront.dependencies import get_woocommerce_service
from storefront.services.payments import handle_momo_ipn, handle_vnpay_ipn
from storefront.services.woocommerce import WooCommerceService, WooCommerceServiceError

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/vnpay/ipn", summary="VNPay IPN")
async def vnpay_ipn(
    request: Request,
    wc_service: WooCommerceService = Depends(get_woocommerce_service),
):
    """VNPay всегда ждет 200 и JSON {RspCode, Message}."""
    try:
        return await handle_vnpay_ipn(dict(request.query_params), wc_service)
    except WooCommerceServiceError as e:
        logger.error(f"WooCommerce error while processing VNPay IPN: {e.message}")
        return {"RspCode": "99", "Message": "Unknown error"}


@router.post("/momo/ipn", summary="MoMo IPN")
async def momo_ipn(
    request: Request,
    wc_service: WooCommerceService = Depends(get_woocommerce_service),
):
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        data = None

    try:
        result = await handle_momo_ipn(data, wc_service)
    except WooCommerceServiceError as e:
        logger.error(f"WooCommerce error while processing MoMo IPN: {e.message}")
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"message": "Service unavailable"})

    if result.status_code == status.HTTP_204_NO_CONTENT:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return JSONResponse(status_code=result.status_code, content={"message": result.message})
