# storefront/dependencies.py
import hmac
import logging

from fastapi import HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from storefront.core.config import Settings, settings
from storefront.services.content_cache import ContentCache
from storefront.services.revalidation import RevalidationNotifier
from storefront.services.woocommerce import WooCommerceService
from storefront.services.wordpress import WordPressClient

logger = logging.getLogger(__name__)

# Схема для заголовка X-Admin-API-Key
api_key_header_admin = APIKeyHeader(name="X-Admin-API-Key", auto_error=False)


def get_settings() -> Settings:
    return settings


async def verify_admin_api_key(api_key: str = Security(api_key_header_admin)):
    """
    Проверка секретного ключа доступа к админским API.
    Сравнивает значение из заголовка X-Admin-API-Key с ключом из настроек.
    """
    if not settings.ADMIN_API_KEY:
        # Ключ не настроен на сервере - админка закрыта
        logger.critical("Admin API Key is not configured on the server!")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Chức năng quản trị tạm thời không khả dụng."
        )
    if not api_key or not hmac.compare_digest(api_key.encode('utf-8'), settings.ADMIN_API_KEY.encode('utf-8')):
        logger.warning("Invalid or missing Admin API Key received.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Khóa API quản trị không hợp lệ hoặc bị thiếu."
        )
    return True


def _state_service(request: Request, name: str, service_type, detail: str):
    service = getattr(request.app.state, name, None)
    if not isinstance(service, service_type):
        logger.error(f"Service '{name}' is not available on app.state")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
    return service


async def get_woocommerce_service(request: Request) -> WooCommerceService:
    return _state_service(request, 'woocommerce_service', WooCommerceService, "Dịch vụ WooCommerce không khả dụng.")


async def get_wordpress_client(request: Request) -> WordPressClient:
    return _state_service(request, 'wordpress_client', WordPressClient, "Dịch vụ nội dung không khả dụng.")


async def get_content_cache(request: Request) -> ContentCache:
    return _state_service(request, 'content_cache', ContentCache, "Bộ nhớ đệm nội dung không khả dụng.")


async def get_revalidation_notifier(request: Request) -> RevalidationNotifier:
    return _state_service(request, 'revalidation_notifier', RevalidationNotifier, "Dịch vụ làm mới nội dung không khả dụng.")
