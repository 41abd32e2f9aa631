"""
Общие фикстуры тестов.

Переменные окружения выставляются до импорта storefront: settings создается при импорте.
"""
import os
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

os.environ["WORDPRESS_GRAPHQL_ENDPOINT"] = "https://cms.example.test/graphql"
os.environ["WORDPRESS_API_URL"] = "https://cms.example.test"
os.environ["REVALIDATE_SECRET"] = "test-revalidate-secret-0123456789abcdef"
os.environ["SITE_URL"] = "https://shop.example.test"
os.environ["SITE_NAME"] = "Cửa hàng Demo"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["WOOCOMMERCE_KEY"] = "ck_test"
os.environ["WOOCOMMERCE_SECRET"] = "cs_test"
os.environ["VNPAY_TMN_CODE"] = "DEMO0001"
os.environ["VNPAY_HASH_SECRET"] = "VNPAYTESTSECRET"
os.environ["MOMO_PARTNER_CODE"] = "MOMODEMO"
os.environ["MOMO_ACCESS_KEY"] = "momo-access"
os.environ["MOMO_SECRET_KEY"] = "momo-secret"
os.environ["NEXTJS_REVALIDATE_URL"] = ""
os.environ["LOGGING_LEVEL"] = "WARNING"

from storefront import dependencies  # noqa: E402
from storefront.main import app  # noqa: E402
from storefront.services.content_cache import ContentCache  # noqa: E402

ADMIN_HEADERS = {"X-Admin-API-Key": "test-admin-key"}
REVALIDATE_SECRET = os.environ["REVALIDATE_SECRET"]


@pytest.fixture
def wc_service():
    """Мок WooCommerceService: все сетевые методы - AsyncMock."""
    service = MagicMock()
    service.get_coupon_by_code = AsyncMock(return_value=None)
    service.get_order = AsyncMock(return_value=None)
    service.get_orders = AsyncMock(return_value=([], {}))
    service.update_order_status = AsyncMock()
    service.mark_order_paid = AsyncMock(return_value={})
    service.add_order_note = AsyncMock(return_value={})
    service.get_product_reviews = AsyncMock(return_value=[])
    service.create_product_review = AsyncMock()
    service.get_product = AsyncMock(return_value=None)
    service.get_product_variations = AsyncMock(return_value=[])
    service.update_product_stock_status = AsyncMock(return_value={})
    return service


@pytest.fixture
def wp_client():
    client = MagicMock()
    client.get_posts = AsyncMock()
    client.get_post_by_slug = AsyncMock(return_value=None)
    client.get_page_by_slug = AsyncMock(return_value=None)
    client.get_pages = AsyncMock(return_value=[])
    client.get_menu_items = AsyncMock(return_value=[])
    return client


@pytest.fixture
def notifier():
    mock = MagicMock()
    mock.send = AsyncMock(return_value=True)
    mock.trigger = MagicMock(return_value=None)
    return mock


@pytest.fixture
def content_cache():
    return ContentCache(default_ttl=60)


@pytest.fixture
def client(wc_service, wp_client, notifier, content_cache):
    app.dependency_overrides[dependencies.get_woocommerce_service] = lambda: wc_service
    app.dependency_overrides[dependencies.get_wordpress_client] = lambda: wp_client
    app.dependency_overrides[dependencies.get_revalidation_notifier] = lambda: notifier
    app.dependency_overrides[dependencies.get_content_cache] = lambda: content_cache
    # Без with: lifespan не запускается, реальные HTTP-клиенты не создаются
    yield TestClient(app)
    app.dependency_overrides.clear()
