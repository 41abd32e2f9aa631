import json

import httpx
import pytest

from storefront.models.review import Review, ReviewStatus
from storefront.services.woocommerce import WooCommerceService, WooCommerceServiceError

BASE_URL = "https://cms.example.test/wp-json/wc/v3"


def make_service(handler):
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return WooCommerceService(base_url=BASE_URL, consumer_key="ck", consumer_secret="cs", client=client)


class TestRequestErrors:
    async def test_woocommerce_error_message_is_kept(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400,
                json={"code": "woocommerce_rest_invalid", "message": "Invalid status", "data": {"status": 400}},
            )

        service = make_service(handler)

        with pytest.raises(WooCommerceServiceError) as exc_info:
            await service.update_order_status(1, "bogus")

        assert exc_info.value.status_code == 400
        assert "Invalid status" in exc_info.value.message
        assert exc_info.value.details == {"status": 400}
        await service.close_client()

    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        service = make_service(handler)

        with pytest.raises(WooCommerceServiceError) as exc_info:
            await service.get_coupon_by_code("SALE10")

        assert exc_info.value.status_code is None
        await service.close_client()

    async def test_order_not_found_is_none(self):
        service = make_service(lambda request: httpx.Response(404, json={"code": "woocommerce_rest_shop_order_invalid_id"}))

        assert await service.get_order(999) is None
        await service.close_client()


class TestEndpoints:
    async def test_coupon_lookup_by_code(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            return httpx.Response(200, json=[{"id": 5, "code": "sale10"}])

        service = make_service(handler)

        coupon = await service.get_coupon_by_code("SALE10")

        assert coupon == {"id": 5, "code": "sale10"}
        assert seen["url"].path == "/wp-json/wc/v3/coupons"
        assert seen["url"].params["code"] == "SALE10"
        await service.close_client()

    async def test_unknown_coupon(self):
        service = make_service(lambda request: httpx.Response(200, json=[]))

        assert await service.get_coupon_by_code("NOPE") is None
        await service.close_client()

    async def test_get_orders_joins_statuses(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = request.url.params
            return httpx.Response(200, json=[], headers={"x-wp-total": "0"})

        service = make_service(handler)

        orders, headers = await service.get_orders(status=["completed", "processing"], search="a@example.com")

        assert orders == []
        assert headers["x-wp-total"] == "0"
        assert seen["params"]["status"] == "completed,processing"
        assert seen["params"]["search"] == "a@example.com"
        assert "customer" not in seen["params"]
        await service.close_client()

    async def test_mark_order_paid(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": 7, "status": "processing"})

        service = make_service(handler)

        await service.mark_order_paid(7, transaction_id="7_1700000000")

        assert seen["method"] == "PUT"
        assert seen["body"] == {"status": "processing", "set_paid": True, "transaction_id": "7_1700000000"}
        await service.close_client()

    async def test_new_review_sent_on_hold(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": 3, **seen["body"]})

        service = make_service(handler)
        review = Review(
            product_id=9,
            rating=5,
            review="Tốt",
            reviewer="Lan",
            reviewer_email="lan@example.com",
            status=ReviewStatus.PENDING,
        )

        created = await service.create_product_review(review)

        assert seen["body"]["status"] == "hold"
        assert seen["body"]["product_id"] == 9
        assert created["id"] == 3
        await service.close_client()

    async def test_product_not_found_is_none(self):
        service = make_service(lambda request: httpx.Response(404, json={"code": "woocommerce_rest_product_invalid_id"}))

        assert await service.get_product(999) is None
        await service.close_client()

    async def test_product_variations(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            return httpx.Response(200, json=[{"id": 1, "sku": "AO-M"}])

        service = make_service(handler)

        assert await service.get_product_variations(77) == [{"id": 1, "sku": "AO-M"}]
        assert seen["url"].path.endswith("/products/77/variations")
        assert seen["url"].params["per_page"] == "100"
        await service.close_client()

    async def test_update_product_stock_status(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": 77, "stock_status": "outofstock"})

        service = make_service(handler)

        updated = await service.update_product_stock_status(77, "outofstock")

        assert updated["stock_status"] == "outofstock"
        assert seen == {"method": "PUT", "body": {"stock_status": "outofstock"}}
        await service.close_client()
